# attendance/services.py

"""
Attendance Services

Daily attendance marking per class and reminder settings.
"""

from django.db import transaction
from django.core.exceptions import ValidationError
from django.utils import timezone
import datetime
import logging

from .models import AttendanceRecord, AttendanceNotification

logger = logging.getLogger(__name__)

PRESENT_VALUES = {'true', '1'}
ABSENT_VALUES = {'false', '0'}


def parse_presence(value):
    """True, False, 1, 0 or their string forms -> bool. Raises ValueError otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in PRESENT_VALUES:
            return True
        if text in ABSENT_VALUES:
            return False
    raise ValueError(f"Invalid presence value: {value!r}")


class AttendanceService:
    """Class attendance marking"""

    @staticmethod
    @transaction.atomic
    def mark_class_attendance(school_class, attendance_date, presence_map, remarks_map=None,
                              marked_by=None, academic_year=None):
        """
        Save attendance for every active student in a class on one day.

        Existing records for the class and day are replaced. A student
        missing from presence_map is marked absent.

        Args:
            school_class: SchoolClass instance
            attendance_date: date being marked (not in the future)
            presence_map: {student_id: bool}; "true"/"false" and 1/0 also accepted
            remarks_map: optional {student_id: str}
            marked_by: optional user; stored as its id
            academic_year: AcademicYear the day belongs to

        Returns:
            dict: {'present': int, 'absent': int, 'total': int}

        Raises:
            ValidationError: future date, presence values that are not
                booleans, or ids of students not in the class
        """
        if attendance_date > timezone.localdate():
            raise ValidationError("Attendance cannot be marked for a future date", code='future_date')

        remarks_map = remarks_map or {}
        try:
            presence = {str(key): parse_presence(value) for key, value in (presence_map or {}).items()}
        except ValueError as e:
            raise ValidationError(str(e), code='invalid_request')
        remarks = {str(key): (value or '') for key, value in remarks_map.items()}

        students = list(school_class.students.filter(status='active').order_by('full_name'))
        student_ids = {str(student.pk) for student in students}

        unknown = set(presence) - student_ids
        if unknown:
            raise ValidationError(
                f"{len(unknown)} student(s) are not in {school_class.name}",
                code='unknown_student'
            )

        deleted, _ = AttendanceRecord.objects.filter(
            attendance_date=attendance_date,
            student__in=students
        ).delete()

        marked_by_id = str(marked_by.pk) if marked_by is not None and getattr(marked_by, 'pk', None) else ''
        records = [
            AttendanceRecord(
                student=student,
                attendance_date=attendance_date,
                is_present=presence.get(str(student.pk), False),
                remarks=remarks.get(str(student.pk), ''),
                marked_by_id=marked_by_id,
                academic_year=academic_year,
            )
            for student in students
        ]
        for record in records:
            record.save()

        present = sum(1 for record in records if record.is_present)
        result = {'present': present, 'absent': len(records) - present, 'total': len(records)}

        action = "Replaced" if deleted else "Marked"
        logger.info(
            f"{action} attendance for {school_class.name} on {attendance_date}: "
            f"{result['present']}/{result['total']} present"
        )
        return result

    @staticmethod
    def get_classes_missing_attendance(attendance_date=None):
        """
        Classes with active students but no attendance for the day.

        Returns:
            QuerySet of SchoolClass ordered by name
        """
        from academics.models import SchoolClass

        attendance_date = attendance_date or timezone.localdate()

        marked_class_ids = AttendanceRecord.objects.filter(
            attendance_date=attendance_date,
            student__school_class__isnull=False
        ).values_list('student__school_class_id', flat=True)

        return SchoolClass.objects.filter(
            students__status='active'
        ).exclude(pk__in=marked_class_ids).distinct().order_by('name')

    @staticmethod
    @transaction.atomic
    def update_notification_settings(school_class, notification_time=None, is_enabled=True):
        """
        Create or update a class's attendance reminder.

        Args:
            notification_time: datetime.time or "HH:MM" string, defaults to 14:00

        Returns:
            AttendanceNotification instance
        """
        if isinstance(notification_time, str):
            try:
                notification_time = datetime.datetime.strptime(notification_time.strip()[:5], '%H:%M').time()
            except ValueError:
                raise ValidationError("Reminder time must be in HH:MM format", code='invalid_time')
        if notification_time is None:
            notification_time = datetime.time(14, 0)

        notification, created = AttendanceNotification.objects.update_or_create(
            school_class=school_class,
            defaults={'notification_time': notification_time, 'is_enabled': bool(is_enabled)}
        )

        logger.info(
            f"{'Created' if created else 'Updated'} attendance reminder for "
            f"{school_class.name} at {notification_time:%H:%M} (enabled={notification.is_enabled})"
        )
        return notification

    @staticmethod
    def get_due_reminders(now=None):
        """
        Enabled reminders whose time has passed today for classes still
        missing attendance.

        Returns:
            list of AttendanceNotification
        """
        now = now or timezone.localtime()
        missing_ids = set(
            AttendanceService.get_classes_missing_attendance(now.date()).values_list('pk', flat=True)
        )
        notifications = AttendanceNotification.objects.filter(
            is_enabled=True,
            notification_time__lte=now.time()
        ).select_related('school_class')

        return [n for n in notifications if n.school_class_id in missing_ids]
