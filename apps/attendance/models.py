# attendance/models.py

from django.db import models
import datetime
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# ATTENDANCE RECORD MODEL
# =============================================================================

class AttendanceRecord(BaseModel):
    """Daily presence of one student. At most one record per student per day."""

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='attendance_records'
    )
    attendance_date = models.DateField("Date", db_index=True)
    is_present = models.BooleanField("Present", default=True)
    remarks = models.CharField("Remarks", max_length=255, blank=True)
    marked_by_id = models.CharField("Marked By", max_length=100, blank=True)
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_records'
    )

    class Meta:
        verbose_name = "Attendance Record"
        verbose_name_plural = "Attendance Records"
        ordering = ['-attendance_date', 'student__full_name']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'attendance_date'],
                name='unique_student_attendance_per_day'
            ),
        ]

    def __str__(self):
        status = "Present" if self.is_present else "Absent"
        return f"{self.student} - {self.attendance_date}: {status}"


# =============================================================================
# ATTENDANCE NOTIFICATION MODEL
# =============================================================================

class AttendanceNotification(BaseModel):
    """Per-class reminder time for marking attendance"""

    school_class = models.OneToOneField(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.CASCADE,
        related_name='attendance_notification'
    )
    notification_time = models.TimeField("Reminder Time", default=datetime.time(14, 0))
    is_enabled = models.BooleanField("Enabled", default=True)

    class Meta:
        verbose_name = "Attendance Notification"
        verbose_name_plural = "Attendance Notifications"
        ordering = ['school_class__name']

    def __str__(self):
        return f"{self.school_class} at {self.notification_time:%H:%M}"
