# attendance/ajax_views.py

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST
from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date
import logging

from academics.models import SchoolClass
from core.utils import parse_filters, resolve_academic_year, get_request_data, validation_error_response
from .services import AttendanceService
from .stats import get_attendance_summary

logger = logging.getLogger(__name__)


def _parse_date_param(value):
    """'2025-03-01' -> date; None when blank. Raises ValueError when malformed."""
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value}")
    return parsed


# =============================================================================
# ATTENDANCE SUMMARY
# =============================================================================

@login_required
@require_GET
def attendance_summary(request):
    """Overall rate, per-class rates and monthly trend"""
    filters = parse_filters(request, ['since'])
    try:
        since = _parse_date_param(filters['since'])
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_date'}, status=400)

    summary = get_attendance_summary(since=since)
    summary['since'] = summary['since'].isoformat()

    return JsonResponse({'success': True, 'summary': summary})


# =============================================================================
# ATTENDANCE MARKING
# =============================================================================

@login_required
@require_POST
def mark_class_attendance(request, class_id):
    """
    Save a class register.

    Body: {"date": "YYYY-MM-DD", "attendance": {student_id: true/false},
           "remarks": {student_id: "..."}, "year": academic year id}
    """
    school_class = get_object_or_404(SchoolClass, pk=class_id)

    try:
        data = get_request_data(request)
        attendance_date = _parse_date_param(data.get('date')) or timezone.localdate()
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_request'}, status=400)

    presence_map = data.get('attendance') or {}
    remarks_map = data.get('remarks') or {}
    if not isinstance(presence_map, dict) or not isinstance(remarks_map, dict):
        return JsonResponse(
            {'success': False, 'error': 'Attendance and remarks must be objects keyed by student id.',
             'code': 'invalid_request'},
            status=400
        )

    academic_year = resolve_academic_year(data.get('year'))

    try:
        result = AttendanceService.mark_class_attendance(
            school_class,
            attendance_date,
            presence_map,
            remarks_map=remarks_map,
            marked_by=request.user,
            academic_year=academic_year,
        )
    except ValidationError as e:
        return validation_error_response(e)

    return JsonResponse({
        'success': True,
        'message': f"Attendance saved for {school_class.name}",
        'date': attendance_date.isoformat(),
        'result': result,
    })


# =============================================================================
# MISSING ATTENDANCE
# =============================================================================

@login_required
@require_GET
def missing_attendance(request):
    """Classes with no attendance marked for a day (default today)"""
    try:
        attendance_date = _parse_date_param(request.GET.get('date', '').strip()) or timezone.localdate()
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_date'}, status=400)

    classes = AttendanceService.get_classes_missing_attendance(attendance_date)
    due_ids = set()
    if attendance_date == timezone.localdate():
        due_ids = {n.school_class_id for n in AttendanceService.get_due_reminders()}

    return JsonResponse({
        'success': True,
        'date': attendance_date.isoformat(),
        'classes': [
            {
                'class_id': str(school_class.pk),
                'class_name': school_class.name,
                'reminder_due': school_class.pk in due_ids,
            }
            for school_class in classes
        ],
    })


@login_required
@require_POST
def update_notification_settings(request, class_id):
    """Set a class's attendance reminder time"""
    school_class = get_object_or_404(SchoolClass, pk=class_id)
    try:
        data = get_request_data(request)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_json'}, status=400)

    is_enabled = data.get('is_enabled', True)
    if isinstance(is_enabled, str):
        is_enabled = is_enabled.lower() in ('1', 'true', 'yes', 'on')

    try:
        notification = AttendanceService.update_notification_settings(
            school_class,
            data.get('notification_time'),
            is_enabled,
        )
    except ValidationError as e:
        return validation_error_response(e)

    return JsonResponse({
        'success': True,
        'notification': {
            'class_id': str(school_class.pk),
            'notification_time': notification.notification_time.strftime('%H:%M'),
            'is_enabled': notification.is_enabled,
        },
    })
