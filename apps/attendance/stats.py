# attendance/stats.py
"""
Attendance statistics: overall rate, per-class rates and monthly trend
"""

from django.db.models import Count, Q
from django.utils import timezone
from datetime import timedelta, date
from django.conf import settings
import logging

from core.utils import calculate_percentage

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


def _month_starts(today, months):
    """First day of each of the last `months` months, oldest first"""
    starts = []
    year, month = today.year, today.month
    for _ in range(months):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(starts))


def _next_month(start):
    if start.month == 12:
        return date(start.year + 1, 1, 1)
    return date(start.year, start.month + 1, 1)


def get_attendance_summary(since=None, today=None, months=None):
    """
    Attendance figures for the dashboard.

    Args:
        since: first date counted in the overall and per-class figures,
            defaults to 30 days before today
        today: reference date, defaults to the local date
        months: months in the trend, defaults to ATTENDANCE_TREND_MONTHS

    Returns:
        dict: {
            'since': date,
            'total_records', 'present', 'absent': int,
            'attendance_percentage': int,
            'by_class': [{class_id, class_name, present, total, average}],
            'monthly_trend': [{month, label, present, total, percentage}]
        }
    """
    from .models import AttendanceRecord

    today = today or timezone.localdate()
    since = since or (today - timedelta(days=DEFAULT_WINDOW_DAYS))
    if months is None:
        months = getattr(settings, 'ATTENDANCE_TREND_MONTHS', 6)

    window = AttendanceRecord.objects.filter(attendance_date__gte=since, attendance_date__lte=today)
    totals = window.aggregate(
        total=Count('id'),
        present=Count('id', filter=Q(is_present=True)),
    )

    by_class = []
    class_rows = window.filter(student__school_class__isnull=False).values(
        'student__school_class', 'student__school_class__name'
    ).annotate(
        total=Count('id'),
        present=Count('id', filter=Q(is_present=True)),
    ).order_by('student__school_class__name')
    for row in class_rows:
        by_class.append({
            'class_id': str(row['student__school_class']),
            'class_name': row['student__school_class__name'],
            'present': row['present'],
            'total': row['total'],
            'average': calculate_percentage(row['present'], row['total']),
        })

    monthly_trend = []
    for start in _month_starts(today, months):
        month_totals = AttendanceRecord.objects.filter(
            attendance_date__gte=start,
            attendance_date__lt=_next_month(start)
        ).aggregate(
            total=Count('id'),
            present=Count('id', filter=Q(is_present=True)),
        )
        monthly_trend.append({
            'month': start.strftime('%Y-%m'),
            'label': start.strftime('%b'),
            'present': month_totals['present'],
            'total': month_totals['total'],
            'percentage': calculate_percentage(month_totals['present'], month_totals['total']),
        })

    return {
        'since': since,
        'total_records': totals['total'],
        'present': totals['present'],
        'absent': totals['total'] - totals['present'],
        'attendance_percentage': calculate_percentage(totals['present'], totals['total']),
        'by_class': by_class,
        'monthly_trend': monthly_trend,
    }


def get_student_attendance_summary(student, academic_year=None):
    """
    Present, absent and rate for one student.

    Returns:
        dict: {'present', 'absent', 'total', 'percentage'}
    """
    records = student.attendance_records.all()
    if academic_year is not None:
        records = records.filter(academic_year=academic_year)

    totals = records.aggregate(
        total=Count('id'),
        present=Count('id', filter=Q(is_present=True)),
    )
    return {
        'present': totals['present'],
        'absent': totals['total'] - totals['present'],
        'total': totals['total'],
        'percentage': calculate_percentage(totals['present'], totals['total']),
    }
