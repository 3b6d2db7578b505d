# core/views.py

from django.http import JsonResponse
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET
import logging

from .utils import resolve_academic_year, to_plain_number, format_money

logger = logging.getLogger(__name__)


# =============================================================================
# DASHBOARD
# =============================================================================

@login_required
@require_GET
def dashboard(request):
    """Headline figures for the selected academic year"""
    from academics.stats import get_academic_dashboard_statistics
    from attendance.stats import get_attendance_summary
    from fees.stats import get_finance_summary

    academic_year = resolve_academic_year(request.GET.get('year'))

    data = {
        'success': True,
        'academic_year': academic_year.name if academic_year else None,
        'academics': get_academic_dashboard_statistics(academic_year),
        'finance': None,
    }

    if academic_year is not None:
        finance = get_finance_summary(academic_year)
        data['finance'] = {
            'total_expected': to_plain_number(finance['total_expected']),
            'total_collected': to_plain_number(finance['total_collected']),
            'outstanding': to_plain_number(finance['outstanding']),
            'formatted_outstanding': format_money(finance['outstanding']),
            'status_counts': finance['status_counts'],
            'paid_percentage': finance['paid_percentage'],
            'collection_rate': finance['collection_rate'],
        }

    attendance = get_attendance_summary()
    attendance['since'] = attendance['since'].isoformat()
    data['attendance'] = attendance

    return JsonResponse(data)
