# fees/stats.py

"""
Fee statistics for the finance dashboard and class balance reports.
"""

from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from decimal import Decimal
import logging

from .balances import compute_balance, summarize_collections

logger = logging.getLogger(__name__)


# =============================================================================
# FINANCE SUMMARY
# =============================================================================

def get_finance_summary(academic_year, school_class=None):
    """
    Expected, collected and outstanding fees for an academic year.

    Args:
        academic_year: AcademicYear the figures are scoped to
        school_class: optional SchoolClass to narrow the figures to

    Returns:
        dict: {
            'academic_year': str,
            'total_expected', 'total_collected', 'outstanding': Decimal,
            'payment_count': int,
            'status_counts': {'paid': n, 'pending': n, 'overdue': n},
            'paid_percentage': int,
            'collection_rate': int,
            'by_class': list of per-class dicts (whole school only)
        }
    """
    from .models import FeeStructure, FeePayment

    structures = FeeStructure.objects.filter(academic_year=academic_year, is_active=True)
    payments = FeePayment.objects.filter(academic_year=academic_year)

    if school_class is not None:
        structures = structures.filter(school_class=school_class)
        payments = payments.filter(student__school_class=school_class)

    summary = summarize_collections(
        structures.values('total_fee', 'is_active'),
        payments.values('amount_paid', 'status'),
    )
    summary['academic_year'] = academic_year.name if academic_year else None

    if school_class is None:
        collected_by_class = {
            row['student__school_class']: row['collected']
            for row in payments.values('student__school_class').annotate(
                collected=Coalesce(Sum('amount_paid'), Decimal('0.00'))
            )
        }
        summary['by_class'] = [
            {
                'class_id': str(structure.school_class_id),
                'class_name': structure.school_class.name,
                'total_fee': structure.total_fee,
                'collected': collected_by_class.get(structure.school_class_id, Decimal('0.00')),
            }
            for structure in structures.select_related('school_class').order_by('school_class__name')
        ]

    return summary


# =============================================================================
# CLASS BALANCE REPORT
# =============================================================================

def get_class_balance_report(school_class, academic_year):
    """
    Balance row for every active student in a class.

    Returns:
        dict: {
            'fee_structure': FeeStructure or None,
            'rows': list of {student_id, student_name, admission_number,
                   total_fee, total_paid, balance, is_settled, has_structure,
                   status},
            'counts': {status: count}
        }
    """
    from .models import FeePayment
    from .services import FeeStructureService

    structure = FeeStructureService.get_active_structure(school_class, academic_year)
    students = school_class.students.filter(status='active').order_by('full_name')

    payments_by_student = {}
    payments = FeePayment.objects.filter(
        academic_year=academic_year,
        student__in=students
    ).values('student_id', 'amount_paid')
    for payment in payments:
        payments_by_student.setdefault(payment['student_id'], []).append(payment)

    rows = []
    counts = {}
    for student in students:
        balance = compute_balance(structure, payments_by_student.get(student.pk, []))
        rows.append(dict(
            balance,
            student_id=str(student.pk),
            student_name=student.full_name,
            admission_number=student.admission_number,
        ))
        counts[balance['status']] = counts.get(balance['status'], 0) + 1

    return {
        'fee_structure': structure,
        'rows': rows,
        'counts': counts,
    }


def get_payment_method_breakdown(academic_year):
    """Count and total of payments per payment method for a year"""
    from .models import FeePayment

    rows = FeePayment.objects.filter(academic_year=academic_year).values('payment_method').annotate(
        count=Count('id'),
        total=Coalesce(Sum('amount_paid'), Decimal('0.00'))
    ).order_by('payment_method')

    return [
        {
            'payment_method': row['payment_method'] or 'unspecified',
            'count': row['count'],
            'total': row['total'],
        }
        for row in rows
    ]
