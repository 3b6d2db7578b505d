# fees/ajax_views.py

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_GET, require_POST
from django.core.exceptions import ValidationError
import logging

from students.models import Student
from academics.models import SchoolClass
from core.utils import (
    resolve_academic_year, to_plain_number, format_money, get_request_data,
    validation_error_response, form_error_response,
)
from .forms import FeeStructureForm, FeePaymentForm
from .services import FeeStructureService, PaymentService
from .stats import get_finance_summary, get_payment_method_breakdown
from .utils import get_balance_status_label

logger = logging.getLogger(__name__)

MONEY_KEYS = ('total_fee', 'total_paid', 'balance', 'total_expected', 'total_collected',
              'outstanding', 'collected', 'total')


def _plain(row):
    """Money values in a result dict as plain numbers"""
    return {
        key: to_plain_number(value) if key in MONEY_KEYS else value
        for key, value in row.items()
    }


def _missing_year_response():
    return JsonResponse(
        {'success': False, 'error': 'No academic year selected or active.', 'code': 'no_academic_year'},
        status=400
    )


def serialize_balance(balance):
    data = _plain({key: value for key, value in balance.items() if key != 'fee_structure'})
    data['label'] = get_balance_status_label(balance)
    data['formatted_balance'] = format_money(balance['balance'])
    return data


def serialize_fee_structure(structure):
    return {
        'id': str(structure.pk),
        'class_id': str(structure.school_class_id),
        'class_name': structure.school_class.name,
        'academic_year': structure.academic_year.name,
        'tuition_fee': to_plain_number(structure.tuition_fee),
        'exam_fee': to_plain_number(structure.exam_fee),
        'other_fee': to_plain_number(structure.other_fee),
        'total_fee': to_plain_number(structure.total_fee),
        'is_active': structure.is_active,
    }


# =============================================================================
# FINANCE SUMMARY
# =============================================================================

@login_required
@require_GET
def finance_summary(request):
    """Expected, collected and outstanding fees for the selected year"""
    academic_year = resolve_academic_year(request.GET.get('year'))
    if academic_year is None:
        return _missing_year_response()

    school_class = None
    class_id = request.GET.get('class')
    if class_id:
        try:
            school_class = get_object_or_404(SchoolClass, pk=class_id)
        except ValidationError:
            return JsonResponse({'success': False, 'error': 'Invalid class id.', 'code': 'invalid_class'}, status=400)

    summary = get_finance_summary(academic_year, school_class)

    data = _plain(summary)
    if 'by_class' in summary:
        data['by_class'] = [_plain(row) for row in summary['by_class']]
    data['payment_methods'] = [_plain(row) for row in get_payment_method_breakdown(academic_year)]
    data['formatted'] = {
        'total_expected': format_money(summary['total_expected']),
        'total_collected': format_money(summary['total_collected']),
        'outstanding': format_money(summary['outstanding']),
    }

    return JsonResponse({'success': True, 'summary': data})


# =============================================================================
# STUDENT BALANCE
# =============================================================================

@login_required
@require_GET
def student_balance(request, student_id):
    """Amount paid and balance for one student in the selected year"""
    student = get_object_or_404(Student.objects.select_related('school_class'), pk=student_id)
    academic_year = resolve_academic_year(request.GET.get('year'))
    if academic_year is None:
        return _missing_year_response()

    balance = PaymentService.get_student_balance(student, academic_year)
    payments = PaymentService.get_student_payments(student, academic_year).order_by('-payment_date')

    return JsonResponse({
        'success': True,
        'student': {
            'id': str(student.pk),
            'full_name': student.full_name,
            'admission_number': student.admission_number,
            'class_name': student.school_class.name if student.school_class else None,
        },
        'academic_year': academic_year.name,
        'balance': serialize_balance(balance),
        'payments': [
            {
                'id': str(payment.pk),
                'amount_paid': to_plain_number(payment.amount_paid),
                'payment_date': payment.payment_date.isoformat(),
                'payment_method': payment.payment_method,
                'receipt_number': payment.receipt_number,
                'status': payment.status,
            }
            for payment in payments
        ],
    })


# =============================================================================
# FEE STRUCTURE CREATION
# =============================================================================

@login_required
@require_POST
def create_fee_structure(request):
    """Create a fee structure; duplicate and zero-total structures are refused"""
    try:
        data = get_request_data(request)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_json'}, status=400)

    form = FeeStructureForm(data)
    if not form.is_valid():
        return form_error_response(form)

    academic_year = form.cleaned_data['academic_year'] or resolve_academic_year()
    if academic_year is None:
        return _missing_year_response()

    try:
        structure = FeeStructureService.create_fee_structure(
            form.cleaned_data['school_class'],
            academic_year,
            form.cleaned_data['tuition_fee'],
            form.cleaned_data['exam_fee'],
            form.cleaned_data['other_fee'],
            description=form.cleaned_data['description'],
        )
    except ValidationError as e:
        return validation_error_response(e)

    return JsonResponse({
        'success': True,
        'message': f"Fee structure created: {format_money(structure.total_fee)}",
        'fee_structure': serialize_fee_structure(structure),
    }, status=201)


# =============================================================================
# PAYMENT RECORDING
# =============================================================================

@login_required
@require_POST
def record_payment(request):
    """Record a payment against the student's class fee structure"""
    try:
        data = get_request_data(request)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e), 'code': 'invalid_json'}, status=400)

    form = FeePaymentForm(data)
    if not form.is_valid():
        return form_error_response(form)

    academic_year = form.cleaned_data['academic_year'] or resolve_academic_year()
    if academic_year is None:
        return _missing_year_response()

    student = form.cleaned_data['student']
    try:
        payment = PaymentService.record_payment(
            student,
            form.cleaned_data['amount'],
            academic_year,
            payment_method=form.cleaned_data['payment_method'],
            receipt_number=form.cleaned_data['receipt_number'],
            notes=form.cleaned_data['notes'],
            payment_date=form.cleaned_data['payment_date'],
        )
    except ValidationError as e:
        return validation_error_response(e)

    balance = PaymentService.get_student_balance(student, academic_year)

    return JsonResponse({
        'success': True,
        'message': f"Payment of {format_money(payment.amount_paid)} recorded",
        'payment': {
            'id': str(payment.pk),
            'receipt_number': payment.receipt_number,
            'amount_paid': to_plain_number(payment.amount_paid),
            'payment_date': payment.payment_date.isoformat(),
            'status': payment.status,
        },
        'balance': serialize_balance(balance),
    }, status=201)
