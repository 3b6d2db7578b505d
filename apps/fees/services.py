# fees/services.py

"""
Fee Structure and Payment Operations

Writes go through these services so the fee total is always derived
from its components and the one-active-structure-per-class-and-year rule
is checked before anything reaches the database.

Balance arithmetic lives in fees/balances.py; this module only fetches
rows and hands them over.
"""

from decimal import Decimal
from django.db import transaction, IntegrityError
from django.utils import timezone
from django.core.exceptions import ValidationError
import logging

from fees.models import FeeStructure, FeePayment
from fees.balances import validate_fee_structure, compute_balance, DUPLICATE_FEE_STRUCTURE
from fees.utils import validate_payment_data
from core.utils import safe_decimal

logger = logging.getLogger(__name__)


# =============================================================================
# FEE STRUCTURE SERVICE
# =============================================================================

class FeeStructureService:
    """Create, edit and retire class fee structures"""

    @staticmethod
    def get_active_structure(school_class, academic_year):
        """
        Active fee structure for a class and academic year.

        Returns:
            FeeStructure or None
        """
        if school_class is None or academic_year is None:
            return None
        return FeeStructure.objects.filter(
            school_class=school_class,
            academic_year=academic_year,
            is_active=True
        ).order_by('-created_at').first()

    @staticmethod
    @transaction.atomic
    def create_fee_structure(school_class, academic_year, tuition_fee, exam_fee=0,
                             other_fee=0, description='', fee_type='annual'):
        """
        Create the fee structure for a class and academic year.

        Args:
            school_class: SchoolClass instance
            academic_year: AcademicYear instance
            tuition_fee, exam_fee, other_fee: component amounts
            description: optional text
            fee_type: 'annual' or 'termly'

        Returns:
            FeeStructure instance

        Raises:
            ValidationError: code 'InvalidFeeTotal' when the total is not
                positive, 'DuplicateFeeStructure' when the class already
                has an active structure for the year

        Example:
            structure = FeeStructureService.create_fee_structure(
                jss1, year, tuition_fee=50000, exam_fee=10000, other_fee=5000
            )
            structure.total_fee  # Decimal('65000.00')
        """
        existing = FeeStructureService.get_active_structure(school_class, academic_year)

        result = validate_fee_structure(
            tuition_fee, exam_fee, other_fee,
            existing_active=existing,
            school_class_id=school_class.pk,
            academic_year_id=academic_year.pk,
        )
        if not result['valid']:
            raise ValidationError(result['errors'][0], code=result['error_code'])

        fields = result['fee_structure']
        try:
            with transaction.atomic():
                structure = FeeStructure.objects.create(
                    school_class=school_class,
                    academic_year=academic_year,
                    tuition_fee=fields['tuition_fee'],
                    exam_fee=fields['exam_fee'],
                    other_fee=fields['other_fee'],
                    fee_type=fee_type,
                    description=description or '',
                    is_active=True,
                )
        except IntegrityError:
            # Another request created the structure between the check and the insert
            logger.warning(f"Duplicate fee structure for {school_class} / {academic_year}")
            raise ValidationError(
                "An active fee structure already exists for this class and academic year",
                code=DUPLICATE_FEE_STRUCTURE
            )

        for warning in result['warnings']:
            logger.warning(f"Fee structure {structure.pk}: {warning}")

        logger.info(
            f"Created fee structure for {school_class} ({academic_year}): "
            f"total {structure.total_fee}"
        )
        return structure

    @staticmethod
    @transaction.atomic
    def update_fee_structure(structure, tuition_fee=None, exam_fee=None, other_fee=None,
                             description=None, fee_type=None):
        """
        Edit the components of an existing structure.

        Omitted components keep their current value. The total is derived
        again; the duplicate check does not apply because the structure
        being edited is the class's active one.

        Returns:
            Updated FeeStructure instance

        Raises:
            ValidationError: code 'InvalidFeeTotal'
        """
        tuition_fee = structure.tuition_fee if tuition_fee is None else tuition_fee
        exam_fee = structure.exam_fee if exam_fee is None else exam_fee
        other_fee = structure.other_fee if other_fee is None else other_fee

        result = validate_fee_structure(tuition_fee, exam_fee, other_fee)
        if not result['valid']:
            raise ValidationError(result['errors'][0], code=result['error_code'])

        fields = result['fee_structure']
        structure.tuition_fee = fields['tuition_fee']
        structure.exam_fee = fields['exam_fee']
        structure.other_fee = fields['other_fee']
        if description is not None:
            structure.description = description
        if fee_type is not None:
            structure.fee_type = fee_type
        structure.save()

        logger.info(f"Updated fee structure {structure.pk}: total {structure.total_fee}")
        return structure

    @staticmethod
    @transaction.atomic
    def deactivate_fee_structure(structure, reason=''):
        """
        Retire a structure so a new one can be created for the class and year.

        Payments already recorded against it are kept.
        """
        if not structure.is_active:
            return structure

        structure.is_active = False
        if reason:
            structure.change_reason = reason
        structure.save()

        logger.info(f"Deactivated fee structure {structure.pk} for {structure.school_class}")
        return structure


# =============================================================================
# PAYMENT SERVICE
# =============================================================================

class PaymentService:
    """Record payments and work out student balances"""

    @staticmethod
    def get_student_payments(student, academic_year):
        """Payments made by a student in an academic year"""
        return FeePayment.objects.filter(student=student, academic_year=academic_year)

    @staticmethod
    def get_student_balance(student, academic_year):
        """
        Balance for a student in an academic year.

        The structure is the active one for the student's current class.
        A student with no class, or a class with no structure, gets a
        NO_STRUCTURE result rather than appearing settled.

        Returns:
            dict: see fees.balances.compute_balance, plus 'fee_structure'
        """
        structure = FeeStructureService.get_active_structure(student.school_class, academic_year)
        payments = list(
            PaymentService.get_student_payments(student, academic_year).values('amount_paid', 'status')
        )

        balance = compute_balance(structure, payments)
        balance['fee_structure'] = structure
        return balance

    @staticmethod
    @transaction.atomic
    def record_payment(student, amount, academic_year, payment_method='', receipt_number='',
                       notes='', payment_date=None):
        """
        Record a payment against the student's active fee structure.

        Args:
            student: Student instance
            amount: amount received, must be positive
            academic_year: AcademicYear the payment counts towards
            payment_method: 'cash', 'bank_transfer', 'cheque' or 'mobile_money'
            receipt_number: generated when blank
            notes: optional text
            payment_date: defaults to today

        Returns:
            FeePayment instance

        Raises:
            ValidationError: no fee structure for the student's class and
                year, invalid payment data, or a receipt number already issued
        """
        structure = FeeStructureService.get_active_structure(student.school_class, academic_year)
        if structure is None:
            logger.warning(
                f"Payment refused for {student.full_name}: no fee structure "
                f"for {student.school_class} in {academic_year}"
            )
            raise ValidationError(
                "No fee structure found for this class and academic year",
                code='MissingFeeStructure'
            )

        current = compute_balance(
            structure,
            PaymentService.get_student_payments(student, academic_year).values('amount_paid')
        )

        validation = validate_payment_data({
            'amount': amount,
            'payment_method': payment_method,
            'payment_date': payment_date,
            'balance': current['balance'],
        })
        if not validation['valid']:
            raise ValidationError('; '.join(validation['errors']), code='invalid_payment')
        for warning in validation['warnings']:
            logger.warning(f"Payment for {student.full_name}: {warning}")

        receipt_number = (receipt_number or '').strip()
        if receipt_number and FeePayment.objects.filter(receipt_number=receipt_number).exists():
            raise ValidationError(
                f"Receipt number {receipt_number} has already been issued",
                code='duplicate_receipt'
            )

        try:
            with transaction.atomic():
                payment = FeePayment.objects.create(
                    student=student,
                    fee_structure=structure,
                    academic_year=academic_year,
                    amount_paid=safe_decimal(amount, Decimal('0')),
                    payment_date=payment_date or timezone.localdate(),
                    payment_method=payment_method or '',
                    receipt_number=receipt_number,
                    notes=notes or '',
                    status='paid',
                )
        except IntegrityError:
            # Another payment took the same receipt number between the check and the insert
            logger.warning(f"Duplicate receipt number for payment by {student.full_name}")
            raise ValidationError(
                "That receipt number has already been issued, please try again",
                code='duplicate_receipt'
            )

        logger.info(
            f"Recorded payment {payment.receipt_number} of {payment.amount_paid} "
            f"for {student.full_name}"
        )
        return payment
