# fees/models.py

"""
Student Fee Models

- Fee structures: per-class, per-year expected charges
- Fee payments: money received against a student's structure

Balances are never stored; they are derived by fees.balances from the
structure and payments of one academic year.
"""

from django.db import models
from django.utils import timezone
from django.core.validators import MinValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from utils.models import BaseModel
from .balances import compute_fee_total

logger = logging.getLogger(__name__)


# =============================================================================
# FEE STRUCTURE MODEL
# =============================================================================

class FeeStructure(BaseModel):
    """
    Expected charges for one class in one academic year.

    total_fee is always tuition + exam + other; it is recomputed on every
    save and never edited directly. `amount` is kept equal to total_fee
    for older reports that read it.
    """

    FEE_TYPE_CHOICES = [
        ('annual', 'Annual'),
        ('termly', 'Termly'),
    ]

    # -------------------------------------------------------------------------
    # SCOPE
    # -------------------------------------------------------------------------

    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.CASCADE,
        related_name='fee_structures'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.CASCADE,
        related_name='fee_structures'
    )

    # -------------------------------------------------------------------------
    # FEE COMPONENTS
    # -------------------------------------------------------------------------

    tuition_fee = models.DecimalField(
        "Tuition Fee",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    exam_fee = models.DecimalField(
        "Exam Fee",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    other_fee = models.DecimalField(
        "Other Fees",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # -------------------------------------------------------------------------
    # DERIVED TOTALS
    # -------------------------------------------------------------------------

    total_fee = models.DecimalField(
        "Total Fee",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False
    )
    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text="Same as total fee"
    )

    fee_type = models.CharField("Fee Type", max_length=20, choices=FEE_TYPE_CHOICES, default='annual')
    description = models.TextField("Description", blank=True)
    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Fee Structure"
        verbose_name_plural = "Fee Structures"
        ordering = ['school_class__name']
        constraints = [
            models.UniqueConstraint(
                fields=['school_class', 'academic_year'],
                condition=models.Q(is_active=True),
                name='unique_active_fee_structure_per_class_year'
            ),
        ]

    def __str__(self):
        return f"{self.school_class} - {self.academic_year}: {self.total_fee}"

    def clean(self):
        if compute_fee_total(self.tuition_fee, self.exam_fee, self.other_fee) <= 0:
            raise ValidationError("Total fee must be greater than zero")

    def save(self, *args, **kwargs):
        self.total_fee = compute_fee_total(self.tuition_fee, self.exam_fee, self.other_fee)
        self.amount = self.total_fee
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'total_fee', 'amount'}
        super().save(*args, **kwargs)


# =============================================================================
# FEE PAYMENT MODEL
# =============================================================================

class FeePayment(BaseModel):
    """A payment received from a student against their class fee structure"""

    PAYMENT_STATUS_CHOICES = [
        ('paid', 'Paid'),
        ('pending', 'Pending'),
        ('overdue', 'Overdue'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('bank_transfer', 'Bank Transfer'),
        ('cheque', 'Cheque'),
        ('mobile_money', 'Mobile Money'),
    ]

    # -------------------------------------------------------------------------
    # CORE RELATIONSHIPS
    # -------------------------------------------------------------------------

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='fee_payments'
    )
    fee_structure = models.ForeignKey(
        FeeStructure,
        verbose_name="Fee Structure",
        on_delete=models.PROTECT,
        related_name='payments'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='fee_payments'
    )

    # -------------------------------------------------------------------------
    # PAYMENT DETAILS
    # -------------------------------------------------------------------------

    amount_paid = models.DecimalField(
        "Amount Paid",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    payment_date = models.DateField("Payment Date", default=timezone.localdate, db_index=True)
    payment_method = models.CharField(
        "Payment Method",
        max_length=20,
        choices=PAYMENT_METHOD_CHOICES,
        blank=True
    )
    receipt_number = models.CharField("Receipt Number", max_length=50, unique=True, blank=True, db_index=True)
    status = models.CharField(
        "Status",
        max_length=10,
        choices=PAYMENT_STATUS_CHOICES,
        default='pending',
        db_index=True
    )
    notes = models.TextField("Notes", blank=True)

    class Meta:
        verbose_name = "Fee Payment"
        verbose_name_plural = "Fee Payments"
        ordering = ['-payment_date', '-created_at']
        indexes = [
            models.Index(fields=['student', 'academic_year']),
        ]

    def __str__(self):
        return f"{self.student} - {self.amount_paid} ({self.payment_date})"

    def clean(self):
        if self.amount_paid is not None and self.amount_paid < 0:
            raise ValidationError({'amount_paid': "Amount paid cannot be negative"})
