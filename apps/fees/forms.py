# fees/forms.py

"""
Fee Management Forms

Parse and validate posted data for:
- Fee structures
- Payments

Business rules (positive total, one active structure per class and
year, payment needs a structure) are enforced by fees.services; these
forms only check field-level input.
"""

from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone
from decimal import Decimal
import logging

from .models import FeePayment
from academics.models import SchoolClass, AcademicYear
from students.models import Student

logger = logging.getLogger(__name__)


# =============================================================================
# FEE STRUCTURE FORMS
# =============================================================================

class FeeStructureForm(forms.Form):
    """Form for creating a class fee structure"""

    school_class = forms.ModelChoiceField(
        queryset=SchoolClass.objects.all(),
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    academic_year = forms.ModelChoiceField(
        queryset=AcademicYear.objects.all(),
        required=False,
        help_text="Defaults to the active academic year",
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    tuition_fee = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        initial=Decimal('0'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    exam_fee = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        initial=Decimal('0'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    other_fee = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        initial=Decimal('0'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    description = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 2})
    )

    def clean(self):
        cleaned_data = super().clean()
        for field in ('tuition_fee', 'exam_fee', 'other_fee'):
            if cleaned_data.get(field) is None:
                cleaned_data[field] = Decimal('0')
        return cleaned_data


# =============================================================================
# PAYMENT FORMS
# =============================================================================

class FeePaymentForm(forms.Form):
    """Form for recording a student payment"""

    student = forms.ModelChoiceField(
        queryset=Student.objects.select_related('school_class'),
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    academic_year = forms.ModelChoiceField(
        queryset=AcademicYear.objects.all(),
        required=False,
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    amount = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    payment_method = forms.ChoiceField(
        choices=[('', '---------')] + FeePayment.PAYMENT_METHOD_CHOICES,
        required=False,
        widget=forms.Select(attrs={'class': 'form-control'})
    )
    payment_date = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'})
    )
    receipt_number = forms.CharField(
        max_length=50,
        required=False,
        help_text="Leave blank to generate one",
        widget=forms.TextInput(attrs={'class': 'form-control'})
    )
    notes = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 2})
    )

    def clean_amount(self):
        amount = self.cleaned_data.get('amount')
        if amount is not None and amount <= 0:
            raise ValidationError('Payment amount must be greater than zero.')
        return amount

    def clean_payment_date(self):
        payment_date = self.cleaned_data.get('payment_date')
        if payment_date and payment_date > timezone.localdate():
            raise ValidationError('Payment date cannot be in the future.')
        return payment_date
