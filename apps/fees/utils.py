# fees/utils.py

"""
Fee Utility Functions

Contains:
- Receipt number generation
- Payment validation
- Display helpers
"""

from django.db import transaction
from django.utils import timezone
from decimal import Decimal
import logging

from core.utils import safe_decimal

logger = logging.getLogger(__name__)

RECEIPT_PREFIX = "RCT"


# =============================================================================
# REFERENCE NUMBER GENERATION
# =============================================================================

def generate_receipt_number():
    """
    Generate the next receipt number for the current calendar year.
    Format: RCT-2025-0001

    Returns:
        str: Unique receipt number
    """
    from fees.models import FeePayment

    current_year = timezone.now().year
    search_prefix = f"{RECEIPT_PREFIX}-{current_year}-"

    with transaction.atomic():
        queryset = FeePayment.objects.filter(
            receipt_number__startswith=search_prefix
        ).select_for_update()

        numbers = []
        for receipt_number in queryset.values_list('receipt_number', flat=True):
            try:
                numbers.append(int(receipt_number.split('-')[-1]))
            except (ValueError, IndexError):
                continue
        new_number = max(numbers) + 1 if numbers else 1

    if new_number <= 9999:
        formatted_number = f"{new_number:04d}"
    else:
        formatted_number = str(new_number)

    return f"{search_prefix}{formatted_number}"


# =============================================================================
# VALIDATION UTILITIES
# =============================================================================

def validate_payment_data(payment_data):
    """
    Validate payment data before creation.

    Args:
        payment_data: Dict with payment information
            - amount: required, positive
            - payment_method: optional, one of FeePayment.PAYMENT_METHOD_CHOICES
            - payment_date: optional, not in the future
            - balance: optional current balance, used for an overpayment warning

    Returns:
        dict: {
            'valid': bool,
            'errors': list of str,
            'warnings': list of str
        }
    """
    from fees.models import FeePayment

    errors = []
    warnings = []

    amount = safe_decimal(payment_data.get('amount'), None)
    if amount is None or amount <= 0:
        errors.append("Payment amount must be positive")

    payment_method = payment_data.get('payment_method')
    valid_methods = [value for value, _ in FeePayment.PAYMENT_METHOD_CHOICES]
    if payment_method and payment_method not in valid_methods:
        errors.append(f"Payment method must be one of: {', '.join(valid_methods)}")

    payment_date = payment_data.get('payment_date')
    if payment_date and payment_date > timezone.localdate():
        errors.append("Payment date cannot be in the future")

    balance = payment_data.get('balance')
    if amount is not None and balance is not None and amount > safe_decimal(balance, Decimal('0')):
        warnings.append(
            f"Payment amount ({amount}) exceeds the outstanding balance ({balance}). "
            f"The excess will show as a credit."
        )

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

def get_balance_status_color(status):
    """
    Get the display colour for a balance status.

    Args:
        status: NO_STRUCTURE, SETTLED, PARTIAL or UNPAID

    Returns:
        str: Colour name
    """
    colors = {
        'NO_STRUCTURE': 'secondary',
        'SETTLED': 'success',
        'PARTIAL': 'warning',
        'UNPAID': 'danger',
    }
    return colors.get(status, 'secondary')


def get_balance_status_label(balance_result):
    """
    Human label for a balance result.

    Overpayment is shown as a credit, a missing structure as a warning.
    """
    status = balance_result['status']
    if status == 'NO_STRUCTURE':
        return "No fee structure"
    if status == 'SETTLED':
        if balance_result['balance'] < 0:
            return "Settled (credit)"
        return "Settled"
    if status == 'PARTIAL':
        return "Part paid"
    return "Unpaid"
