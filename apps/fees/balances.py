# fees/balances.py

"""
Fee totals, balances and the fee structure duplicate guard.

Pure computation over rows already fetched for one academic year. The
functions accept plain dicts or model instances (anything exposing the
named fields) and return plain dicts. Nothing here raises for a domain
error: problems come back as result values so the caller can show a
specific message.

Error codes:
    InvalidFeeTotal        tuition + exam + other is not positive, or a
                           component is missing, negative or not a number
    DuplicateFeeStructure  an active structure already exists for the
                           same class and academic year
"""

from decimal import Decimal
import logging

from core.utils import safe_decimal, calculate_percentage

logger = logging.getLogger(__name__)

INVALID_FEE_TOTAL = 'InvalidFeeTotal'
DUPLICATE_FEE_STRUCTURE = 'DuplicateFeeStructure'

STATUS_NO_STRUCTURE = 'NO_STRUCTURE'
STATUS_SETTLED = 'SETTLED'
STATUS_PARTIAL = 'PARTIAL'
STATUS_UNPAID = 'UNPAID'

FEE_COMPONENTS = (
    ('tuition_fee', 'Tuition fee'),
    ('exam_fee', 'Exam fee'),
    ('other_fee', 'Other fee'),
)


def _get(row, name, default=None):
    if isinstance(row, dict):
        return row.get(name, default)
    return getattr(row, name, default)


# =============================================================================
# FEE TOTALS
# =============================================================================

def compute_fee_total(tuition_fee, exam_fee, other_fee):
    """
    Sum the three fee components.

    Missing components count as zero; the caller decides whether the
    resulting total is acceptable.

    Returns:
        Decimal: tuition_fee + exam_fee + other_fee
    """
    return sum(
        (safe_decimal(value, Decimal('0')) for value in (tuition_fee, exam_fee, other_fee)),
        Decimal('0')
    )


def _structure_is_active(structure):
    if not structure:
        return False
    return bool(_get(structure, 'is_active', True))


def validate_fee_structure(tuition_fee, exam_fee, other_fee, existing_active=None,
                           school_class_id=None, academic_year_id=None):
    """
    Check a new fee structure before it is written.

    Args:
        tuition_fee, exam_fee, other_fee: component amounts
        existing_active: the active structure already stored for the same
            class and academic year, or None
        school_class_id: class the structure is for (echoed into the result)
        academic_year_id: academic year the structure is for (echoed)

    Returns:
        dict: {
            'valid': bool,
            'error_code': None, 'InvalidFeeTotal' or 'DuplicateFeeStructure',
            'errors': list of str,
            'warnings': list of str,
            'fee_structure': dict of the fields to store, or None
        }

    Example:
        >>> result = validate_fee_structure(50000, 10000, 5000)
        >>> result['fee_structure']['total_fee']  # Decimal('65000')
    """
    errors = []
    warnings = []
    error_code = None

    components = {}
    raw_values = (tuition_fee, exam_fee, other_fee)
    for (field, label), raw in zip(FEE_COMPONENTS, raw_values):
        if raw is None or raw == '':
            components[field] = Decimal('0')
            continue
        value = safe_decimal(raw, None)
        if value is None:
            errors.append(f"{label} must be a number")
        elif value < 0:
            errors.append(f"{label} cannot be negative")
        else:
            components[field] = value

    if errors:
        error_code = INVALID_FEE_TOTAL
    else:
        total = compute_fee_total(
            components['tuition_fee'], components['exam_fee'], components['other_fee']
        )
        if total <= 0:
            error_code = INVALID_FEE_TOTAL
            errors.append("Total fee must be greater than zero")
        elif _structure_is_active(existing_active):
            error_code = DUPLICATE_FEE_STRUCTURE
            errors.append(
                "An active fee structure already exists for this class and academic year"
            )

    if error_code:
        logger.warning(f"Fee structure rejected ({error_code}): {'; '.join(errors)}")
        return {
            'valid': False,
            'error_code': error_code,
            'errors': errors,
            'warnings': warnings,
            'fee_structure': None,
        }

    if components['tuition_fee'] == 0:
        warnings.append("Tuition fee is zero")

    return {
        'valid': True,
        'error_code': None,
        'errors': errors,
        'warnings': warnings,
        'fee_structure': {
            'school_class_id': school_class_id,
            'academic_year_id': academic_year_id,
            'tuition_fee': components['tuition_fee'],
            'exam_fee': components['exam_fee'],
            'other_fee': components['other_fee'],
            'total_fee': total,
            'amount': total,
            'is_active': True,
        },
    }


# =============================================================================
# BALANCES
# =============================================================================

def _payment_amount(payment):
    # Bare numbers are accepted as well as payment rows
    if isinstance(payment, (int, float, Decimal, str)):
        return safe_decimal(payment, Decimal('0'))
    return safe_decimal(_get(payment, 'amount_paid'), Decimal('0'))


def _structure_total(structure):
    total = safe_decimal(_get(structure, 'total_fee'), None)
    if total is None:
        total = compute_fee_total(
            _get(structure, 'tuition_fee'), _get(structure, 'exam_fee'), _get(structure, 'other_fee')
        )
    return total


def compute_balance(structure, payments):
    """
    Amount paid and balance for one student and academic year.

    Args:
        structure: the fee structure for the student's class and year, or None
        payments: payment rows (or bare amounts) for the student and year

    Returns:
        dict: {
            'total_fee': Decimal (0 when there is no structure),
            'total_paid': Decimal,
            'balance': Decimal, negative when overpaid,
            'is_settled': bool, balance <= 0,
            'has_structure': bool,
            'status': 'NO_STRUCTURE', 'SETTLED', 'PARTIAL' or 'UNPAID'
        }

    Without a structure the balance is not positive, so is_settled is
    true; has_structure and status tell that case apart from a fully paid
    account and must be checked before showing a student as settled.
    """
    total_paid = sum((_payment_amount(payment) for payment in payments or []), Decimal('0'))
    has_structure = structure is not None

    total_fee = _structure_total(structure) if has_structure else Decimal('0')
    balance = total_fee - total_paid

    if not has_structure:
        status = STATUS_NO_STRUCTURE
    elif balance <= 0:
        status = STATUS_SETTLED
    elif total_paid > 0:
        status = STATUS_PARTIAL
    else:
        status = STATUS_UNPAID

    return {
        'total_fee': total_fee,
        'total_paid': total_paid,
        'balance': balance,
        'is_settled': balance <= 0,
        'has_structure': has_structure,
        'status': status,
    }


def summarize_collections(structures, payments):
    """
    Expected, collected and outstanding totals for a set of structures
    and the payments made against them.

    Outstanding is clamped at zero; overpayments by some students do not
    produce a negative figure for the school.

    Returns:
        dict: {
            'total_expected', 'total_collected', 'outstanding': Decimal,
            'payment_count': int,
            'status_counts': {status: count},
            'paid_percentage': int, share of payments with status 'paid',
            'collection_rate': int, collected as a percentage of expected
        }
    """
    total_expected = sum(
        (_structure_total(structure) for structure in structures if _structure_is_active(structure)),
        Decimal('0')
    )

    total_collected = Decimal('0')
    status_counts = {}
    payment_count = 0
    for payment in payments:
        payment_count += 1
        total_collected += _payment_amount(payment)
        status = _get(payment, 'status') or 'pending'
        status_counts[status] = status_counts.get(status, 0) + 1

    outstanding = total_expected - total_collected
    if outstanding < 0:
        outstanding = Decimal('0')

    return {
        'total_expected': total_expected,
        'total_collected': total_collected,
        'outstanding': outstanding,
        'payment_count': payment_count,
        'status_counts': status_counts,
        'paid_percentage': calculate_percentage(status_counts.get('paid', 0), payment_count),
        'collection_rate': calculate_percentage(total_collected, total_expected),
    }
