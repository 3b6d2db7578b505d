# core/utils.py

"""
Central utilities for School Desk
Prevents code duplication and ensures consistency across all apps
"""
from django.conf import settings
from django.http import JsonResponse
from django.core.exceptions import ValidationError
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import json
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# CURRENCY & MONEY FORMATTING
# =============================================================================

def get_currency_prefix():
    """
    Get the display prefix for money values from settings.

    Returns:
        str: Currency prefix (defaults to 'Le')
    """
    return getattr(settings, 'SCHOOL_CURRENCY_PREFIX', 'Le')


def format_money(amount, include_symbol=True):
    """
    Format a money amount for display: whole units, thousands separators,
    currency prefix.

    Args:
        amount: Decimal or numeric value to format
        include_symbol: Whether to include the currency prefix

    Returns:
        str: Formatted money string

    Example:
        >>> from core.utils import format_money
        >>> print(format_money(1500000))  # "Le 1,500,000"
        >>> print(format_money(1500000, False))  # "1,500,000"
    """
    whole = round_half_up(safe_decimal(amount, Decimal('0')))
    formatted = f"{whole:,}"
    return f"{get_currency_prefix()} {formatted}" if include_symbol else formatted


# =============================================================================
# NUMBER & CALCULATION UTILITIES
# =============================================================================

def round_half_up(value):
    """
    Round to the nearest integer with halves rounded away from zero.

    Python's built-in round() uses banker's rounding (round(82.5) == 82);
    scores and percentages are displayed as whole numbers rounded the
    conventional way, so 82.5 becomes 83.

    Args:
        value: int, float, str or Decimal

    Returns:
        int: Rounded value
    """
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def calculate_percentage(part, whole):
    """
    Calculate a whole-number percentage with safe division.

    Args:
        part: The part value
        whole: The whole value

    Returns:
        int: Percentage rounded half-up, 0 if whole is 0

    Example:
        >>> from core.utils import calculate_percentage
        >>> calculate_percentage(2, 3)  # 67
        >>> calculate_percentage(5, 0)  # 0
    """
    part = safe_decimal(part, Decimal('0'))
    whole = safe_decimal(whole, Decimal('0'))

    if whole == 0:
        return 0

    return round_half_up(part / whole * 100)


def safe_decimal(value, default=Decimal('0.00')):
    """
    Safely convert value to Decimal.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Decimal: Converted value or default

    Example:
        >>> from core.utils import safe_decimal
        >>> amount = safe_decimal("50000")
        >>> amount = safe_decimal("invalid", Decimal('0.00'))
    """
    if value is None or value == '':
        return default
    try:
        result = Decimal(str(value))
    except (ValueError, TypeError, InvalidOperation):
        return default
    if not result.is_finite():
        return default
    return result


def get_leaderboard_size():
    """Number of entries shown on the school-wide leaderboard."""
    return getattr(settings, 'LEADERBOARD_SIZE', 10)


# =============================================================================
# ACADEMIC YEAR UTILITIES
# =============================================================================

def get_active_academic_year():
    """
    Get the system-wide active academic year.

    Returns:
        AcademicYear or None: Active academic year
    """
    from academics.models import AcademicYear
    return AcademicYear.get_active()


def resolve_academic_year(year_id=None):
    """
    Resolve the academic year a request is scoped to.

    An explicit year id wins; otherwise the active year is used. The
    result is passed down explicitly to services and calculators.

    Args:
        year_id: Optional AcademicYear primary key (str or UUID)

    Returns:
        AcademicYear or None
    """
    from academics.models import AcademicYear

    if year_id:
        try:
            return AcademicYear.objects.get(pk=year_id)
        except (AcademicYear.DoesNotExist, ValidationError, ValueError, TypeError):
            logger.warning(f"Academic year {year_id} not found")
            return None
    return get_active_academic_year()


# =============================================================================
# REQUEST UTILITIES
# =============================================================================

def parse_filters(request, filter_keys):
    """
    Extract filter values from request.GET.

    Args:
        request: HTTP request object
        filter_keys: list of filter names to extract

    Returns:
        dict: {key: value or None}

    Example:
        >>> from core.utils import parse_filters
        >>> filters = parse_filters(request, ['term', 'year'])
        >>> if filters['term']:
        >>>     ...
    """
    filters = {}
    for key in filter_keys:
        value = request.GET.get(key, '').strip()
        filters[key] = value if value else None
    return filters


def to_plain_number(value):
    """
    Convert a Decimal to int when it is whole, float otherwise.

    JSON encoders render Decimal as a string; computed figures handed to
    the presentation layer go through this first.

    Example:
        >>> to_plain_number(Decimal('150000.00'))  # 150000
        >>> to_plain_number(Decimal('82.50'))  # 82.5
    """
    if value is None:
        return None
    value = safe_decimal(value, None)
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def get_request_data(request):
    """
    Posted data from either a JSON body or a form-encoded body.

    Raises:
        ValueError: if the body claims to be JSON but does not parse
    """
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON data: {e}")
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data
    return request.POST.dict()


def validation_error_response(error, status=400):
    """
    JSON response for a django ValidationError raised by a service.

    Returns:
        JsonResponse: {'success': False, 'error': str, 'code': str or None}
    """
    messages = getattr(error, 'messages', None) or [str(error)]
    return JsonResponse(
        {
            'success': False,
            'error': '; '.join(messages),
            'code': getattr(error, 'code', None),
        },
        status=status
    )


def form_error_response(form, status=400):
    """JSON response listing a bound form's field errors"""
    return JsonResponse(
        {
            'success': False,
            'error': 'Please correct the errors below.',
            'code': 'invalid',
            'errors': {field: [str(e) for e in errors] for field, errors in form.errors.items()},
        },
        status=status
    )
