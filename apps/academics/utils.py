# academics/utils.py

"""
Academic validation helpers shared by models, forms and services.

Validators return (is_valid, error_message) tuples so callers decide
whether to raise, collect or display the message.
"""

from decimal import Decimal, InvalidOperation
import re
import logging

logger = logging.getLogger(__name__)

TERM_CHOICES = [
    ('first', 'First Term'),
    ('second', 'Second Term'),
    ('third', 'Third Term'),
]

TERM_VALUES = [value for value, _ in TERM_CHOICES]

ACADEMIC_YEAR_PATTERN = re.compile(r'^(20\d{2})[-/](20\d{2})$')


# =============================================================================
# VALIDATION UTILITIES
# =============================================================================

def validate_academic_year_format(year_name):
    """
    Validate academic year name format.

    Args:
        year_name (str): Year name to validate

    Returns:
        tuple: (is_valid, error_message)
    """
    match = ACADEMIC_YEAR_PATTERN.match((year_name or '').strip())
    if not match:
        return (False, 'Year name must be in format "YYYY-YYYY" or "YYYY/YYYY"')

    start, end = int(match.group(1)), int(match.group(2))
    if end != start + 1:
        return (False, 'Academic year must span two consecutive years')

    return (True, None)


def validate_term(term):
    """
    Validate a term value.

    Returns:
        tuple: (is_valid, error_message)
    """
    if term not in TERM_VALUES:
        return (False, f'Term must be one of: {", ".join(TERM_VALUES)}')
    return (True, None)


def validate_score(score):
    """
    Validate a subject score (percentage).

    Returns:
        tuple: (is_valid, error_message)
    """
    if score is None or isinstance(score, bool):
        return (False, 'Score is required')
    try:
        value = Decimal(str(score))
    except (InvalidOperation, ValueError, TypeError):
        return (False, 'Score must be a number')
    if not value.is_finite() or value < 0 or value > 100:
        return (False, 'Score must be between 0 and 100')
    return (True, None)


def get_term_display(term):
    """'first' -> 'First Term'"""
    return dict(TERM_CHOICES).get(term, (term or '').title())
