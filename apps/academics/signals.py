# academics/signals.py
"""
Signal handlers for academics app
Keeps denormalised fields in step when rows are saved
"""

from django.db.models.signals import pre_save
from django.dispatch import receiver
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# SUBJECT SIGNALS
# =============================================================================

@receiver(pre_save, sender='academics.Subject')
def subject_pre_save(sender, instance, **kwargs):
    """Subject codes are stored upper-case and trimmed"""
    if instance.code:
        instance.code = instance.code.strip().upper()
    if instance.name:
        instance.name = instance.name.strip()


# =============================================================================
# REPORT CARD SIGNALS
# =============================================================================

@receiver(pre_save, sender='academics.ReportCard')
def report_card_pre_save(sender, instance, **kwargs):
    """Fill the academic year name from the linked year when only the FK is set"""
    if kwargs.get('raw', False):
        return

    if not instance.academic_year and instance.academic_year_ref_id:
        instance.academic_year = instance.academic_year_ref.name
        logger.debug(f"Set academic year name {instance.academic_year} on report card")
