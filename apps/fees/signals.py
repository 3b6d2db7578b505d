# fees/signals.py

"""
Fee Signal Handlers

Auto-processing for:
- Receipt number generation
- Payment academic year assignment
- Audit logging
"""

from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver
import logging

from fees.utils import generate_receipt_number

logger = logging.getLogger(__name__)


# =============================================================================
# PAYMENT SIGNALS
# =============================================================================

@receiver(pre_save, sender='fees.FeePayment')
def fee_payment_pre_save(sender, instance, **kwargs):
    """
    Pre-save processing for fee payments:
    - Auto-generate receipt number
    - Take the academic year from the fee structure if not set
    """
    if kwargs.get('raw', False):
        return

    if not instance.receipt_number:
        instance.receipt_number = generate_receipt_number()
        logger.debug(f"Generated receipt number: {instance.receipt_number}")

    if not instance.academic_year_id and instance.fee_structure_id:
        instance.academic_year_id = instance.fee_structure.academic_year_id


@receiver(post_save, sender='fees.FeePayment')
def fee_payment_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(
            f"Payment recorded: {instance.receipt_number} - "
            f"Student: {instance.student.full_name} - "
            f"Amount: {instance.amount_paid}"
        )


# =============================================================================
# FEE STRUCTURE SIGNALS
# =============================================================================

@receiver(post_save, sender='fees.FeeStructure')
def fee_structure_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    action = "created" if created else "updated"
    logger.info(
        f"Fee structure {action}: {instance.school_class} / {instance.academic_year} "
        f"total {instance.total_fee}"
    )
