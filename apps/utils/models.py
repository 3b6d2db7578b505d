# utils/models.py

"""
Base model for School Desk with a lightweight audit trail.

Key Features:
- UUID primary keys
- created_at / updated_at timestamps
- User and IP tracking from the thread-local request context
- Change reason tracking
- Field-level change detection logged on update
"""

from django.db import models
from django.utils import timezone
import uuid
import logging

logger = logging.getLogger(__name__)

AUDIT_FIELDS = (
    'id', 'created_at', 'updated_at', 'created_by_id',
    'updated_by_id', 'created_from_ip', 'updated_from_ip',
)


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base model carrying audit columns for every school record.

    Timestamps are set on save (not via auto_now) so fixtures and imports
    can provide their own created_at. The acting user and client IP are
    taken from the request context populated by AuditContextMiddleware;
    management commands and the shell simply leave them empty.
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField("Created At", db_index=True, editable=False)
    updated_at = models.DateTimeField("Updated At", db_index=True, editable=False)

    # User tracking - CharField so records survive user deletion
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    created_from_ip = models.GenericIPAddressField("Created From IP", null=True, blank=True)
    updated_from_ip = models.GenericIPAddressField("Updated From IP", null=True, blank=True)

    change_reason = models.CharField(
        "Change Reason",
        max_length=255,
        blank=True,
        null=True,
        help_text="Explanation for why this change was made"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Populate timestamps and audit fields, then save.

        For updates the changed fields are logged at debug level.
        """
        from utils.context import get_request_context

        is_new = self._state.adding
        now = timezone.now()

        if is_new:
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now

        context = get_request_context()
        if context:
            user = context.get('user')
            ip_address = context.get('ip_address')

            if is_new:
                if user and not self.created_by_id:
                    self.created_by_id = str(user.pk)
                if ip_address and not self.created_from_ip:
                    self.created_from_ip = ip_address

            if user:
                self.updated_by_id = str(user.pk)
            if ip_address:
                self.updated_from_ip = ip_address

        if not is_new and self.pk:
            changes = self.get_changed_fields()
            if changes:
                logger.debug(
                    f"Updating {self.__class__.__name__} {self.pk}: "
                    f"{', '.join(sorted(changes))}"
                )

        return super().save(*args, **kwargs)

    # -------------------------------------------------------------------------
    # AUDIT TRAIL HELPERS
    # -------------------------------------------------------------------------

    def get_changed_fields(self):
        """
        Compare this instance against the stored row.

        Returns:
            dict: {field_name: {'old': str, 'new': str}} for differing fields
        """
        changes = {}
        try:
            old_instance = self.__class__.objects.get(pk=self.pk)
        except self.__class__.DoesNotExist:
            return changes

        for field in self._meta.concrete_fields:
            if field.name in AUDIT_FIELDS:
                continue
            old_value = getattr(old_instance, field.attname)
            new_value = getattr(self, field.attname)
            if old_value != new_value:
                changes[field.name] = {
                    'old': str(old_value) if old_value is not None else None,
                    'new': str(new_value) if new_value is not None else None,
                }
        return changes

    def get_audit_trail(self):
        """
        Get audit information for this record.

        Returns:
            dict: Audit trail information
        """
        return {
            'created_at': self.created_at,
            'created_by_id': self.created_by_id,
            'created_from_ip': self.created_from_ip,
            'updated_at': self.updated_at,
            'updated_by_id': self.updated_by_id,
            'updated_from_ip': self.updated_from_ip,
            'change_reason': self.change_reason,
        }
