"""
Core models for TEM.

Provides:
- BaseModel: UUID primary key, timestamps and soft delete
- AuditLog: trail of platform and company administration actions
"""
import logging
import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone

logger = logging.getLogger(__name__)


class BaseModelQuerySet(models.QuerySet):
    """QuerySet with soft delete support."""

    def delete(self):
        """Soft delete all objects in queryset."""
        return self.update(deleted_at=timezone.now())

    def hard_delete(self):
        """Permanently delete all objects in queryset."""
        return super().delete()


class BaseModelManager(models.Manager.from_queryset(BaseModelQuerySet)):
    """Manager that hides soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class BaseModel(models.Model):
    """
    Abstract base model with UUID primary key, soft delete, and timestamps.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when the record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when the record was last updated"
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp when the record was soft deleted"
    )

    objects = BaseModelManager()
    objects_with_deleted = models.Manager.from_queryset(BaseModelQuerySet)()

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def delete(self, using=None, keep_parents=False):
        """Soft delete the object."""
        self.deleted_at = timezone.now()
        self.save(using=using, update_fields=['deleted_at', 'updated_at'])

    def hard_delete(self, using=None, keep_parents=False):
        """Permanently delete the object."""
        super().delete(using=using, keep_parents=keep_parents)

    def restore(self):
        """Restore a soft-deleted object."""
        self.deleted_at = None
        self.save(update_fields=['deleted_at', 'updated_at'])

    @property
    def is_deleted(self):
        return self.deleted_at is not None


class AuditLogManager(models.Manager):
    """Manager for AuditLog queries."""

    def for_company(self, company):
        return self.filter(company=company)

    def platform(self):
        """Entries not tied to a company (super-admin console actions)."""
        return self.filter(company__isnull=True)

    def by_action(self, action):
        return self.filter(action=action)

    def by_target(self, target_type, target_id=None):
        qs = self.filter(target_type=target_type)
        if target_id is not None:
            qs = qs.filter(target_id=str(target_id))
        return qs


class AuditLog(models.Model):
    """
    Audit trail for company membership, reporting line and platform changes.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(
        'companies.Company',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="Company this action belongs to (null for platform-level)"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="User who performed the action (null for system actions)"
    )
    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Action performed (e.g., 'company_created', 'member_assigned')"
    )
    target_type = models.CharField(max_length=50, db_index=True)
    target_id = models.CharField(max_length=64, blank=True, db_index=True)
    diff = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    request_id = models.CharField(max_length=64, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogManager()

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['company', 'created_at'], name='audit_company_created_idx'),
            models.Index(fields=['target_type', 'target_id'], name='audit_target_idx'),
        ]

    def __str__(self):
        company = self.company.name if self.company else 'Platform'
        actor = self.user.get_username() if self.user else 'System'
        return f"{company} - {actor} - {self.action}"

    @classmethod
    def log_action(cls, action, user=None, company=None, target_type='', target_id=None,
                   diff=None, metadata=None, request=None):
        """
        Record an audit entry.

        Failures are logged and swallowed so an audit write never rolls back
        the action it describes.
        """
        if user is not None and not user.is_authenticated:
            user = None

        entry = {
            'action': action,
            'user': user,
            'company': company,
            'target_type': target_type,
            'target_id': '' if target_id is None else str(target_id),
            'diff': diff or {},
            'metadata': metadata or {},
        }
        if request is not None:
            entry['ip_address'] = cls._get_client_ip(request)
            entry['user_agent'] = request.META.get('HTTP_USER_AGENT', '')
            entry['request_id'] = getattr(request, 'request_id', '') or ''

        try:
            return cls.objects.create(**entry)
        except Exception as e:
            logger.error(
                f"Failed to create audit log: {e}",
                extra={'action': action, 'company_id': str(company.id) if company else None},
                exc_info=True
            )
            return None

    @staticmethod
    def _get_client_ip(request):
        forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if forwarded_for:
            return forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
