"""
Company models for multi-tenant isolation.

Implements:
- Company: an isolated customer organisation (tenant)
- CompanyMembership: a user's role inside one company
- ReportingLine: manager -> direct report pairs (the org chart)
"""
from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from apps.access.roles import Role
from apps.core.models import BaseModel, BaseModelManager


def default_company_settings():
    return {
        'timezone': 'UTC',
        'date_format': 'YYYY-MM-DD',
        'currency': 'USD',
    }


def default_branding():
    return {
        'primary_color': '#007bff',
        'secondary_color': '#6c757d',
        'accent_color': '#28a745',
        'theme_mode': 'light',
    }


class CompanyManager(BaseModelManager):
    """Manager for Company queries (soft-deleted rows hidden)."""

    def active(self):
        return self.filter(is_active=True)

    def for_user(self, user):
        """Companies where the user has an active membership."""
        return self.filter(
            memberships__user=user,
            memberships__is_active=True,
        ).distinct()


class Company(BaseModel):
    """
    A customer organisation. All HR data is scoped to one company.
    """

    PLAN_CHOICES = [
        ('free', 'Free'),
        ('basic', 'Basic'),
        ('professional', 'Professional'),
        ('enterprise', 'Enterprise'),
    ]
    THEME_MODES = ('light', 'dark', 'auto')

    name = models.CharField(max_length=255, help_text="Company name")
    slug = models.SlugField(
        unique=True,
        max_length=100,
        help_text="URL-friendly identifier"
    )
    plan = models.CharField(
        max_length=20,
        choices=PLAN_CHOICES,
        default='free',
        db_index=True,
    )
    domain = models.CharField(
        max_length=100,
        blank=True,
        help_text="Subdomain used by the workspace (e.g. 'acme-corp')"
    )
    custom_domain = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive companies cannot be accessed by their members"
    )
    subscription_end_date = models.DateTimeField(null=True, blank=True)
    settings = models.JSONField(
        default=default_company_settings,
        blank=True,
        help_text="Locale settings: timezone, date_format, currency"
    )
    branding = models.JSONField(
        default=default_branding,
        blank=True,
        help_text="Colors, theme mode and logo URLs"
    )

    objects = CompanyManager()

    class Meta:
        db_table = 'companies'
        ordering = ['name']
        verbose_name_plural = 'companies'

    def __str__(self):
        return self.name

    @property
    def member_count(self):
        return self.memberships.filter(is_active=True).count()


class CompanyMembershipManager(models.Manager):
    """Manager for CompanyMembership queries."""

    def active(self):
        return self.filter(is_active=True, company__deleted_at__isnull=True)

    def for_company(self, company):
        return self.active().filter(company=company)

    def for_user(self, user):
        return self.active().filter(user=user)

    def get_membership(self, company, user):
        return self.active().filter(company=company, user=user).select_related('user').first()


class CompanyMembership(models.Model):
    """
    A user's membership in one company with exactly one role.

    The same user may hold different roles in different companies.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='memberships',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='company_memberships',
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices(),
        default=Role.EMPLOYEE.value,
        db_index=True,
    )
    is_active = models.BooleanField(default=True, db_index=True)
    joined_at = models.DateTimeField(default=timezone.now)
    last_seen_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last request made in this company (drives company switching order)"
    )

    objects = CompanyMembershipManager()

    class Meta:
        db_table = 'company_memberships'
        ordering = ['company__name']
        constraints = [
            models.UniqueConstraint(fields=['company', 'user'], name='unique_company_member'),
        ]

    def __str__(self):
        return f"{self.user.get_username()} @ {self.company.name} ({self.role})"

    def touch(self):
        self.last_seen_at = timezone.now()
        self.save(update_fields=['last_seen_at'])


class ReportingLineManager(models.Manager):
    """Manager for ReportingLine queries."""

    def active_for_company(self, company):
        """Lines where both ends are still active members of the company."""
        return self.filter(
            company=company,
            manager__company_memberships__company=company,
            manager__company_memberships__is_active=True,
            report__company_memberships__company=company,
            report__company_memberships__is_active=True,
        )


class ReportingLine(models.Model):
    """
    One manager -> direct report pair inside a company.

    The org chart is one level deep per line; nothing here walks chains.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='reporting_lines',
    )
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='managed_lines',
    )
    report = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reporting_lines',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ReportingLineManager()

    class Meta:
        db_table = 'reporting_lines'
        constraints = [
            models.UniqueConstraint(
                fields=['company', 'manager', 'report'],
                name='unique_reporting_line',
            ),
            models.CheckConstraint(
                condition=~Q(manager=F('report')),
                name='reporting_line_not_self',
            ),
        ]

    def __str__(self):
        return f"{self.manager_id} -> {self.report_id} ({self.company_id})"
