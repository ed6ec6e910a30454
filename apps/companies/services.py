"""
Company management services.

Handles:
- Company lifecycle (create, update, soft delete, activate/deactivate)
- Company membership (assign a user with a role, remove a user)
- Reporting lines (the manager -> report org chart)
- Platform user accounts

Every write records an AuditLog entry and a security log event.
"""
import logging
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, F, Q
from django.utils import timezone
from django.utils.text import slugify

from apps.access.roles import Role
from apps.core.exceptions import (
    CompanyNotFound,
    InvalidReportingLine,
    MembershipConflict,
    MembershipNotFound,
    ReportingLineNotFound,
    TemException,
    UserNotFound,
)
from apps.core.logging import SecurityLogger
from apps.core.models import AuditLog
from .models import Company, CompanyMembership, ReportingLine

logger = logging.getLogger(__name__)

User = get_user_model()

COMPANY_UPDATE_FIELDS = (
    'name', 'plan', 'domain', 'custom_domain', 'subscription_end_date', 'settings', 'branding',
)
USER_UPDATE_FIELDS = ('email', 'first_name', 'last_name', 'is_active', 'is_superuser')


def _record(action, actor, target_type, target_id, company=None, diff=None, metadata=None, request=None):
    AuditLog.log_action(
        action=action,
        user=actor,
        company=company,
        target_type=target_type,
        target_id=target_id,
        diff=diff,
        metadata=metadata,
        request=request,
    )
    SecurityLogger.log_platform_action(action, actor, target_type, target_id)


def _parse_role(role) -> Role:
    parsed = Role.parse(role)
    if parsed is None:
        raise TemException(
            f"Unknown role: {role}",
            details={'role': role, 'allowed': [r.value for r in Role]},
        )
    return parsed


class CompanyService:
    """
    Service for company lifecycle, membership and org chart management.
    """

    @staticmethod
    def unique_slug(name: str, slug: Optional[str] = None) -> str:
        """Slugify the name (or given slug) and suffix -1, -2... until unused."""
        base_slug = slugify(slug or name) or 'company'
        candidate = base_slug
        counter = 1
        while Company.objects_with_deleted.filter(slug=candidate).exists():
            candidate = f"{base_slug}-{counter}"
            counter += 1
        return candidate

    @classmethod
    def get_company(cls, company_id) -> Company:
        try:
            return Company.objects.get(id=company_id)
        except (Company.DoesNotExist, ValidationError, ValueError):
            raise CompanyNotFound(f"Company {company_id} not found")

    @classmethod
    def list_companies(cls, search: Optional[str] = None, is_active: Optional[bool] = None):
        """All companies with their active member counts."""
        queryset = Company.objects.annotate(
            active_members=Count('memberships', filter=Q(memberships__is_active=True))
        )
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(slug__icontains=search))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset.order_by('name')

    @classmethod
    @transaction.atomic
    def create_company(cls, actor, name: str, slug: Optional[str] = None, request=None,
                       **fields) -> Company:
        """
        Create a company with a unique slug generated from its name.

        Raises:
            TemException: If the name is blank
        """
        name = (name or '').strip()
        if not name:
            raise TemException("Company name is required", details={'name': 'required'})

        slug = cls.unique_slug(name, slug)
        values = {key: value for key, value in fields.items() if key in COMPANY_UPDATE_FIELDS}
        if not values.get('domain'):
            values['domain'] = slug

        company = Company.objects.create(name=name, slug=slug, **values)

        _record(
            'company_created', actor, 'Company', company.id,
            company=company,
            metadata={'company_name': name, 'company_slug': slug},
            request=request,
        )
        logger.info(f"Company created: {company.slug}", extra={'company_id': str(company.id)})
        return company

    @classmethod
    @transaction.atomic
    def update_company(cls, actor, company: Company, data: dict, request=None) -> Company:
        """Apply a partial update and record the changed fields."""
        diff = {}
        for key, value in data.items():
            if key not in COMPANY_UPDATE_FIELDS:
                continue
            old_value = getattr(company, key)
            if old_value != value:
                diff[key] = {'old': str(old_value) if old_value is not None else None,
                             'new': str(value) if value is not None else None}
                setattr(company, key, value)

        if diff:
            company.save()
            _record('company_updated', actor, 'Company', company.id,
                    company=company, diff=diff, request=request)
        return company

    @classmethod
    @transaction.atomic
    def set_company_active(cls, actor, company: Company, is_active: bool, request=None) -> Company:
        if company.is_active != is_active:
            company.is_active = is_active
            company.save(update_fields=['is_active', 'updated_at'])
            _record(
                'company_activated' if is_active else 'company_deactivated',
                actor, 'Company', company.id,
                company=company,
                diff={'is_active': {'old': not is_active, 'new': is_active}},
                request=request,
            )
        return company

    @classmethod
    def toggle_company_status(cls, actor, company: Company, request=None) -> Company:
        return cls.set_company_active(actor, company, not company.is_active, request=request)

    @classmethod
    @transaction.atomic
    def delete_company(cls, actor, company: Company, request=None):
        """
        Soft delete a company and deactivate its memberships.

        The slug stays reserved so it is never reissued.
        """
        company.delete()
        deactivated = CompanyMembership.objects.filter(company=company, is_active=True).update(is_active=False)

        _record(
            'company_deleted', actor, 'Company', company.id,
            company=company,
            metadata={'company_slug': company.slug, 'memberships_deactivated': deactivated},
            request=request,
        )

    # Membership

    @classmethod
    def get_user_companies(cls, user) -> List[CompanyMembership]:
        """
        Active memberships of a user, most recently used company first.

        Companies never visited sort last, then by name.
        """
        return list(
            CompanyMembership.objects.for_user(user)
            .filter(company__is_active=True)
            .select_related('company')
            .order_by(F('last_seen_at').desc(nulls_last=True), 'company__name')
        )

    @classmethod
    def list_members(cls, company: Company):
        return CompanyMembership.objects.for_company(company).select_related('user').order_by('user__username')

    @classmethod
    @transaction.atomic
    def assign_user_to_company(cls, actor, company: Company, user, role, request=None) -> CompanyMembership:
        """
        Give a user a role in a company.

        An existing membership is reactivated and its role replaced.

        Raises:
            TemException: If the role is not a known role
        """
        role = _parse_role(role)

        membership, created = CompanyMembership.objects.get_or_create(
            company=company,
            user=user,
            defaults={'role': role.value, 'is_active': True},
        )
        old_role = None if created else membership.role
        if not created and (membership.role != role.value or not membership.is_active):
            membership.role = role.value
            membership.is_active = True
            membership.save(update_fields=['role', 'is_active'])

        _record(
            'member_assigned', actor, 'CompanyMembership', membership.id,
            company=company,
            diff={'role': {'old': old_role, 'new': role.value}},
            metadata={'user_id': str(user.pk)},
            request=request,
        )
        return membership

    @classmethod
    @transaction.atomic
    def remove_user_from_company(cls, actor, company: Company, user, request=None):
        """
        Deactivate a membership and drop the user's reporting lines there.

        Raises:
            MembershipNotFound: If the user is not an active member
        """
        membership = CompanyMembership.objects.get_membership(company, user)
        if membership is None:
            raise MembershipNotFound(f"User {user.pk} is not a member of {company.slug}")

        membership.is_active = False
        membership.save(update_fields=['is_active'])
        removed_lines, _ = ReportingLine.objects.filter(
            Q(manager=user) | Q(report=user), company=company
        ).delete()

        _record(
            'member_removed', actor, 'CompanyMembership', membership.id,
            company=company,
            metadata={'user_id': str(user.pk), 'reporting_lines_removed': removed_lines},
            request=request,
        )

    # Reporting lines

    @classmethod
    def list_reporting_lines(cls, company: Company):
        return (
            ReportingLine.objects.active_for_company(company)
            .select_related('manager', 'report')
            .order_by('created_at', 'id')
        )

    @classmethod
    @transaction.atomic
    def add_reporting_line(cls, actor, company: Company, manager, report, request=None) -> ReportingLine:
        """
        Record that `report` reports directly to `manager` in the company.

        Raises:
            InvalidReportingLine: Self-reporting or a party is not an active member
            MembershipConflict: The line already exists
        """
        if manager.pk == report.pk:
            raise InvalidReportingLine("A user cannot report to themselves")

        member_ids = set(
            CompanyMembership.objects.for_company(company)
            .filter(user__in=[manager, report])
            .values_list('user_id', flat=True)
        )
        missing = [str(u.pk) for u in (manager, report) if u.pk not in member_ids]
        if missing:
            raise InvalidReportingLine(
                "Both users must be active members of the company",
                details={'not_members': missing},
            )

        if ReportingLine.objects.filter(company=company, manager=manager, report=report).exists():
            raise MembershipConflict(
                "Reporting line already exists",
                details={'manager_id': str(manager.pk), 'report_id': str(report.pk)},
            )

        line = ReportingLine.objects.create(company=company, manager=manager, report=report)

        _record(
            'reporting_line_added', actor, 'ReportingLine', line.id,
            company=company,
            metadata={'manager_id': str(manager.pk), 'report_id': str(report.pk)},
            request=request,
        )
        return line

    @classmethod
    @transaction.atomic
    def remove_reporting_line(cls, actor, company: Company, manager, report, request=None):
        deleted, _ = ReportingLine.objects.filter(company=company, manager=manager, report=report).delete()
        if not deleted:
            raise ReportingLineNotFound(
                "Reporting line not found",
                details={'manager_id': str(manager.pk), 'report_id': str(report.pk)},
            )

        _record(
            'reporting_line_removed', actor, 'ReportingLine', None,
            company=company,
            metadata={'manager_id': str(manager.pk), 'report_id': str(report.pk)},
            request=request,
        )


class PlatformUserService:
    """
    Platform-level user accounts managed from the super-admin console.
    """

    @classmethod
    def get_user(cls, user_id):
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValidationError, ValueError):
            raise UserNotFound(f"User {user_id} not found")

    @classmethod
    def get_users(cls, user_ids: Iterable) -> list:
        return [cls.get_user(user_id) for user_id in user_ids]

    @classmethod
    def list_users(cls, search: Optional[str] = None):
        queryset = User.objects.annotate(
            company_count=Count('company_memberships', filter=Q(company_memberships__is_active=True))
        )
        if search:
            queryset = queryset.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )
        return queryset.order_by('username')

    @classmethod
    @transaction.atomic
    def create_user(cls, actor, username: str, email: str = '', password: Optional[str] = None,
                    request=None, **fields):
        """
        Create a user account. Without a password the account cannot log in
        until one is set.

        Raises:
            MembershipConflict: If the username is taken
        """
        if User.objects.filter(username=username).exists():
            raise MembershipConflict(
                f"Username {username} is already taken",
                details={'username': username},
            )

        extra = {key: value for key, value in fields.items() if key in USER_UPDATE_FIELDS}
        user = User.objects.create_user(username=username, email=email, password=password, **extra)

        _record(
            'user_created', actor, 'User', user.pk,
            metadata={'username': username, 'is_superuser': user.is_superuser},
            request=request,
        )
        return user

    @classmethod
    @transaction.atomic
    def update_user(cls, actor, user, data: dict, request=None):
        """
        Apply a partial update and record the changed fields.

        Raises:
            TemException: If an actor tries to deactivate or demote their own account
        """
        if actor is not None and actor.pk == user.pk:
            locked_out = [key for key in ('is_active', 'is_superuser') if data.get(key) is False]
            if locked_out:
                raise TemException(
                    "You cannot deactivate or demote your own account",
                    details={'fields': locked_out},
                )

        diff = {}
        for key, value in data.items():
            if key not in USER_UPDATE_FIELDS:
                continue
            old_value = getattr(user, key)
            if old_value != value:
                diff[key] = {'old': old_value, 'new': value}
                setattr(user, key, value)

        if data.get('password'):
            user.set_password(data['password'])
            diff['password'] = {'old': None, 'new': None}

        if diff:
            user.save()
            _record('user_updated', actor, 'User', user.pk, diff=diff, request=request)
        return user

    @classmethod
    @transaction.atomic
    def delete_user(cls, actor, user, request=None):
        """
        Deactivate a user account and all of its memberships.

        The row is kept so audit entries keep pointing at it.

        Raises:
            TemException: If an actor tries to delete their own account
        """
        if actor is not None and actor.pk == user.pk:
            raise TemException("You cannot delete your own account")

        user.is_active = False
        user.save(update_fields=['is_active'])
        deactivated = CompanyMembership.objects.filter(user=user, is_active=True).update(is_active=False)
        ReportingLine.objects.filter(Q(manager=user) | Q(report=user)).delete()

        _record(
            'user_deleted', actor, 'User', user.pk,
            metadata={'memberships_deactivated': deactivated, 'deleted_at': timezone.now().isoformat()},
            request=request,
        )
