"""
DRF permission classes and decorators backed by the access resolver.

This module provides:
- IsSuperAdmin: platform console endpoints
- HasCompanyContext: endpoints that need request.company / request.principal
- HasResourceAccess: enforces the resource tags a view declares
- @requires_resource: decorator to declare those tags on views
"""
import logging
from rest_framework.permissions import BasePermission

from apps.core.logging import SecurityLogger

logger = logging.getLogger(__name__)


def get_request_resolver(request):
    """
    Return the resolver for the request's company context.

    CompanyContextMiddleware attaches the company's team directory; the
    resolver is built from it once and memoized on the request.
    """
    from apps.access.resolver import AccessControlResolver

    resolver = getattr(request, 'access_resolver', None)
    if resolver is None:
        resolver = AccessControlResolver.from_settings(getattr(request, 'team_directory', None))
        request.access_resolver = resolver
    return resolver


class IsSuperAdmin(BasePermission):
    """Allow only platform super admins."""

    message = 'Platform administrator access required.'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated and user.is_superuser:
            return True

        logger.warning(
            "Platform console access denied",
            extra={
                'user_id': str(user.pk) if user is not None and user.is_authenticated else None,
                'view': view.__class__.__name__,
                'path': request.path,
                'request_id': getattr(request, 'request_id', None),
            }
        )
        return False


class HasCompanyContext(BasePermission):
    """Require the principal resolved by CompanyContextMiddleware."""

    message = 'An X-COMPANY-ID header for a company you belong to is required.'

    def has_permission(self, request, view):
        return getattr(request, 'principal', None) is not None


class HasResourceAccess(HasCompanyContext):
    """
    Enforce the resource tags a view declares.

    Usage in views:
        class LeadListView(APIView):
            permission_classes = [IsAuthenticated, HasResourceAccess]
            required_resources = ['leads']
    """

    message = 'You do not have access to this resource.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        handler = getattr(view, request.method.lower(), None)
        required = getattr(handler, 'required_resources', None) or getattr(view, 'required_resources', None)
        if not required:
            return True
        if isinstance(required, str):
            required = [required]

        resolver = get_request_resolver(request)
        principal = request.principal
        denied = [resource for resource in required if not resolver.is_allowed(resource, principal)]

        if denied:
            company = getattr(request, 'company', None)
            logger.warning(
                f"Access denied: principal {principal.id} missing resources {denied}",
                extra={
                    'principal_id': principal.id,
                    'denied_resources': denied,
                    'view': view.__class__.__name__,
                    'method': request.method,
                    'path': request.path,
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            for resource in denied:
                SecurityLogger.log_access_denied(principal, resource, company=company, path=request.path)
            return False

        return True


def requires_resource(*resources):
    """
    Declare the resource tags a view class or handler method needs.

        @requires_resource('reports')
        class ReportView(APIView):
            permission_classes = [HasResourceAccess]
    """
    def decorator(view_or_method):
        # On a handler method the tags are read by HasResourceAccess before it runs
        view_or_method.required_resources = list(resources)
        return view_or_method

    return decorator
