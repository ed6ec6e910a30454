"""
Company context middleware for multi-tenant isolation.

Resolves the company named by the X-COMPANY-ID header, checks the caller's
membership and attaches the principal the access resolver works on.
"""
import logging
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from apps.access.directory import load_company_directory
from apps.access.principal import Principal
from apps.core.logging import SecurityLogger, set_log_context
from .models import Company, CompanyMembership

logger = logging.getLogger(__name__)


class CompanyContextMiddleware(MiddlewareMixin):
    """
    Attach company context to company-scoped requests.

    For paths under COMPANY_SCOPED_PATHS this middleware:
    1. Requires an authenticated user
    2. Reads the X-COMPANY-ID header and loads the company
    3. Rejects deleted, unknown or inactive companies
    4. Requires an active membership and builds the Principal from it
    5. Loads the company's reporting lines as the team directory
    6. Updates last_seen_at on the membership

    Other paths get request.company = None and pass through untouched.
    """

    COMPANY_SCOPED_PATHS = [
        '/v1/access/',
    ]

    def process_request(self, request):
        request.company = None
        request.membership = None
        request.principal = None
        request.team_directory = None

        if not self._is_company_scoped(request.path):
            return None

        request_id = getattr(request, 'request_id', None)
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated:
            return self._error_response(
                request,
                'UNAUTHENTICATED',
                'Authentication credentials were not provided.',
                status=401
            )

        company_id = request.headers.get('X-COMPANY-ID')
        if not company_id:
            return self._error_response(
                request,
                'MISSING_COMPANY',
                'X-COMPANY-ID header is required',
                status=400
            )

        try:
            company = Company.objects.get(id=company_id)
        except (Company.DoesNotExist, ValidationError, ValueError):
            logger.warning(
                f"Invalid company ID: {company_id}",
                extra={'request_id': request_id}
            )
            return self._error_response(
                request,
                'INVALID_COMPANY',
                'Invalid company ID',
                status=404
            )

        if not company.is_active:
            logger.info(
                f"Inactive company attempted access: {company.slug}",
                extra={'request_id': request_id}
            )
            return self._error_response(
                request,
                'COMPANY_INACTIVE',
                'This company has been deactivated.',
                status=403
            )

        membership = CompanyMembership.objects.get_membership(company, user)
        if membership is None:
            SecurityLogger.log_cross_company_access(
                user.pk,
                company.id,
                ip_address=request.META.get('REMOTE_ADDR'),
            )
            return self._error_response(
                request,
                'FORBIDDEN',
                'You do not have access to this company',
                status=403
            )

        membership.touch()

        request.company = company
        request.membership = membership
        request.principal = Principal.from_membership(membership)
        request.team_directory = load_company_directory(company)
        set_log_context(company_id=str(company.id))

        logger.debug(
            f"Company context set: {company.slug} as {membership.role}",
            extra={'request_id': request_id}
        )
        return None

    def _is_company_scoped(self, path):
        return any(path.startswith(prefix) for prefix in self.COMPANY_SCOPED_PATHS)

    def _error_response(self, request, code, message, status=400, details=None):
        """Generate standardized error response."""
        error_data = {
            'error': {
                'code': code,
                'message': message,
            }
        }

        if details:
            error_data['error']['details'] = details

        request_id = getattr(request, 'request_id', None)
        if request_id:
            error_data['request_id'] = request_id

        return JsonResponse(error_data, status=status)
