"""
Exception types and the DRF exception handler.

Every error response has the shape:
    {"error": {"code": ..., "message": ..., "details": {...}}, "request_id": ...}
"""
import logging
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404, JsonResponse
from django_ratelimit.exceptions import Ratelimited
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 60


class TemException(Exception):
    """Base exception for domain errors raised by services."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'BAD_REQUEST'

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CompanyNotFound(TemException):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'COMPANY_NOT_FOUND'


class UserNotFound(TemException):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'USER_NOT_FOUND'


class MembershipNotFound(TemException):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'MEMBERSHIP_NOT_FOUND'


class MembershipConflict(TemException):
    """A membership or reporting line already exists."""
    status_code = status.HTTP_409_CONFLICT
    code = 'CONFLICT'


class InvalidReportingLine(TemException):
    code = 'INVALID_REPORTING_LINE'


class ReportingLineNotFound(TemException):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'REPORTING_LINE_NOT_FOUND'


def error_payload(code, message, details=None, request_id=None):
    data = {'error': {'code': code, 'message': message}}
    if details:
        data['error']['details'] = details
    if request_id:
        data['request_id'] = request_id
    return data


def _rate_limited(request):
    from apps.core.logging import SecurityLogger

    ip_address = request.META.get('REMOTE_ADDR', 'unknown') if request else 'unknown'
    user = getattr(request, 'user', None)
    SecurityLogger.log_rate_limit_exceeded(
        endpoint=request.path if request else 'unknown',
        ip_address=ip_address,
        user_id=user.pk if user is not None and user.is_authenticated else None,
    )
    return error_payload(
        'RATE_LIMIT_EXCEEDED',
        'Rate limit exceeded. Please try again later.',
        details={'retry_after': RETRY_AFTER_SECONDS},
        request_id=getattr(request, 'request_id', None),
    )


def ratelimit_view(request, exception):
    """RATELIMIT_VIEW: answer blocked requests outside DRF with 429."""
    response = JsonResponse(_rate_limited(request), status=status.HTTP_429_TOO_MANY_REQUESTS)
    response['Retry-After'] = str(RETRY_AFTER_SECONDS)
    return response


def _error_code(exc):
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            return codes.upper()
        return 'VALIDATION_ERROR' if exc.status_code == 400 else exc.default_code.upper()
    return 'ERROR'


def custom_exception_handler(exc, context):
    """
    Log API errors and return them in the common error shape.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, Ratelimited):
        response = Response(_rate_limited(request), status=status.HTTP_429_TOO_MANY_REQUESTS)
        response['Retry-After'] = str(RETRY_AFTER_SECONDS)
        return response

    if isinstance(exc, TemException):
        logger.info(
            f"Domain error: {exc.__class__.__name__}",
            extra={'request_id': request_id, 'error_code': exc.code},
        )
        return Response(
            error_payload(exc.code, exc.message, exc.details, request_id),
            status=exc.status_code,
        )

    if isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            f"Unhandled API exception: {exc.__class__.__name__}",
            extra={
                'request_id': request_id,
                'path': request.path if request else None,
                'method': request.method if request else None,
            },
            exc_info=True
        )
        return Response(
            error_payload('INTERNAL_ERROR', 'An unexpected error occurred', request_id=request_id),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.warning(
        f"API exception: {exc.__class__.__name__}",
        extra={
            'request_id': request_id,
            'status_code': response.status_code,
            'path': request.path if request else None,
        }
    )

    if isinstance(response.data, dict) and set(response.data) == {'detail'}:
        message, details = str(response.data['detail']), None
    else:
        message, details = 'Invalid request', response.data
    response.data = error_payload(_error_code(exc), message, details, request_id)
    return response
