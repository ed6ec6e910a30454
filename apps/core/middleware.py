"""
Core middleware for request processing.
"""
import logging
import uuid
from django.utils.deprecation import MiddlewareMixin

from apps.core.logging import clear_log_context, set_log_context

logger = logging.getLogger(__name__)


class RequestIDMiddleware(MiddlewareMixin):
    """
    Give every request a request_id for tracing.

    Honours an incoming X-Request-ID header, exposes the id on the response
    and makes it available to log records emitted while the request runs.
    """

    def process_request(self, request):
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.request_id = request_id
        clear_log_context()
        set_log_context(request_id=request_id)

    def process_response(self, request, response):
        if hasattr(request, 'request_id'):
            response['X-Request-ID'] = request.request_id
        clear_log_context()
        return response
