"""
Structured logging for TEM.

Provides:
- PIIMasker: masks emails, phone numbers, secrets and HR-sensitive fields
- JSONFormatter: one JSON object per record, request/company ids included
- MaskingFormatter: the same masking for plain-text output
- RequestContextFilter: copies request_id / company_id from thread-local state
- SecurityLogger: access denials and platform administration events
"""
import json
import logging
import re
import threading
import traceback
from datetime import datetime, timezone as dt_timezone

import sentry_sdk
from django.utils import timezone


_context = threading.local()


def set_log_context(**values):
    """Attach request-scoped values (request_id, company_id) to later log records."""
    for key, value in values.items():
        setattr(_context, key, value)


def clear_log_context():
    _context.__dict__.clear()


class PIIMasker:
    """
    Mask personal and secret data before it reaches a log sink.
    """

    PHONE_PATTERN = re.compile(r'\+?\d{10,15}')
    EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
    SECRET_PATTERN = re.compile(
        r'(api[_-]?key|token|secret|password|sessionid|csrftoken)["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)',
        re.IGNORECASE
    )

    # Field names whose values are always replaced
    SENSITIVE_FIELDS = {
        'phone', 'mobile', 'email',
        'password', 'passwd', 'secret', 'token', 'api_key', 'sessionid',
        'salary', 'bank_account', 'iban', 'tax_id', 'national_id', 'ssn',
    }

    @classmethod
    def mask_email(cls, text):
        def _mask(match):
            username, _, domain = match.group(0).partition('@')
            if len(username) > 1:
                username = username[0] + '*' * (len(username) - 1)
            return f"{username}@{domain}"
        return cls.EMAIL_PATTERN.sub(_mask, text)

    @classmethod
    def mask_text(cls, text):
        if not isinstance(text, str):
            return text
        text = cls.PHONE_PATTERN.sub(lambda m: m.group(0)[:3] + '*' * (len(m.group(0)) - 3), text)
        text = cls.mask_email(text)
        text = cls.SECRET_PATTERN.sub(r'\1: ********', text)
        return text

    @classmethod
    def is_sensitive(cls, key):
        key = key.lower()
        return any(field in key for field in cls.SENSITIVE_FIELDS)

    @classmethod
    def mask_dict(cls, data):
        """Recursively mask sensitive data in dictionaries."""
        if not isinstance(data, dict):
            return data

        masked = {}
        for key, value in data.items():
            if cls.is_sensitive(str(key)) and value and not isinstance(value, (dict, list)):
                masked[key] = '********'
            elif isinstance(value, dict):
                masked[key] = cls.mask_dict(value)
            elif isinstance(value, list):
                masked[key] = [
                    cls.mask_dict(item) if isinstance(item, dict) else cls.mask_text(item)
                    for item in value
                ]
            else:
                masked[key] = cls.mask_text(value)
        return masked


class RequestContextFilter(logging.Filter):
    """Add request_id and company_id to log records when a request is active."""

    def filter(self, record):
        for key in ('request_id', 'company_id'):
            if not hasattr(record, key) and hasattr(_context, key):
                setattr(record, key, getattr(_context, key))
        return True


class JSONFormatter(logging.Formatter):
    """
    Format log records as JSON with PII masking.
    """

    RESERVED = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
        'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
        'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
        'exc_text', 'stack_info', 'taskName', 'request_id', 'company_id',
    }

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(dt_timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': PIIMasker.mask_text(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if getattr(record, 'request_id', None):
            log_data['request_id'] = record.request_id
        if getattr(record, 'company_id', None):
            log_data['company_id'] = str(record.company_id)

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': PIIMasker.mask_text(str(record.exc_info[1])),
                'traceback': [
                    PIIMasker.mask_text(line)
                    for line in traceback.format_exception(*record.exc_info)
                ],
            }

        for key, value in record.__dict__.items():
            if key in self.RESERVED or key.startswith('_'):
                continue
            if PIIMasker.is_sensitive(key) and value:
                log_data[key] = '********'
                continue
            if isinstance(value, dict):
                value = PIIMasker.mask_dict(value)
            elif isinstance(value, str):
                value = PIIMasker.mask_text(value)
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = PIIMasker.mask_text(str(value))

        return json.dumps(log_data)


class SecurityLogger:
    """
    Security events on the 'security' logger.

    Critical events are also sent to Sentry.
    """

    CRITICAL_EVENTS = {
        'cross_company_access',
    }

    @staticmethod
    def log_event(event_type: str, level: str = 'warning', **context):
        logger = logging.getLogger('security')

        log_data = {
            'event_type': event_type,
            'timestamp': timezone.now().isoformat(),
        }
        log_data.update(context)
        log_data = PIIMasker.mask_dict(log_data)

        log_method = getattr(logger, level, logger.warning)
        log_method(f"Security event: {event_type}", extra=log_data)

        if event_type in SecurityLogger.CRITICAL_EVENTS:
            sentry_sdk.capture_message(
                f"Critical security event: {event_type}",
                level='error',
            )

    @staticmethod
    def log_access_denied(principal, resource: str, company=None, path: str = None):
        """A principal was refused a resource by the access resolver."""
        SecurityLogger.log_event(
            'access_denied',
            level='warning',
            principal_id=principal.id if principal else None,
            role=str(getattr(principal.role, 'value', principal.role)) if principal else None,
            resource=resource,
            company_id=str(company.id) if company else None,
            path=path,
        )

    @staticmethod
    def log_cross_company_access(user_id, company_id, ip_address: str = None):
        """A user addressed a company they are not a member of."""
        SecurityLogger.log_event(
            'cross_company_access',
            level='error',
            user_id=str(user_id),
            company_id=str(company_id),
            ip_address=ip_address,
        )

    @staticmethod
    def log_rate_limit_exceeded(endpoint: str, ip_address: str, user_id=None):
        SecurityLogger.log_event(
            'rate_limit_exceeded',
            level='warning',
            endpoint=endpoint,
            ip_address=ip_address,
            user_id=str(user_id) if user_id else None,
        )

    @staticmethod
    def log_platform_action(action: str, actor, target_type: str, target_id=None):
        """Super-admin console write (company or user management)."""
        SecurityLogger.log_event(
            'platform_action',
            level='info',
            action=action,
            actor_id=str(actor.pk) if actor else None,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else None,
        )


class MaskingFormatter(logging.Formatter):
    """Plain-text formatter that masks PII in the rendered line."""

    def format(self, record):
        return PIIMasker.mask_text(super().format(record))
