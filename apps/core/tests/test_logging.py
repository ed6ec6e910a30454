"""
Tests for structured logging and PII masking.
"""
import json
import logging
import sys
from unittest.mock import patch

from django.test import SimpleTestCase

from apps.access.principal import Principal
from apps.core.logging import (
    JSONFormatter,
    MaskingFormatter,
    PIIMasker,
    RequestContextFilter,
    SecurityLogger,
    clear_log_context,
    set_log_context,
)


def make_record(msg='hello', level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name='apps.test',
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class PIIMaskerTestCase(SimpleTestCase):
    """Test PII masking functionality."""

    def test_mask_phone_numbers(self):
        masked = PIIMasker.mask_text("Call +14155551234 now")

        self.assertIn("+14*", masked)
        self.assertNotIn("+14155551234", masked)

    def test_mask_email_addresses(self):
        masked = PIIMasker.mask_text("Contact emily@acme.example.com")

        self.assertIn("e****@acme.example.com", masked)
        self.assertNotIn("emily@", masked)

    def test_mask_secrets(self):
        masked = PIIMasker.mask_text('password="hunter22" token=abc123')

        self.assertNotIn("hunter22", masked)
        self.assertNotIn("abc123", masked)
        self.assertIn("password: ********", masked)

    def test_non_strings_pass_through(self):
        self.assertEqual(PIIMasker.mask_text(42), 42)
        self.assertIsNone(PIIMasker.mask_text(None))

    def test_mask_dict_sensitive_fields(self):
        data = {
            'name': 'Emily Davis',
            'salary': 85000,
            'bank_account': 'GB00 1234',
            'email': 'emily@example.com',
            'role': 'employee',
            'nested': {'api_key': 'sk_live_abc', 'team': 'Platform'},
            'notes': ['reach me at emily@example.com', {'password': 'x1'}],
        }

        masked = PIIMasker.mask_dict(data)

        self.assertEqual(masked['name'], 'Emily Davis')
        self.assertEqual(masked['salary'], '********')
        self.assertEqual(masked['bank_account'], '********')
        self.assertEqual(masked['email'], '********')
        self.assertEqual(masked['role'], 'employee')
        self.assertEqual(masked['nested'], {'api_key': '********', 'team': 'Platform'})
        self.assertEqual(masked['notes'][0], 'reach me at e****@example.com')
        self.assertEqual(masked['notes'][1], {'password': '********'})

    def test_empty_sensitive_values_are_kept(self):
        self.assertEqual(PIIMasker.mask_dict({'email': ''}), {'email': ''})


class JSONFormatterTestCase(SimpleTestCase):
    """Test JSON log formatting."""

    def setUp(self):
        self.formatter = JSONFormatter()

    def test_basic_fields(self):
        data = json.loads(self.formatter.format(make_record('Company created')))

        self.assertEqual(data['level'], 'INFO')
        self.assertEqual(data['logger'], 'apps.test')
        self.assertEqual(data['message'], 'Company created')
        self.assertTrue(data['timestamp'].endswith('Z'))
        self.assertNotIn('request_id', data)

    def test_request_and_company_ids(self):
        data = json.loads(self.formatter.format(
            make_record(request_id='req-9', company_id='c-1')
        ))

        self.assertEqual(data['request_id'], 'req-9')
        self.assertEqual(data['company_id'], 'c-1')

    def test_extra_fields_are_masked(self):
        data = json.loads(self.formatter.format(make_record(
            'Login for emily@example.com',
            user_email='emily@example.com',
            principal_id='7',
            details={'token': 'abc'},
            obj=object(),
        )))

        self.assertEqual(data['message'], 'Login for e****@example.com')
        self.assertEqual(data['user_email'], '********')
        self.assertEqual(data['principal_id'], '7')
        self.assertEqual(data['details'], {'token': '********'})
        self.assertTrue(data['obj'].startswith('<object object'))

    def test_exception_info(self):
        try:
            raise ValueError("bad value for emily@example.com")
        except ValueError:
            record = make_record('failed', level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(self.formatter.format(record))

        self.assertEqual(data['exception']['type'], 'ValueError')
        self.assertIn('e****@example.com', data['exception']['message'])
        self.assertTrue(data['exception']['traceback'])


class MaskingFormatterTestCase(SimpleTestCase):

    def test_masks_rendered_line(self):
        formatter = MaskingFormatter('{levelname} {message}', style='{')

        line = formatter.format(make_record('Invite sent to emily@example.com'))

        self.assertEqual(line, 'INFO Invite sent to e****@example.com')


class RequestContextFilterTestCase(SimpleTestCase):

    def setUp(self):
        clear_log_context()

    def tearDown(self):
        clear_log_context()

    def test_adds_context_values(self):
        set_log_context(request_id='req-1', company_id='c-1')
        record = make_record()

        self.assertTrue(RequestContextFilter().filter(record))
        self.assertEqual(record.request_id, 'req-1')
        self.assertEqual(record.company_id, 'c-1')

    def test_explicit_values_win(self):
        set_log_context(request_id='req-1')
        record = make_record(request_id='explicit')

        RequestContextFilter().filter(record)

        self.assertEqual(record.request_id, 'explicit')

    def test_no_context(self):
        record = make_record()

        RequestContextFilter().filter(record)

        self.assertFalse(hasattr(record, 'request_id'))


class SecurityLoggerTestCase(SimpleTestCase):

    def test_access_denied(self):
        with self.assertLogs('security', level='WARNING') as logs:
            SecurityLogger.log_access_denied(Principal('7', 'employee'), 'leads', path='/v1/access/check')

        record = logs.records[0]
        self.assertEqual(record.getMessage(), 'Security event: access_denied')
        self.assertEqual(record.event_type, 'access_denied')
        self.assertEqual(record.principal_id, '7')
        self.assertEqual(record.role, 'employee')
        self.assertEqual(record.resource, 'leads')

    @patch('apps.core.logging.sentry_sdk.capture_message')
    def test_cross_company_access_goes_to_sentry(self, capture_message):
        with self.assertLogs('security', level='ERROR') as logs:
            SecurityLogger.log_cross_company_access(5, 'c-2', ip_address='10.0.0.1')

        self.assertEqual(logs.records[0].company_id, 'c-2')
        capture_message.assert_called_once_with(
            'Critical security event: cross_company_access', level='error'
        )

    @patch('apps.core.logging.sentry_sdk.capture_message')
    def test_platform_action_is_not_critical(self, capture_message):
        with self.assertLogs('security', level='INFO') as logs:
            SecurityLogger.log_platform_action('company_created', None, 'Company', 'c-1')

        self.assertEqual(logs.records[0].levelname, 'INFO')
        self.assertIsNone(logs.records[0].actor_id)
        capture_message.assert_not_called()
