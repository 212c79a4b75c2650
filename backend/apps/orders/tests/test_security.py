"""
Tests for shared security helpers: validators, error envelope, audit log.
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import RequestFactory, SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from common.exceptions import (
    AuthorizationError,
    DependencyError,
    ValidationError,
    escrow_exception_handler,
    first_error_message,
)
from common.models import SuspiciousActivityLog
from common.services.logging_service import LoggingService
from common.utils import get_client_ip
from common.validators import validate_phone_number


class PhoneValidatorTests(SimpleTestCase):

    def test_valid_numbers_are_cleaned(self):
        self.assertEqual(validate_phone_number(' +1 (555) 010-2000 '), '+15550102000')
        self.assertEqual(validate_phone_number('555.010.2000'), '5550102000')

    def test_invalid_numbers(self):
        for value in ('12345', 'call me', '+1555010200012345', '٥٥٥٠١٠٢٠٠٠'):
            with self.subTest(value=value):
                with self.assertRaises(DjangoValidationError):
                    validate_phone_number(value)


class ExceptionHandlerTests(SimpleTestCase):

    def test_domain_errors(self):
        response = escrow_exception_handler(AuthorizationError(), {})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'ok': False, 'error': 'Invalid or missing release token'})

        response = escrow_exception_handler(ValidationError(field='email'), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data,
            {'ok': False, 'error': 'Missing required field: email', 'field': 'email'}
        )

        response = escrow_exception_handler(DependencyError("Could not save order"), {})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def test_unexpected_error_is_hidden(self):
        response = escrow_exception_handler(RuntimeError('/srv/app/secret.py exploded'), {})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'ok': False, 'error': 'Server error'})

    def test_drf_validation_error(self):
        response = escrow_exception_handler(
            DRFValidationError({'phone': ['Phone number must contain 7 to 15 digits']}), {}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'phone')
        self.assertEqual(response.data['error'], 'phone: Phone number must contain 7 to 15 digits')

    def test_first_error_message(self):
        self.assertEqual(first_error_message({'non_field_errors': ['Bad']}), (None, 'Bad'))
        self.assertEqual(first_error_message([]), (None, 'Invalid submission'))


class SecurityLogTests(TestCase):

    def test_client_ip_prefers_forwarded_header(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='203.0.113.5, 10.0.0.1')

        self.assertEqual(get_client_ip(request), '203.0.113.5')

    def test_client_ip_ignores_malformed_forwarded_header(self):
        request = RequestFactory().get(
            '/', HTTP_X_FORWARDED_FOR='not-an-ip, 10.0.0.1', REMOTE_ADDR='198.51.100.9'
        )

        self.assertEqual(get_client_ip(request), '198.51.100.9')

    def test_client_ip_none_without_valid_address(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='<script>', REMOTE_ADDR='')

        self.assertIsNone(get_client_ip(request))

    def test_log_invalid_admin_key(self):
        request = RequestFactory().post(
            '/payments/ABC-123456/confirm', HTTP_USER_AGENT='curl/8.0', REMOTE_ADDR='198.51.100.2'
        )

        log = LoggingService.log_invalid_admin_key(request, order_id='ABC-123456')

        self.assertEqual(log.activity_type, SuspiciousActivityLog.ActivityType.INVALID_ADMIN_KEY)
        self.assertEqual(log.severity, SuspiciousActivityLog.Severity.HIGH)
        self.assertEqual(log.ip_address, '198.51.100.2')
        self.assertEqual(log.user_agent, 'curl/8.0')
        self.assertFalse(log.resolved)
