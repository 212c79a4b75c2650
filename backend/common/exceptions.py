"""
Error taxonomy for the escrow service and the DRF exception handler that
renders it as {"ok": false, "error": ...} responses.
"""
import logging
from typing import Optional

from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class EscrowError(Exception):
    """Base class for every error the order lifecycle raises."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EscrowError):
    """A required field is missing or malformed."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid submission"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        if message is None and field:
            message = f"Missing required field: {field}"
        super().__init__(message)
        self.field = field


class NotFoundError(EscrowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"


class AuthorizationError(EscrowError):
    """Release token missing or not matching the order."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or missing release token"


class InvalidStateError(EscrowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current order status"


class DependencyError(EscrowError):
    """Store or notification transport failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "A backing service failed"


def first_error_message(detail) -> tuple:
    """
    Flatten DRF error detail into (field, message) for the first error.

    Returns:
        tuple: (field name or None, human-readable message)
    """
    if isinstance(detail, dict):
        for field, errors in detail.items():
            _, message = first_error_message(errors)
            if field == 'non_field_errors':
                return None, message
            return field, f"{field}: {message}"
        return None, "Invalid submission"
    if isinstance(detail, (list, tuple)):
        if not detail:
            return None, "Invalid submission"
        return first_error_message(detail[0])
    return None, str(detail)


def escrow_exception_handler(exc, context):
    """
    Render domain errors and DRF errors in the {ok, error} envelope.

    Unexpected exceptions are logged with their traceback and turned into a
    generic 500 so the client never sees internals.
    """
    if isinstance(exc, EscrowError):
        payload = {'ok': False, 'error': exc.message}
        if isinstance(exc, ValidationError) and exc.field:
            payload['field'] = exc.field
        if isinstance(exc, DependencyError):
            logger.error(f"Dependency failure: {exc.message}")
        return Response(payload, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}")
        return Response(
            {'ok': False, 'error': 'Server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, DRFValidationError):
        field, message = first_error_message(response.data)
        payload = {'ok': False, 'error': message, 'errors': response.data}
        if field:
            payload['field'] = field
        response.data = payload
        return response

    detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
    response.data = {'ok': False, 'error': str(detail)}
    return response
