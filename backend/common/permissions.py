"""
Permission classes for the escrow API.
"""
from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework.permissions import BasePermission
from common.services.logging_service import LoggingService


class HasAdminKey(BasePermission):
    """
    Permission check for administrative endpoints.

    Open when ESCROW_ADMIN_API_KEY is empty (trusted deployments behind a
    private network); otherwise the X-Admin-Key header must match.
    """
    message = "A valid admin key is required for this operation."

    def has_permission(self, request, view):
        expected = getattr(settings, 'ESCROW_ADMIN_API_KEY', '')
        if not expected:
            return True

        presented = request.headers.get('X-Admin-Key', '')
        if presented and constant_time_compare(presented, expected):
            return True

        order_id = view.kwargs.get('order_id', '') if hasattr(view, 'kwargs') else ''
        LoggingService.log_invalid_admin_key(request, order_id=order_id)
        return False
