"""
Custom middleware for security logging.
"""
import logging
from django.utils.deprecation import MiddlewareMixin
from common.utils import get_client_ip

logger = logging.getLogger('security')


class SecurityLoggingMiddleware(MiddlewareMixin):
    """
    Middleware to log security-relevant responses on the payment endpoints.
    """

    # Paths that should be logged
    MONITORED_PATHS = [
        '/payments/',
        '/submit',
    ]

    def process_response(self, request, response):
        # Only log monitored paths
        if not any(request.path.startswith(path) for path in self.MONITORED_PATHS):
            return response

        ip_address = get_client_ip(request)

        # Rejected release tokens and admin keys
        if response.status_code == 403:
            logger.warning(
                f"Forbidden {request.method} {request.path} from IP {ip_address}"
            )

        # Throttled clients
        elif response.status_code == 429:
            logger.warning(
                f"Throttled {request.method} {request.path} from IP {ip_address}"
            )

        # Successful state transitions
        elif request.path.startswith('/payments/') and response.status_code == 200 and request.method == 'POST':
            logger.info(
                f"Payment transition {request.path} from IP {ip_address}"
            )

        return response
