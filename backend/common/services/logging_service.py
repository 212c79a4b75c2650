"""
Security logging service: writes suspicious activity to the database and to
the 'security' logger.
"""
from common.models import SuspiciousActivityLog
from common.utils import get_client_ip
import logging

logger = logging.getLogger('security')


class LoggingService:
    """
    Centralized logging service for security-related events.
    """

    @staticmethod
    def get_user_agent(request):
        """Extract user agent from request"""
        return request.META.get('HTTP_USER_AGENT', '')

    @staticmethod
    def log_suspicious_activity(activity_type, details, request=None, ip_address=None,
                                order_id='', severity=SuspiciousActivityLog.Severity.MEDIUM):
        """
        Log suspicious activities for security monitoring.

        Args:
            activity_type: SuspiciousActivityLog.ActivityType choice
            details: Details dict about the activity
            request: HTTP request object (optional)
            ip_address: IP address (optional, extracted from request if not provided)
            order_id: Order targeted by the request (optional)
            severity: Severity level (default: MEDIUM)
        """
        if request is not None:
            ip_address = ip_address or get_client_ip(request)
            user_agent = LoggingService.get_user_agent(request)
        else:
            user_agent = None

        log_level = {
            SuspiciousActivityLog.Severity.LOW: logger.info,
            SuspiciousActivityLog.Severity.MEDIUM: logger.warning,
            SuspiciousActivityLog.Severity.HIGH: logger.error,
            SuspiciousActivityLog.Severity.CRITICAL: logger.critical,
        }.get(severity, logger.warning)
        log_level(f"[SUSPICIOUS {severity}] {activity_type} - order {order_id or '-'} from {ip_address}")

        try:
            return SuspiciousActivityLog.objects.create(
                activity_type=activity_type,
                severity=severity,
                order_id=(order_id or '')[:10],
                details=details,
                ip_address=ip_address,
                user_agent=user_agent
            )
        except Exception as e:
            logger.error(f"Failed to create suspicious activity log: {str(e)}")
            return None

    @staticmethod
    def log_invalid_release_token(order_id, request=None, ip_address=None, token_present=True):
        """Log a release attempt with a wrong or absent token."""
        if token_present:
            activity_type = SuspiciousActivityLog.ActivityType.INVALID_TOKEN
            severity = SuspiciousActivityLog.Severity.HIGH
        else:
            activity_type = SuspiciousActivityLog.ActivityType.MISSING_TOKEN
            severity = SuspiciousActivityLog.Severity.MEDIUM
        return LoggingService.log_suspicious_activity(
            activity_type=activity_type,
            details={'order_id': order_id, 'token_present': token_present},
            request=request,
            ip_address=ip_address,
            order_id=order_id,
            severity=severity
        )

    @staticmethod
    def log_invalid_admin_key(request, order_id=''):
        """Log a confirm attempt with a wrong admin key."""
        return LoggingService.log_suspicious_activity(
            activity_type=SuspiciousActivityLog.ActivityType.INVALID_ADMIN_KEY,
            details={'path': request.path},
            request=request,
            order_id=order_id,
            severity=SuspiciousActivityLog.Severity.HIGH
        )

    @staticmethod
    def log_rate_limit_exceeded(endpoint, request):
        """Log when rate limit is exceeded"""
        return LoggingService.log_suspicious_activity(
            activity_type=SuspiciousActivityLog.ActivityType.RATE_LIMIT_EXCEEDED,
            details={'endpoint': endpoint},
            request=request,
            severity=SuspiciousActivityLog.Severity.MEDIUM
        )
