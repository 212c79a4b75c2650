"""
Throttle classes for the public escrow endpoints.
SECURITY: Prevents form flooding and release-token guessing.
Rates live in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'].
"""
from rest_framework.throttling import AnonRateThrottle
from common.services.logging_service import LoggingService


class LoggedAnonRateThrottle(AnonRateThrottle):
    """Anonymous per-IP throttle that records every rejection."""

    def throttle_failure(self):
        LoggingService.log_rate_limit_exceeded(self.scope, self.request)
        return super().throttle_failure()

    def allow_request(self, request, view):
        self.request = request
        return super().allow_request(request, view)


class SubmitThrottle(LoggedAnonRateThrottle):
    """
    Throttle for the order intake form.
    """
    scope = 'submit'


class ReleaseThrottle(LoggedAnonRateThrottle):
    """
    Throttle for fund release.
    SECURITY: Caps how many tokens one client can try per hour.
    """
    scope = 'release'


class AdminThrottle(LoggedAnonRateThrottle):
    """
    Throttle for administrative payment confirmation.
    """
    scope = 'admin'
