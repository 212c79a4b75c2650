"""
Security logging model for tracking token misuse and abuse of public endpoints.
"""
from django.db import models


class SuspiciousActivityLog(models.Model):
    """Log suspicious activities for security monitoring"""

    class ActivityType(models.TextChoices):
        INVALID_TOKEN = 'INVALID_TOKEN', 'Invalid Release Token'
        MISSING_TOKEN = 'MISSING_TOKEN', 'Missing Release Token'
        INVALID_ADMIN_KEY = 'INVALID_ADMIN_KEY', 'Invalid Admin Key'
        RATE_LIMIT_EXCEEDED = 'RATE_LIMIT_EXCEEDED', 'Rate Limit Exceeded'

    class Severity(models.TextChoices):
        LOW = 'LOW', 'Low'
        MEDIUM = 'MEDIUM', 'Medium'
        HIGH = 'HIGH', 'High'
        CRITICAL = 'CRITICAL', 'Critical'

    activity_type = models.CharField(
        max_length=30,
        choices=ActivityType.choices,
        db_index=True
    )
    severity = models.CharField(
        max_length=10,
        choices=Severity.choices,
        default=Severity.MEDIUM,
        db_index=True
    )
    order_id = models.CharField(
        max_length=10,
        blank=True,
        db_index=True,
        help_text="Order targeted by the request (if any)"
    )
    details = models.JSONField(
        default=dict,
        help_text="Details about the suspicious activity"
    )
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True
    )
    user_agent = models.TextField(
        null=True,
        blank=True
    )
    timestamp = models.DateTimeField(
        auto_now_add=True,
        db_index=True
    )
    resolved = models.BooleanField(
        default=False,
        help_text="Whether the issue has been investigated/resolved"
    )

    class Meta:
        db_table = 'suspicious_activity_log'
        verbose_name = 'Suspicious Activity Log'
        verbose_name_plural = 'Suspicious Activity Logs'
        indexes = [
            models.Index(fields=['activity_type', 'severity'], name='suspicious_type_severity_idx'),
            models.Index(fields=['ip_address', 'timestamp'], name='suspicious_ip_time_idx'),
        ]
        ordering = ['-timestamp']

    def __str__(self):
        target = self.order_id or "-"
        return f"[{self.severity}] {self.get_activity_type_display()} - {target} @ {self.timestamp}"
