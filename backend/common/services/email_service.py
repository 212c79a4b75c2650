"""
Email notification service for order lifecycle events.
Renders one HTML template per event and audience and sends it to the admin
inbox and to the order's contact address.
"""
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)

Attachment = Tuple[str, bytes, str]


@dataclass(frozen=True)
class NotificationConfig:
    """Read-only mail settings, built once per process."""
    enabled: bool
    from_email: str
    admin_email: str
    brand_name: str
    site_url: str
    timeout: int = 20

    @classmethod
    def from_settings(cls) -> 'NotificationConfig':
        return cls(
            enabled=getattr(settings, 'ESCROW_NOTIFICATIONS_ENABLED', False),
            from_email=settings.DEFAULT_FROM_EMAIL,
            admin_email=getattr(settings, 'ESCROW_ADMIN_EMAIL', ''),
            brand_name=getattr(settings, 'ESCROW_BRAND_NAME', 'SecureEscrow'),
            site_url=getattr(settings, 'ESCROW_SITE_URL', ''),
            timeout=getattr(settings, 'EMAIL_TIMEOUT', None) or 20,
        )


@dataclass(frozen=True)
class NotificationFailure:
    event: str
    audience: str
    recipient: str
    error: str

    def as_warning(self) -> str:
        return f"{self.audience} notification '{self.event}' to {self.recipient} failed: {self.error}"


@dataclass
class NotificationReport:
    """Outcome of one dispatch; failures never raise."""
    event: str
    sent: List[str] = field(default_factory=list)
    failures: List[NotificationFailure] = field(default_factory=list)
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def warnings(self) -> List[str]:
        return [failure.as_warning() for failure in self.failures]


class NotificationDispatcher:
    """Service for sending order notification emails"""

    # Events
    NEW_ORDER = 'new-order'
    PAYMENT_CONFIRMED = 'payment-confirmed'
    FUNDS_RELEASED = 'funds-released'

    # Audiences
    ADMIN = 'admin'
    CUSTOMER = 'customer'

    MESSAGES = {
        NEW_ORDER: {
            ADMIN: ('New Escrow Request {order_id} - {name}', 'emails/new_order_admin.html'),
            CUSTOMER: ('Invoice {order_id} - {brand}', 'emails/invoice.html'),
        },
        PAYMENT_CONFIRMED: {
            ADMIN: ('Payment confirmed for {order_id}', 'emails/payment_confirmed.html'),
            CUSTOMER: ('Your payment for {order_id} is confirmed - {brand}', 'emails/payment_confirmed.html'),
        },
        FUNDS_RELEASED: {
            ADMIN: ('Funds released for {order_id}', 'emails/funds_released.html'),
            CUSTOMER: ('Funds released for {order_id} - {brand}', 'emails/funds_released.html'),
        },
    }

    def __init__(self, config: NotificationConfig, connection_factory: Optional[Callable] = None):
        self.config = config
        self.connection_factory = connection_factory or get_connection

    def recipients(self, order) -> Dict[str, str]:
        """Audience -> address for an order; empty addresses are left out."""
        recipients = {}
        if self.config.admin_email:
            recipients[self.ADMIN] = self.config.admin_email
        if getattr(order, 'email', ''):
            recipients[self.CUSTOMER] = order.email
        return recipients

    def dispatch(
        self,
        event: str,
        order,
        context: Optional[dict] = None,
        attachments: Sequence[Attachment] = ()
    ) -> NotificationReport:
        """
        Send the notification for an event to every audience.

        Args:
            event: One of NEW_ORDER, PAYMENT_CONFIRMED, FUNDS_RELEASED
            order: Order the event concerns
            context: Extra template context (e.g. invoice_url)
            attachments: (filename, content, mimetype) tuples

        Returns:
            NotificationReport listing sent addresses and failures
        """
        if event not in self.MESSAGES:
            raise ValueError(f"Unknown notification event: {event}")

        report = NotificationReport(event=event)
        if not self.config.enabled:
            logger.info(f"Notifications disabled, skipping '{event}' for order {order.order_id}")
            report.skipped = True
            return report

        connection = self.connection_factory(fail_silently=False, timeout=self.config.timeout)

        for audience, recipient in self.recipients(order).items():
            try:
                self.send(event, audience, recipient, order, context or {}, attachments, connection)
                report.sent.append(recipient)
            except Exception as e:
                logger.exception(
                    f"Failed to send '{event}' {audience} email for order {order.order_id} to {recipient}"
                )
                report.failures.append(
                    NotificationFailure(event=event, audience=audience, recipient=recipient, error=str(e))
                )

        if report.sent:
            logger.info(f"Sent '{event}' for order {order.order_id} to {', '.join(report.sent)}")
        return report

    def send(self, event, audience, recipient, order, context, attachments, connection=None):
        """Render and send one message. Raises on transport failure."""
        subject_template, template_name = self.MESSAGES[event][audience]

        subject = subject_template.format(
            order_id=order.order_id,
            name=getattr(order, 'full_name', ''),
            brand=self.config.brand_name
        )
        # SECURITY: collapse whitespace so submitted names cannot inject headers
        subject = ' '.join(subject.split())

        template_context = {
            'order': order,
            'audience': audience,
            'event': event,
            'brand_name': self.config.brand_name,
            'site_url': self.config.site_url,
            'is_admin': audience == self.ADMIN,
            'has_attachments': bool(attachments),
            **context,
        }

        html_content = render_to_string(template_name, template_context)
        text_content = strip_tags(html_content)

        email = EmailMultiAlternatives(
            subject=subject,
            body=text_content,
            from_email=self.config.from_email,
            to=[recipient],
            connection=connection
        )
        email.attach_alternative(html_content, "text/html")
        for filename, content, mimetype in attachments:
            email.attach(filename, content, mimetype)
        email.send(fail_silently=False)


@lru_cache(maxsize=1)
def get_notification_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher built from settings on first use."""
    return NotificationDispatcher(NotificationConfig.from_settings())
