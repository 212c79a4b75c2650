"""
Order service - main business logic for the escrow order lifecycle.
Orchestrates the payment plan calculator, the store, the state machine and
notifications.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from urllib.parse import urlencode

from django.conf import settings
from django.db import transaction
from django.urls import reverse
from django.utils.crypto import constant_time_compare

from apps.orders.models import Order
from apps.orders.services.invoice_pdf import InvoicePDFGenerator
from apps.orders.services.order_store import OrderStore, generate_release_token
from apps.orders.services.payment_plan import PaymentPlanCalculator, to_money
from apps.orders.services.state_machine import StateMachine
from common.exceptions import AuthorizationError, InvalidStateError, ValidationError
from common.services.email_service import NotificationDispatcher, get_notification_dispatcher
from common.services.logging_service import LoggingService

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    """An order after an operation, plus soft warnings (failed emails)."""
    order: Order
    warnings: List[str] = field(default_factory=list)
    changed: bool = True


@dataclass(frozen=True)
class InvoiceView:
    """Read-only projection rendered by the invoice page."""
    order: Order
    plan_label: str
    pdf_url: str
    can_release: bool
    release_url: Optional[str] = None


class OrderService:
    """
    Main service for order operations.
    Owns the AWAITING_PAYMENT -> PAYMENT_CONFIRMED -> FUNDS_RELEASED lifecycle.
    """

    REQUIRED_FIELDS = ('role', 'source', 'first_name', 'last_name', 'email', 'phone')
    OPTIONAL_TEXT_FIELDS = {
        'item_details': 4000,
        'delivery_notes': 2000,
        'notes': 2000,
        'payment_method': 100,
        'package_name': 200,
    }
    # Largest value the 12-digit, 2-decimal money columns hold
    MAX_AMOUNT = Decimal('9999999999.99')
    PLAN_ALIASES = {'milestone': Order.PLAN_DOWN}

    def __init__(
        self,
        store: Optional[OrderStore] = None,
        dispatcher: Optional[NotificationDispatcher] = None
    ):
        self.store = store or OrderStore()
        self.dispatcher = dispatcher if dispatcher is not None else get_notification_dispatcher()

    # ==================== Input normalization ====================

    @classmethod
    def to_decimal(cls, value, field_name: str) -> Optional[Decimal]:
        """
        Coerce a form value to a non-negative Decimal rounded to cents.
        Blank values become None.
        """
        if value is None:
            return None
        if isinstance(value, str):
            value = value.replace('$', '').replace(',', '').strip()
            if not value:
                return None
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} must be a number", field=field_name)
        if not number.is_finite():
            raise ValidationError(f"{field_name} must be a number", field=field_name)
        if number < 0:
            raise ValidationError(f"{field_name} cannot be negative", field=field_name)
        if number > cls.MAX_AMOUNT:
            raise ValidationError(f"{field_name} is too large", field=field_name)
        return to_money(number)

    @classmethod
    def clean_submission(cls, data: dict) -> dict:
        """
        Validate and normalize an intake submission.

        Args:
            data: Submission keyed by model field names

        Returns:
            dict of typed, trimmed values ready for the Order model

        Raises:
            ValidationError: Naming the first missing or malformed field
        """
        cleaned = {}
        for field_name in cls.REQUIRED_FIELDS:
            value = str(data.get(field_name) or '').strip()
            if not value:
                raise ValidationError(field=field_name)
            cleaned[field_name] = value

        cleaned['role'] = cleaned['role'].lower()
        if cleaned['role'] not in (Order.BUYER, Order.SELLER):
            raise ValidationError("role must be 'buyer' or 'seller'", field='role')

        for field_name, max_length in cls.OPTIONAL_TEXT_FIELDS.items():
            cleaned[field_name] = str(data.get(field_name) or '').strip()[:max_length]

        plan = str(data.get('payment_plan') or Order.PLAN_FULL).strip().lower()
        plan = cls.PLAN_ALIASES.get(plan, plan)
        if plan not in (Order.PLAN_FULL, Order.PLAN_DOWN):
            raise ValidationError("payment_plan must be 'full' or 'down'", field='payment_plan')
        cleaned['payment_plan'] = plan

        deposit_type = str(data.get('deposit_type') or Order.DEPOSIT_PERCENT).strip().lower()
        if deposit_type not in (Order.DEPOSIT_PERCENT, Order.DEPOSIT_AMOUNT):
            raise ValidationError("deposit_type must be 'percent' or 'amount'", field='deposit_type')
        cleaned['deposit_type'] = deposit_type

        cleaned['total_price'] = cls.to_decimal(data.get('total_price'), 'total_price')
        cleaned['deposit_value'] = cls.to_decimal(data.get('deposit_value'), 'deposit_value')
        cleaned['package_price'] = cls.to_decimal(data.get('package_price'), 'package_price')

        if (deposit_type == Order.DEPOSIT_PERCENT and cleaned['deposit_value'] is not None
                and cleaned['deposit_value'] > 100):
            raise ValidationError("A percent deposit cannot exceed 100", field='deposit_value')

        return cleaned

    # ==================== Links ====================

    @staticmethod
    def absolute_url(path: str) -> str:
        return f"{getattr(settings, 'ESCROW_SITE_URL', '')}{path}"

    @classmethod
    def invoice_url(cls, order: Order, include_token: bool = True) -> str:
        """Absolute invoice link; the token lets the holder release funds."""
        path = reverse('orders:invoice', args=[order.order_id])
        if include_token:
            path = f"{path}?{urlencode({'t': order.release_token})}"
        return cls.absolute_url(path)

    @staticmethod
    def release_path(order: Order, token: Optional[str]) -> str:
        path = reverse('orders:release', args=[order.order_id])
        if token:
            path = f"{path}?{urlencode({'t': token})}"
        return path

    # ==================== Notifications ====================

    def _notify(self, event: str, order: Order, attach_invoice: bool = False) -> List[str]:
        """
        Send an event's emails. Never raises: failures come back as warnings
        because the state change is already committed.
        """
        warnings = []
        attachments = []
        if attach_invoice and self.dispatcher.config.enabled:
            try:
                attachments.append((
                    InvoicePDFGenerator.filename(order),
                    InvoicePDFGenerator.generate(order),
                    'application/pdf'
                ))
            except Exception:
                logger.exception(f"Could not render invoice PDF for order {order.order_id}")
                warnings.append("Invoice PDF could not be generated; emails were sent without it")

        context = {
            'invoice_url': self.invoice_url(order),
            'pdf_url': self.absolute_url(reverse('orders:invoice-pdf', args=[order.order_id])),
            'confirm_url': self.absolute_url(reverse('orders:confirm', args=[order.order_id])),
        }
        report = self.dispatcher.dispatch(event, order, context=context, attachments=attachments)
        for warning in report.warnings:
            logger.warning(f"Order {order.order_id}: {warning}")
        warnings.extend(report.warnings)
        return warnings

    # ==================== Operations ====================

    def create_order(self, data: dict, ip_address: Optional[str] = None) -> OrderResult:
        """
        Create a new order from an intake submission.

        Security:
        - Validates every required field before writing anything
        - Generates the release token once; it is never regenerated

        Args:
            data: Submission keyed by model field names
            ip_address: Submitter IP (for audit)

        Returns:
            OrderResult with the order in AWAITING_PAYMENT
        """
        cleaned = self.clean_submission(data)

        plan = PaymentPlanCalculator.calculate(
            role=cleaned['role'],
            payment_plan=cleaned['payment_plan'],
            deposit_type=cleaned['deposit_type'],
            deposit_value=cleaned['deposit_value'],
            total_price=cleaned['total_price']
        )

        with transaction.atomic():
            order = Order(
                order_id=self.store.next_order_id(),
                release_token=generate_release_token(),
                plan_summary=plan.summary,
                calculated_deposit=plan.calculated_deposit,
                balance_due=plan.balance_due,
                status=Order.AWAITING_PAYMENT,
                escrow_balance=Decimal('0.00'),
                **cleaned
            )
            self.store.save(order)
            StateMachine.record_creation(order, ip_address=ip_address)

        logger.info(f"Order {order.order_id} created ({order.role}, {order.payment_plan} plan)")

        warnings = self._notify(NotificationDispatcher.NEW_ORDER, order, attach_invoice=True)
        return OrderResult(order=order, warnings=warnings)

    def confirm_payment(
        self,
        order_id: str,
        escrow_balance=None,
        ip_address: Optional[str] = None
    ) -> OrderResult:
        """
        Mark an order as paid (administrative, no token).

        Re-confirming an already confirmed order is a no-op: nothing is
        restamped and no email goes out. Released orders cannot be confirmed.

        Args:
            order_id: Order to confirm
            escrow_balance: Amount now held in escrow (optional)
            ip_address: Admin IP (for audit)

        Returns:
            OrderResult; changed is False for a repeated confirmation
        """
        balance = self.to_decimal(escrow_balance, 'escrow_balance')

        with transaction.atomic():
            order = self.store.get_for_update(order_id)

            if order.is_payment_confirmed():
                logger.info(f"Order {order.order_id} already confirmed, ignoring repeat confirmation")
                return OrderResult(order=order, changed=False)

            changes = {'escrow_balance': balance} if balance is not None else {}
            order = StateMachine.transition(
                order=order,
                to_status=Order.PAYMENT_CONFIRMED,
                store=self.store,
                reason="Payment confirmed by admin",
                ip_address=ip_address,
                **changes
            )

        logger.info(f"Order {order.order_id} payment confirmed")

        warnings = self._notify(NotificationDispatcher.PAYMENT_CONFIRMED, order)
        return OrderResult(order=order, warnings=warnings)

    def release_funds(
        self,
        order_id: str,
        token: Optional[str],
        ip_address: Optional[str] = None
    ) -> OrderResult:
        """
        Buyer releases escrowed funds to the seller.

        Security:
        - Token is checked before the order state, in constant time
        - Every failed token check is written to the security log

        Args:
            order_id: Order to release
            token: Release token presented by the caller
            ip_address: Caller IP (for audit)

        Returns:
            OrderResult with the order in FUNDS_RELEASED
        """
        order = self.store.get(order_id)

        token = (token or '').strip()
        if not token or not constant_time_compare(token, order.release_token):
            LoggingService.log_invalid_release_token(
                order.order_id,
                ip_address=ip_address,
                token_present=bool(token)
            )
            raise AuthorizationError()

        if order.is_awaiting_payment():
            raise InvalidStateError(f"Payment for order {order.order_id} has not been confirmed yet")
        if order.is_released():
            raise InvalidStateError(f"Funds for order {order.order_id} were already released")

        order = StateMachine.transition(
            order=order,
            to_status=Order.FUNDS_RELEASED,
            store=self.store,
            reason="Buyer released funds with release token",
            ip_address=ip_address
        )

        logger.info(f"Order {order.order_id} funds released")

        warnings = self._notify(NotificationDispatcher.FUNDS_RELEASED, order)
        return OrderResult(order=order, warnings=warnings)

    def render_invoice(self, order_id: str, token: Optional[str] = None) -> InvoiceView:
        """
        Build the invoice page projection.

        Viewing needs no token; a presented token is only used to build the
        release form's action URL, shown while payment is confirmed.
        """
        order = self.store.get(order_id)
        token = (token or '').strip() or None

        can_release = order.is_payment_confirmed()
        return InvoiceView(
            order=order,
            plan_label=InvoicePDFGenerator.plan_label(order),
            pdf_url=reverse('orders:invoice-pdf', args=[order.order_id]),
            can_release=can_release,
            release_url=self.release_path(order, token) if can_release else None
        )
