"""
Orders models - escrow order record and its state transition audit trail.
"""
import uuid
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator
from common.validators import order_id_regex


class Order(models.Model):
    """
    One escrow engagement submitted through the intake form.

    Moves forward only: AWAITING_PAYMENT -> PAYMENT_CONFIRMED -> FUNDS_RELEASED.
    The release_token is the capability that lets the buyer release funds.
    """
    # Order states
    AWAITING_PAYMENT = 'AWAITING_PAYMENT'
    PAYMENT_CONFIRMED = 'PAYMENT_CONFIRMED'
    FUNDS_RELEASED = 'FUNDS_RELEASED'

    STATUS_CHOICES = [
        (AWAITING_PAYMENT, 'Awaiting Payment'),
        (PAYMENT_CONFIRMED, 'Payment Confirmed'),
        (FUNDS_RELEASED, 'Funds Released'),
    ]

    # Submitter roles
    BUYER = 'buyer'
    SELLER = 'seller'

    ROLE_CHOICES = [
        (BUYER, 'Buyer'),
        (SELLER, 'Seller'),
    ]

    # Payment plans
    PLAN_FULL = 'full'
    PLAN_DOWN = 'down'

    PLAN_CHOICES = [
        (PLAN_FULL, 'Full payment'),
        (PLAN_DOWN, 'Down payment'),
    ]

    # Deposit types
    DEPOSIT_PERCENT = 'percent'
    DEPOSIT_AMOUNT = 'amount'

    DEPOSIT_TYPE_CHOICES = [
        (DEPOSIT_PERCENT, 'Percent of total'),
        (DEPOSIT_AMOUNT, 'Fixed amount'),
    ]

    # Identity
    order_id = models.CharField(
        max_length=10,
        unique=True,
        editable=False,
        validators=[order_id_regex],
        help_text="Shareable order code, e.g. KQT-204918"
    )
    release_token = models.CharField(
        max_length=64,
        editable=False,
        help_text="Secret that authorizes the buyer to release funds"
    )

    # Party info
    role = models.CharField(max_length=10, choices=ROLE_CHOICES)
    source = models.CharField(max_length=100, help_text="Platform the deal came from")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254)
    phone = models.CharField(max_length=20)

    # Deal info
    item_details = models.TextField(blank=True, max_length=4000)
    delivery_notes = models.TextField(blank=True, max_length=2000)
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    payment_plan = models.CharField(max_length=10, choices=PLAN_CHOICES, default=PLAN_FULL)
    deposit_type = models.CharField(max_length=10, choices=DEPOSIT_TYPE_CHOICES, default=DEPOSIT_PERCENT)
    deposit_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    notes = models.TextField(blank=True, max_length=2000)
    payment_method = models.CharField(max_length=100, blank=True, help_text="How the buyer intends to pay, e.g. Zelle")
    package_name = models.CharField(max_length=200, blank=True)
    package_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Derived payment plan figures
    plan_summary = models.CharField(max_length=255, blank=True)
    calculated_deposit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Deposit due now (null for full payment or missing inputs)"
    )
    balance_due = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )

    # State
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=AWAITING_PAYMENT,
        db_index=True
    )
    escrow_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Funds recorded as held in escrow"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        indexes = [
            models.Index(fields=['status', '-created_at'], name='orders_status_created_idx'),
            models.Index(fields=['email', '-created_at'], name='orders_email_created_idx'),
        ]

    def __str__(self):
        return f"Order {self.order_id} - {self.status}"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def invoice_reference(self):
        """Order ID plus token, everything needed to reach the release action."""
        return {'order_id': self.order_id, 'token': self.release_token}

    def is_awaiting_payment(self):
        return self.status == self.AWAITING_PAYMENT

    def is_payment_confirmed(self):
        return self.status == self.PAYMENT_CONFIRMED

    def is_released(self):
        return self.status == self.FUNDS_RELEASED


class OrderStateLog(models.Model):
    """
    Audit trail for order state transitions.
    Logs every state change with actor, reason and IP.
    """
    ACTOR_SYSTEM = 'system'
    ACTOR_ADMIN = 'admin'
    ACTOR_BUYER = 'buyer'

    ACTOR_CHOICES = [
        (ACTOR_SYSTEM, 'System'),
        (ACTOR_ADMIN, 'Admin'),
        (ACTOR_BUYER, 'Buyer (release token)'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name='state_logs'
    )
    from_status = models.CharField(max_length=20, blank=True)
    to_status = models.CharField(max_length=20)
    actor = models.CharField(max_length=10, choices=ACTOR_CHOICES, default=ACTOR_SYSTEM)
    reason = models.TextField(blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Order State Log'
        verbose_name_plural = 'Order State Logs'
        indexes = [
            models.Index(fields=['order', '-created_at'], name='orders_log_order_created_idx'),
        ]

    def __str__(self):
        return f"{self.order.order_id}: {self.from_status or '-'} -> {self.to_status}"
