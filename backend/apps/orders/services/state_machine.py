"""
Order state machine service.
Handles ALL status transitions with validation and an audit trail.
Row locks prevent lost updates between concurrent requests.
"""
from typing import Optional
from django.db import transaction
from django.utils import timezone
from apps.orders.models import Order, OrderStateLog
from apps.orders.services.order_store import OrderStore
from common.exceptions import InvalidStateError


class StateMachine:
    """
    Order state machine with strict forward-only transition rules.
    """

    # Valid state transitions
    TRANSITIONS = {
        Order.AWAITING_PAYMENT: [Order.PAYMENT_CONFIRMED],
        Order.PAYMENT_CONFIRMED: [Order.FUNDS_RELEASED],
        Order.FUNDS_RELEASED: [],  # Terminal state
    }

    # Who may drive each transition
    ACTORS = {
        Order.PAYMENT_CONFIRMED: OrderStateLog.ACTOR_ADMIN,
        Order.FUNDS_RELEASED: OrderStateLog.ACTOR_BUYER,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if transition is valid."""
        return to_status in cls.TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(cls, order: Order, to_status: str) -> None:
        """
        Raises:
            InvalidStateError: If the order cannot move to to_status
        """
        if not cls.can_transition(order.status, to_status):
            raise InvalidStateError(
                f"Cannot move order {order.order_id} from "
                f"{order.get_status_display()} to {dict(Order.STATUS_CHOICES)[to_status]}"
            )

    @classmethod
    def record_creation(
        cls,
        order: Order,
        ip_address: Optional[str] = None
    ) -> OrderStateLog:
        """Log the initial status of a freshly created order."""
        return OrderStateLog.objects.create(
            order=order,
            from_status='',
            to_status=order.status,
            actor=OrderStateLog.ACTOR_SYSTEM,
            reason="Order submitted through intake form",
            ip_address=ip_address
        )

    @classmethod
    @transaction.atomic
    def transition(
        cls,
        order: Order,
        to_status: str,
        store: Optional[OrderStore] = None,
        reason: str = "",
        ip_address: Optional[str] = None,
        **changes
    ) -> Order:
        """
        Transition order to a new status with validation.

        Security:
        - Re-reads the order under select_for_update
        - Validates the transition against the locked row
        - Logs all transitions with audit trail

        Args:
            order: Order instance (may be stale)
            to_status: Target status
            store: OrderStore used for the locked read and the write
            reason: Reason for transition
            ip_address: IP address of requester
            **changes: Extra field values to apply with the transition

        Returns:
            Updated order

        Raises:
            InvalidStateError: If transition is invalid
        """
        store = store or OrderStore()

        # Lock the row to prevent race conditions
        locked_order = store.get_for_update(order.order_id)

        cls.validate_transition(locked_order, to_status)

        old_status = locked_order.status
        locked_order.status = to_status

        # Set timestamps for specific states
        now = timezone.now()
        if to_status == Order.PAYMENT_CONFIRMED:
            locked_order.paid_at = now
        elif to_status == Order.FUNDS_RELEASED:
            locked_order.released_at = now

        for field, value in changes.items():
            setattr(locked_order, field, value)

        store.save(locked_order)

        # Log state change
        OrderStateLog.objects.create(
            order=locked_order,
            from_status=old_status,
            to_status=to_status,
            actor=cls.ACTORS.get(to_status, OrderStateLog.ACTOR_SYSTEM),
            reason=reason,
            ip_address=ip_address
        )

        return locked_order
