"""
Order store - persistence boundary for Order records.

Every write touches a single row. Mutating callers lock that row with
get_for_update() inside transaction.atomic(), so concurrent requests for
different orders never overwrite each other.
"""
import logging
import secrets
from typing import Iterable, List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction

from apps.orders.models import Order
from common.exceptions import DependencyError, NotFoundError, ValidationError
from common.validators import ORDER_ID_LETTERS

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    """Random code like 'KQT-204918'."""
    letters = ''.join(secrets.choice(ORDER_ID_LETTERS) for _ in range(3))
    digits = ''.join(secrets.choice('0123456789') for _ in range(6))
    return f"{letters}-{digits}"


def generate_release_token() -> str:
    """Unguessable URL-safe secret (256 bits)."""
    return secrets.token_urlsafe(32)


class OrderStore:
    """
    Load/save access to orders, addressed by order_id.
    Database failures surface as DependencyError.
    """

    MAX_ID_ATTEMPTS = 20

    def load(self) -> List[Order]:
        """Return every order, newest first."""
        try:
            return list(Order.objects.all().order_by('-created_at', '-id'))
        except DatabaseError as e:
            raise DependencyError(f"Could not load orders: {e}") from e

    def get(self, order_id: str) -> Order:
        """
        Fetch one order.

        Raises:
            NotFoundError: If no order has this id
            DependencyError: If the database is unavailable
        """
        try:
            return Order.objects.get(order_id=self.normalize_id(order_id))
        except Order.DoesNotExist:
            raise NotFoundError(f"Order {order_id} not found")
        except DatabaseError as e:
            raise DependencyError(f"Could not read order {order_id}: {e}") from e

    def get_for_update(self, order_id: str) -> Order:
        """
        Fetch and lock one order row. Must run inside transaction.atomic().
        """
        try:
            return Order.objects.select_for_update().get(order_id=self.normalize_id(order_id))
        except Order.DoesNotExist:
            raise NotFoundError(f"Order {order_id} not found")
        except DatabaseError as e:
            raise DependencyError(f"Could not lock order {order_id}: {e}") from e

    def exists(self, order_id: str) -> bool:
        try:
            return Order.objects.filter(order_id=self.normalize_id(order_id)).exists()
        except DatabaseError as e:
            raise DependencyError(f"Could not read order {order_id}: {e}") from e

    def save(self, order: Order) -> Order:
        """Persist one order (insert or update)."""
        try:
            order.full_clean(exclude=['order_id', 'release_token'])
            order.save()
        except DjangoValidationError as e:
            field = next(iter(e.message_dict), None) if hasattr(e, 'error_dict') else None
            raise ValidationError('; '.join(e.messages), field=field) from e
        except DatabaseError as e:
            logger.error(f"Failed to save order {order.order_id}: {e}")
            raise DependencyError(f"Could not save order {order.order_id}") from e
        return order

    def save_all(self, orders: Iterable[Order]) -> int:
        """
        Persist a collection of orders in one transaction.

        Returns:
            int: Number of orders written
        """
        count = 0
        try:
            with transaction.atomic():
                for order in orders:
                    self.save(order)
                    count += 1
        except DatabaseError as e:
            raise DependencyError(f"Could not save orders: {e}") from e
        return count

    def next_order_id(self) -> str:
        """
        Generate an order id not yet used by any stored order.

        Raises:
            DependencyError: If no free id was found
        """
        for _ in range(self.MAX_ID_ATTEMPTS):
            candidate = generate_order_id()
            if not self.exists(candidate):
                return candidate
        raise DependencyError("Could not allocate a unique order id")

    @staticmethod
    def normalize_id(order_id: str) -> str:
        return (order_id or '').strip().upper()
