"""
Tests for the order store.
"""
import re
from decimal import Decimal
from unittest.mock import patch
from django.db import DatabaseError
from apps.orders.models import Order
from apps.orders.services.order_store import (
    OrderStore,
    generate_order_id,
    generate_release_token,
)
from apps.orders.tests.base import BaseOrderTestCase
from common.exceptions import DependencyError, NotFoundError, ValidationError
from common.validators import ORDER_ID_PATTERN


class IdentifierTests(BaseOrderTestCase):

    def test_generated_order_id_format(self):
        for _ in range(50):
            self.assertRegex(generate_order_id(), ORDER_ID_PATTERN)

    def test_order_id_avoids_ambiguous_letters(self):
        for _ in range(50):
            letters = generate_order_id()[:3]
            self.assertIsNone(re.search('[IO]', letters))

    def test_release_tokens_are_unique_and_long(self):
        tokens = {generate_release_token() for _ in range(20)}
        self.assertEqual(len(tokens), 20)
        for token in tokens:
            self.assertGreaterEqual(len(token), 43)

    def test_next_order_id_gives_up_after_collisions(self):
        with patch.object(OrderStore, 'exists', return_value=True):
            with self.assertRaises(DependencyError):
                self.store.next_order_id()


class OrderStoreTests(BaseOrderTestCase):

    def test_saved_order_loads_back_unchanged(self):
        order = self.make_order(
            payment_plan=Order.PLAN_DOWN,
            deposit_type=Order.DEPOSIT_AMOUNT,
            deposit_value=Decimal('50.00'),
            calculated_deposit=Decimal('50.00'),
            balance_due=Decimal('200.00'),
            notes='Fragile'
        )

        loaded = self.store.get(order.order_id)

        for field in Order._meta.concrete_fields:
            with self.subTest(field=field.name):
                self.assertEqual(getattr(loaded, field.attname), getattr(order, field.attname))

    def test_get_normalizes_order_id(self):
        order = self.make_order()

        loaded = self.store.get(f"  {order.order_id.lower()} ")

        self.assertEqual(loaded.pk, order.pk)

    def test_get_unknown_order(self):
        with self.assertRaises(NotFoundError):
            self.store.get('ZZZ-000000')

    def test_load_returns_newest_first(self):
        first = self.make_order()
        second = self.make_order()

        ids = [order.order_id for order in self.store.load()]

        self.assertEqual(ids, [second.order_id, first.order_id])

    def test_save_all(self):
        orders = [self.make_order(), self.make_order()]
        for order in orders:
            order.notes = 'bulk update'

        self.assertEqual(self.store.save_all(orders), 2)
        self.assertEqual(Order.objects.filter(notes='bulk update').count(), 2)

    def test_save_rejects_invalid_email(self):
        with self.assertRaises(ValidationError) as ctx:
            self.make_order(email='not-an-email')

        self.assertEqual(ctx.exception.field, 'email')
        self.assertEqual(Order.objects.count(), 0)

    def test_database_failure_is_a_dependency_error(self):
        with patch.object(Order.objects, 'get', side_effect=DatabaseError('disk I/O error')):
            with self.assertRaises(DependencyError):
                self.store.get('ABC-123456')
