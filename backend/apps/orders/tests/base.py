"""
Base test classes and fixtures for order tests.
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework.test import APIClient
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.orders.services.order_store import OrderStore, generate_release_token
from common.services.email_service import NotificationConfig, NotificationDispatcher


def make_config(**overrides):
    values = {
        'enabled': True,
        'from_email': '"SecureEscrow" <noreply@secureescrow.test>',
        'admin_email': 'admin@secureescrow.test',
        'brand_name': 'SecureEscrow',
        'site_url': 'http://testserver',
    }
    values.update(overrides)
    return NotificationConfig(**values)


class BaseOrderTestCase(TestCase):
    """Base test case with a service wired to the local mail outbox."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = APIClient()
        self.store = OrderStore()
        self.dispatcher = NotificationDispatcher(make_config())
        self.service = OrderService(store=self.store, dispatcher=self.dispatcher)

    def submission(self, **overrides):
        """A valid buyer submission keyed by model field names."""
        data = {
            'role': 'buyer',
            'source': 'Instagram',
            'first_name': 'Ada',
            'last_name': 'Lovelace',
            'email': 'ada@example.com',
            'phone': '+15551234567',
            'item_details': 'Vintage camera, boxed',
            'delivery_notes': 'Ship to the office',
            'payment_plan': 'down',
            'deposit_type': 'percent',
            'deposit_value': '20',
            'total_price': '1000',
            'notes': 'Please include the lens cap',
        }
        data.update(overrides)
        return data

    def form_data(self, **overrides):
        """The same submission as the intake form posts it."""
        data = {
            'role': 'buyer',
            'source': 'Instagram',
            'firstName': 'Ada',
            'lastName': 'Lovelace',
            'email': 'ada@example.com',
            'phone': '+1 (555) 123-4567',
            'itemDetails': 'Vintage camera, boxed',
            'deliveryNotes': 'Ship to the office',
            'paymentPlan': 'down',
            'depositType': 'percent',
            'depositValue': '20',
            'totalPrice': '1000',
            'notes': 'Please include the lens cap',
        }
        data.update(overrides)
        return data

    def create_order(self, **overrides):
        """Create an order through the service."""
        return self.service.create_order(self.submission(**overrides)).order

    def make_order(self, **overrides):
        """Insert an order directly, bypassing the service."""
        values = {
            'order_id': self.store.next_order_id(),
            'release_token': generate_release_token(),
            'role': Order.BUYER,
            'source': 'Facebook',
            'first_name': 'Grace',
            'last_name': 'Hopper',
            'email': 'grace@example.com',
            'phone': '+15557654321',
            'total_price': Decimal('250.00'),
            'plan_summary': 'Full payment selected.',
            'balance_due': Decimal('250.00'),
        }
        values.update(overrides)
        return self.store.save(Order(**values))

    def confirmed_order(self, **overrides):
        order = self.create_order(**overrides)
        return self.service.confirm_payment(order.order_id).order
