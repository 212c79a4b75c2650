"""
Tests for the order lifecycle service.
"""
from decimal import Decimal
from urllib.parse import parse_qs, urlparse
from apps.orders.models import Order, OrderStateLog
from apps.orders.services.order_service import OrderService
from apps.orders.tests.base import BaseOrderTestCase
from common.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from common.models import SuspiciousActivityLog


class CleanSubmissionTests(BaseOrderTestCase):

    def test_to_decimal_accepts_formatted_money(self):
        self.assertEqual(OrderService.to_decimal('$1,200.50', 'total_price'), Decimal('1200.50'))
        self.assertEqual(OrderService.to_decimal(' 7 ', 'total_price'), Decimal('7.00'))
        self.assertIsNone(OrderService.to_decimal('', 'total_price'))
        self.assertIsNone(OrderService.to_decimal(None, 'total_price'))

    def test_to_decimal_rejects_garbage(self):
        for value in ('abc', 'NaN', 'Infinity', '-5', '1e30'):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as ctx:
                    OrderService.to_decimal(value, 'total_price')
                self.assertEqual(ctx.exception.field, 'total_price')

    def test_text_fields_are_trimmed(self):
        cleaned = OrderService.clean_submission(self.submission(first_name='  Ada  ', notes='  hi  '))

        self.assertEqual(cleaned['first_name'], 'Ada')
        self.assertEqual(cleaned['notes'], 'hi')

    def test_package_and_payment_method(self):
        cleaned = OrderService.clean_submission(self.submission(
            payment_method='  Zelle ', package_name='Premium', package_price='$49.99'
        ))

        self.assertEqual(cleaned['payment_method'], 'Zelle')
        self.assertEqual(cleaned['package_name'], 'Premium')
        self.assertEqual(cleaned['package_price'], Decimal('49.99'))

        cleaned = OrderService.clean_submission(self.submission())
        self.assertEqual(cleaned['payment_method'], '')
        self.assertIsNone(cleaned['package_price'])

    def test_milestone_plan_is_a_down_payment(self):
        cleaned = OrderService.clean_submission(self.submission(payment_plan='Milestone'))

        self.assertEqual(cleaned['payment_plan'], Order.PLAN_DOWN)

    def test_plan_defaults(self):
        cleaned = OrderService.clean_submission(
            self.submission(payment_plan='', deposit_type=None, deposit_value='')
        )

        self.assertEqual(cleaned['payment_plan'], Order.PLAN_FULL)
        self.assertEqual(cleaned['deposit_type'], Order.DEPOSIT_PERCENT)
        self.assertIsNone(cleaned['deposit_value'])

    def test_unknown_role_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            OrderService.clean_submission(self.submission(role='broker'))

        self.assertEqual(ctx.exception.field, 'role')

    def test_percent_over_100_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            OrderService.clean_submission(self.submission(deposit_value='150'))

        self.assertEqual(ctx.exception.field, 'deposit_value')


class CreateOrderTests(BaseOrderTestCase):

    def test_create_order(self):
        result = self.service.create_order(self.submission(), ip_address='198.51.100.7')
        order = result.order

        self.assertEqual(result.warnings, [])
        self.assertEqual(order.status, Order.AWAITING_PAYMENT)
        self.assertEqual(order.escrow_balance, Decimal('0.00'))
        self.assertEqual(order.calculated_deposit, Decimal('200.00'))
        self.assertEqual(order.balance_due, Decimal('800.00'))
        self.assertGreaterEqual(len(order.release_token), 43)
        self.assertIsNone(order.paid_at)

        log = OrderStateLog.objects.get(order=order)
        self.assertEqual(log.to_status, Order.AWAITING_PAYMENT)
        self.assertEqual(log.ip_address, '198.51.100.7')

    def test_create_order_exposes_invoice_reference(self):
        order = self.create_order()

        self.assertEqual(order.invoice_reference, {'order_id': order.order_id, 'token': order.release_token})

    def test_orders_get_distinct_ids_and_tokens(self):
        first = self.create_order()
        second = self.create_order()

        self.assertNotEqual(first.order_id, second.order_id)
        self.assertNotEqual(first.release_token, second.release_token)

    def test_missing_required_field_persists_nothing(self):
        for field in OrderService.REQUIRED_FIELDS:
            with self.subTest(field=field):
                with self.assertRaises(ValidationError) as ctx:
                    self.service.create_order(self.submission(**{field: '  '}))
                self.assertEqual(ctx.exception.field, field)
                self.assertEqual(ctx.exception.message, f"Missing required field: {field}")

        self.assertEqual(Order.objects.count(), 0)

    def test_invoice_url_carries_token(self):
        order = self.create_order()

        url = urlparse(self.service.invoice_url(order))

        self.assertEqual(url.netloc, 'testserver')
        self.assertEqual(url.path, f'/invoices/{order.order_id}')
        self.assertEqual(parse_qs(url.query)['t'], [order.release_token])
        self.assertNotIn('?', self.service.invoice_url(order, include_token=False))


class ConfirmPaymentTests(BaseOrderTestCase):

    def test_confirm_payment(self):
        order = self.create_order()

        result = self.service.confirm_payment(order.order_id, escrow_balance='200.00')

        self.assertTrue(result.changed)
        self.assertEqual(result.order.status, Order.PAYMENT_CONFIRMED)
        self.assertIsNotNone(result.order.paid_at)
        self.assertEqual(result.order.escrow_balance, Decimal('200.00'))

    def test_escrow_balance_left_alone_when_not_supplied(self):
        order = self.create_order()

        result = self.service.confirm_payment(order.order_id)

        self.assertEqual(result.order.escrow_balance, Decimal('0.00'))

    def test_repeat_confirmation_is_a_no_op(self):
        order = self.create_order()
        first = self.service.confirm_payment(order.order_id, escrow_balance='200')

        second = self.service.confirm_payment(order.order_id, escrow_balance='999')

        self.assertFalse(second.changed)
        self.assertEqual(second.order.paid_at, first.order.paid_at)
        self.assertEqual(second.order.escrow_balance, Decimal('200.00'))
        self.assertEqual(order.state_logs.filter(to_status=Order.PAYMENT_CONFIRMED).count(), 1)

    def test_released_order_cannot_be_confirmed(self):
        order = self.confirmed_order()
        self.service.release_funds(order.order_id, order.release_token)

        with self.assertRaises(InvalidStateError):
            self.service.confirm_payment(order.order_id)

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            self.service.confirm_payment('ZZZ-999999')

    def test_negative_escrow_balance_rejected(self):
        order = self.create_order()

        with self.assertRaises(ValidationError):
            self.service.confirm_payment(order.order_id, escrow_balance='-1')

        order.refresh_from_db()
        self.assertEqual(order.status, Order.AWAITING_PAYMENT)

    def test_oversized_escrow_balance_rejected(self):
        order = self.create_order()

        with self.assertRaises(ValidationError) as ctx:
            self.service.confirm_payment(order.order_id, escrow_balance='1e30')

        self.assertEqual(ctx.exception.field, 'escrow_balance')
        order.refresh_from_db()
        self.assertEqual(order.status, Order.AWAITING_PAYMENT)


class ReleaseFundsTests(BaseOrderTestCase):

    def test_release_with_token(self):
        order = self.confirmed_order()

        result = self.service.release_funds(order.order_id, order.release_token, ip_address='192.0.2.1')

        self.assertEqual(result.order.status, Order.FUNDS_RELEASED)
        self.assertIsNotNone(result.order.released_at)
        log = result.order.state_logs.get(to_status=Order.FUNDS_RELEASED)
        self.assertEqual(log.actor, OrderStateLog.ACTOR_BUYER)
        self.assertEqual(log.ip_address, '192.0.2.1')

    def test_wrong_or_missing_token_rejected_in_every_state(self):
        awaiting = self.create_order()
        confirmed = self.confirmed_order()
        released = self.confirmed_order()
        self.service.release_funds(released.order_id, released.release_token)

        for order in (awaiting, confirmed, released):
            for token in (None, '', 'wrong-token', order.release_token[:-1]):
                with self.subTest(status=order.status, token=token):
                    with self.assertRaises(AuthorizationError):
                        self.service.release_funds(order.order_id, token)

        confirmed.refresh_from_db()
        self.assertEqual(confirmed.status, Order.PAYMENT_CONFIRMED)

    def test_failed_token_is_logged(self):
        order = self.confirmed_order()

        with self.assertRaises(AuthorizationError):
            self.service.release_funds(order.order_id, 'guess', ip_address='192.0.2.50')
        with self.assertRaises(AuthorizationError):
            self.service.release_funds(order.order_id, None)

        invalid = SuspiciousActivityLog.objects.get(activity_type=SuspiciousActivityLog.ActivityType.INVALID_TOKEN)
        self.assertEqual(invalid.order_id, order.order_id)
        self.assertEqual(invalid.ip_address, '192.0.2.50')
        self.assertTrue(
            SuspiciousActivityLog.objects.filter(
                activity_type=SuspiciousActivityLog.ActivityType.MISSING_TOKEN
            ).exists()
        )

    def test_release_before_confirmation(self):
        order = self.create_order()

        with self.assertRaises(InvalidStateError):
            self.service.release_funds(order.order_id, order.release_token)

    def test_release_twice(self):
        order = self.confirmed_order()
        self.service.release_funds(order.order_id, order.release_token)

        with self.assertRaises(InvalidStateError):
            self.service.release_funds(order.order_id, order.release_token)

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            self.service.release_funds('ZZZ-999999', 'anything')


class RenderInvoiceTests(BaseOrderTestCase):

    def test_release_action_only_while_confirmed(self):
        order = self.create_order()

        view = self.service.render_invoice(order.order_id, token=order.release_token)
        self.assertFalse(view.can_release)
        self.assertIsNone(view.release_url)

        self.service.confirm_payment(order.order_id)
        view = self.service.render_invoice(order.order_id, token=order.release_token)
        self.assertTrue(view.can_release)
        self.assertEqual(
            view.release_url,
            f'/payments/{order.order_id}/release?t={order.release_token}'
        )

        self.service.release_funds(order.order_id, order.release_token)
        view = self.service.render_invoice(order.order_id, token=order.release_token)
        self.assertFalse(view.can_release)

    def test_invoice_needs_no_token(self):
        order = self.create_order(payment_plan='full')

        view = self.service.render_invoice(order.order_id)

        self.assertEqual(view.order.pk, order.pk)
        self.assertEqual(view.plan_label, 'Full payment')
        self.assertEqual(view.pdf_url, f'/invoices/{order.order_id}/pdf')

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            self.service.render_invoice('ZZZ-999999')
