"""
Order serializers.
Handles API input/output for the intake form and payment endpoints.
"""
from decimal import Decimal
from rest_framework import serializers
from apps.orders.models import Order, OrderStateLog
from common.validators import validate_phone_number
from django.core.exceptions import ValidationError as DjangoValidationError


class OrderStateLogSerializer(serializers.ModelSerializer):
    """Serializer for order state change logs."""

    class Meta:
        model = OrderStateLog
        fields = ['from_status', 'to_status', 'actor', 'reason', 'created_at']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Public order representation (camelCase, no release token).
    """
    orderId = serializers.CharField(source='order_id', read_only=True)
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)
    itemDetails = serializers.CharField(source='item_details', read_only=True)
    deliveryNotes = serializers.CharField(source='delivery_notes', read_only=True)
    totalPrice = serializers.DecimalField(source='total_price', max_digits=12, decimal_places=2, read_only=True)
    paymentPlan = serializers.CharField(source='payment_plan', read_only=True)
    depositType = serializers.CharField(source='deposit_type', read_only=True)
    depositValue = serializers.DecimalField(source='deposit_value', max_digits=12, decimal_places=2, read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    packageName = serializers.CharField(source='package_name', read_only=True)
    packagePrice = serializers.DecimalField(source='package_price', max_digits=12, decimal_places=2, read_only=True)
    planSummary = serializers.CharField(source='plan_summary', read_only=True)
    calculatedDeposit = serializers.DecimalField(source='calculated_deposit', max_digits=12, decimal_places=2, read_only=True)
    balanceDue = serializers.DecimalField(source='balance_due', max_digits=12, decimal_places=2, read_only=True)
    escrowBalance = serializers.DecimalField(source='escrow_balance', max_digits=12, decimal_places=2, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    paidAt = serializers.DateTimeField(source='paid_at', read_only=True)
    releasedAt = serializers.DateTimeField(source='released_at', read_only=True)
    stateLogs = OrderStateLogSerializer(source='state_logs', many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'orderId', 'status', 'role', 'source', 'firstName', 'lastName',
            'email', 'phone', 'itemDetails', 'deliveryNotes', 'totalPrice',
            'paymentPlan', 'depositType', 'depositValue', 'notes',
            'paymentMethod', 'packageName', 'packagePrice',
            'planSummary', 'calculatedDeposit', 'balanceDue', 'escrowBalance',
            'createdAt', 'paidAt', 'releasedAt', 'stateLogs'
        ]
        read_only_fields = fields


class SubmitOrderSerializer(serializers.Serializer):
    """
    Intake form schema.

    Accepts the legacy field names of older form versions (platform, downType,
    downValue, amount, buyerNotes, milestoneNotes, plan 'milestone') and maps
    them onto one vocabulary. Output keys are model field names.
    """
    FIELD_ALIASES = {
        'platform': 'source',
        'downType': 'depositType',
        'downValue': 'depositValue',
        'amount': 'totalPrice',
        'buyerNotes': 'notes',
        'milestoneNotes': 'notes',
    }
    PLAN_ALIASES = {'milestone': Order.PLAN_DOWN}
    MONEY_FIELDS = ('totalPrice', 'depositValue', 'packagePrice')
    LOWERCASE_FIELDS = ('role', 'paymentPlan', 'depositType')

    role = serializers.ChoiceField(choices=Order.ROLE_CHOICES)
    source = serializers.CharField(max_length=100)
    firstName = serializers.CharField(source='first_name', max_length=100)
    lastName = serializers.CharField(source='last_name', max_length=100)
    email = serializers.EmailField(max_length=254)
    phone = serializers.CharField(max_length=30)
    itemDetails = serializers.CharField(source='item_details', max_length=4000, required=False, allow_blank=True, default='')
    deliveryNotes = serializers.CharField(source='delivery_notes', max_length=2000, required=False, allow_blank=True, default='')
    paymentPlan = serializers.ChoiceField(source='payment_plan', choices=Order.PLAN_CHOICES, required=False, default=Order.PLAN_FULL)
    depositType = serializers.ChoiceField(source='deposit_type', choices=Order.DEPOSIT_TYPE_CHOICES, required=False, default=Order.DEPOSIT_PERCENT)
    depositValue = serializers.DecimalField(
        source='deposit_value',
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
        default=None
    )
    totalPrice = serializers.DecimalField(
        source='total_price',
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
        default=None
    )
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')
    paymentMethod = serializers.CharField(source='payment_method', max_length=100, required=False, allow_blank=True, default='')
    packageName = serializers.CharField(source='package_name', max_length=200, required=False, allow_blank=True, default='')
    packagePrice = serializers.DecimalField(
        source='package_price',
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
        default=None
    )

    def to_internal_value(self, data):
        """Fold aliases and blank optional values before field validation."""
        if hasattr(data, 'dict'):
            data = data.dict()
        data = dict(data)

        for alias, canonical in self.FIELD_ALIASES.items():
            if alias in data:
                value = data.pop(alias)
                current = data.get(canonical)
                if current is None or (isinstance(current, str) and not current.strip()):
                    data[canonical] = value

        for name in self.LOWERCASE_FIELDS:
            if isinstance(data.get(name), str):
                data[name] = data[name].strip().lower()

        plan = data.get('paymentPlan')
        if plan in self.PLAN_ALIASES:
            data['paymentPlan'] = self.PLAN_ALIASES[plan]

        for name in ('paymentPlan', 'depositType'):
            if data.get(name) in (None, ''):
                data.pop(name, None)

        for name in self.MONEY_FIELDS:
            value = data.get(name)
            if isinstance(value, str):
                value = value.replace('$', '').replace(',', '').strip()
                data[name] = value or None

        return super().to_internal_value(data)

    def validate_phone(self, value):
        try:
            return validate_phone_number(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)

    def validate(self, attrs):
        if (attrs.get('deposit_type') == Order.DEPOSIT_PERCENT
                and attrs.get('deposit_value') is not None
                and attrs['deposit_value'] > 100):
            raise serializers.ValidationError({'depositValue': 'A percent deposit cannot exceed 100.'})
        return attrs


class ConfirmPaymentSerializer(serializers.Serializer):
    """Optional escrow balance recorded with the confirmation."""
    escrowBalance = serializers.DecimalField(
        source='escrow_balance',
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
        default=None
    )
