"""
Order admin configuration.
"""
from django.contrib import admin, messages
from apps.orders.models import Order, OrderStateLog
from apps.orders.services.order_service import OrderService
from common.exceptions import EscrowError
from common.utils import get_client_ip


class OrderStateLogInline(admin.TabularInline):
    model = OrderStateLog
    extra = 0
    readonly_fields = ['from_status', 'to_status', 'actor', 'reason', 'ip_address', 'created_at']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_id', 'full_name', 'email', 'role', 'status', 'total_price', 'created_at']
    list_filter = ['status', 'role', 'payment_plan', 'created_at']
    search_fields = ['order_id', 'email', 'first_name', 'last_name', 'phone']
    exclude = ['release_token']
    readonly_fields = [
        'order_id', 'role', 'source', 'first_name', 'last_name', 'email', 'phone',
        'item_details', 'delivery_notes', 'total_price', 'payment_plan',
        'deposit_type', 'deposit_value', 'notes', 'payment_method',
        'package_name', 'package_price', 'plan_summary',
        'calculated_deposit', 'balance_due', 'status', 'escrow_balance',
        'created_at', 'updated_at', 'paid_at', 'released_at'
    ]
    inlines = [OrderStateLogInline]
    actions = ['confirm_payment']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description='Confirm payment for selected orders')
    def confirm_payment(self, request, queryset):
        service = OrderService()
        confirmed = 0
        for order in queryset:
            try:
                result = service.confirm_payment(order.order_id, ip_address=get_client_ip(request))
            except EscrowError as e:
                self.message_user(request, f"{order.order_id}: {e.message}", messages.ERROR)
                continue
            if result.changed:
                confirmed += 1
            for warning in result.warnings:
                self.message_user(request, f"{order.order_id}: {warning}", messages.WARNING)
        self.message_user(request, f"{confirmed} order(s) confirmed.")
