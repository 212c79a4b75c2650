"""
Template filters for invoice pages and notification emails.
"""
from django import template
from apps.orders.services.payment_plan import format_currency

register = template.Library()


@register.filter
def currency(value):
    """Render a money value as $1,234.50, or '-' when the amount is unknown."""
    if value is None or value == '':
        return '-'
    return format_currency(value)
