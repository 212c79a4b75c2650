"""
Order URL patterns.
"""
from django.urls import path
from apps.orders import views

app_name = 'orders'

urlpatterns = [
    # Intake
    path('submit', views.submit_order, name='submit'),

    # Invoices
    path('invoices/<str:order_id>', views.invoice_detail, name='invoice'),
    path('invoices/<str:order_id>/pdf', views.invoice_pdf, name='invoice-pdf'),

    # State transitions
    path('payments/<str:order_id>/confirm', views.confirm_payment, name='confirm'),
    path('payments/<str:order_id>/release', views.release_funds, name='release'),
]
