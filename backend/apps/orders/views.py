"""
Order views and API endpoints.
Intake form, invoice pages and the two payment transitions.
"""
import logging

from django.http import HttpResponse
from django.shortcuts import render
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter, OpenApiResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.orders.serializers import (
    ConfirmPaymentSerializer,
    OrderSerializer,
    SubmitOrderSerializer,
)
from apps.orders.services.invoice_pdf import InvoicePDFGenerator
from apps.orders.services.order_service import OrderService
from common.exceptions import EscrowError, NotFoundError
from common.permissions import HasAdminKey
from common.throttling import AdminThrottle, ReleaseThrottle, SubmitThrottle
from common.utils import get_client_ip

logger = logging.getLogger(__name__)

TOKEN_PARAMETER = OpenApiParameter(
    name='t',
    type=OpenApiTypes.STR,
    location=OpenApiParameter.QUERY,
    required=False,
    description='Release token from the invoice link'
)


@extend_schema(
    tags=['Orders'],
    summary='Submit an escrow request',
    request=SubmitOrderSerializer,
    responses={
        200: OpenApiResponse(
            description='Order created',
            examples=[OpenApiExample('Created', value={
                'ok': True,
                'orderId': 'ABC-123456',
                'invoiceUrl': 'https://escrow.example.com/invoices/ABC-123456?t=...',
                'warnings': []
            })]
        ),
        400: OpenApiResponse(description='Missing or malformed field'),
        429: OpenApiResponse(description='Too many submissions'),
    }
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([SubmitThrottle])
def submit_order(request):
    """
    Create an order from the intake form (form-encoded or JSON).
    Email failures do not fail the request; they come back as warnings.
    """
    serializer = SubmitOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    service = OrderService()
    result = service.create_order(serializer.validated_data, ip_address=get_client_ip(request))

    return Response({
        'ok': True,
        'orderId': result.order.order_id,
        'invoiceUrl': service.invoice_url(result.order),
        'warnings': result.warnings,
    })


@extend_schema(
    tags=['Invoices'],
    summary='Invoice page',
    parameters=[TOKEN_PARAMETER],
    responses={200: OpenApiResponse(description='HTML invoice'), 404: OpenApiResponse(description='Unknown order')}
)
@api_view(['GET'])
@permission_classes([AllowAny])
def invoice_detail(request, order_id):
    """Render the invoice. The token, when present, only enables the release form."""
    try:
        invoice = OrderService().render_invoice(order_id, token=request.query_params.get('t'))
    except NotFoundError as e:
        return render(
            request,
            'orders/error.html',
            {'title': 'Invoice not found', 'message': e.message},
            status=e.status_code
        )
    return render(request, 'orders/invoice.html', {'invoice': invoice, 'order': invoice.order})


@extend_schema(
    tags=['Invoices'],
    summary='Invoice PDF',
    responses={(200, 'application/pdf'): OpenApiTypes.BINARY, 404: OpenApiResponse(description='Unknown order')}
)
@api_view(['GET'])
@permission_classes([AllowAny])
def invoice_pdf(request, order_id):
    """Download the invoice as a PDF, rendered on demand."""
    order = OrderService().store.get(order_id)
    response = HttpResponse(InvoicePDFGenerator.generate(order), content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="{InvoicePDFGenerator.filename(order)}"'
    return response


@extend_schema(
    tags=['Payments'],
    summary='Confirm payment received',
    request=ConfirmPaymentSerializer,
    responses={
        200: OrderSerializer,
        400: OpenApiResponse(description='Order cannot be confirmed in its current status'),
        403: OpenApiResponse(description='Missing or wrong X-Admin-Key'),
        404: OpenApiResponse(description='Unknown order'),
    }
)
@api_view(['POST'])
@permission_classes([HasAdminKey])
@throttle_classes([AdminThrottle])
def confirm_payment(request, order_id):
    """
    Administrative confirmation that the buyer's transfer arrived.
    Repeating it for a confirmed order changes nothing (changed=false).
    """
    serializer = ConfirmPaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = OrderService().confirm_payment(
        order_id,
        escrow_balance=serializer.validated_data.get('escrow_balance'),
        ip_address=get_client_ip(request)
    )

    return Response({
        'ok': True,
        'order': OrderSerializer(result.order).data,
        'changed': result.changed,
        'warnings': result.warnings,
    })


@extend_schema(
    tags=['Payments'],
    summary='Release escrowed funds',
    parameters=[TOKEN_PARAMETER],
    request=None,
    responses={
        200: OpenApiResponse(description='HTML confirmation page'),
        400: OpenApiResponse(description='Payment not confirmed yet, or already released'),
        403: OpenApiResponse(description='Missing or wrong release token'),
        404: OpenApiResponse(description='Unknown order'),
        429: OpenApiResponse(description='Too many attempts'),
    }
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ReleaseThrottle])
def release_funds(request, order_id):
    """
    Buyer releases funds with the token from the invoice link.
    Token comes from the query string or a form field named t.
    """
    token = request.query_params.get('t') or request.data.get('t')

    try:
        result = OrderService().release_funds(order_id, token, ip_address=get_client_ip(request))
    except EscrowError as e:
        logger.info(f"Release refused for order {order_id}: {e.message}")
        return render(
            request,
            'orders/error.html',
            {'title': 'Release not completed', 'message': e.message},
            status=e.status_code
        )

    return render(
        request,
        'orders/release_confirmed.html',
        {'order': result.order, 'warnings': result.warnings},
        status=status.HTTP_200_OK
    )
