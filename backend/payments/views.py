import json
import logging

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from backend.core.utils import create_audit_log
from .exceptions import SimulatorError
from .models import Invoice, PaymentNotification
from .serializers import InvoiceSerializer, PaymentNotificationSerializer, SimulatePaymentSerializer
from .signatures import SIMULATED_SIGNATURE, verify_signature
from .simulator import PaymentSimulator
from .utils import apply_notification, record_notification

logger = logging.getLogger('backend.payments')


def signature_check_required(signature):
    """
    SIMULATED skips the HMAC only while the simulator is on; with the
    simulator off it is always checked, and fails without a secret. Other
    signatures are checked once PAYMENT_WEBHOOK_SECRET is configured.
    """
    if signature == SIMULATED_SIGNATURE:
        return not settings.PAYMENT_SIMULATOR_ENABLED
    return bool(settings.PAYMENT_WEBHOOK_SECRET)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def payment_webhook(request):
    """Payment gateway (or simulator) notification"""
    raw_body = request.body
    try:
        payload = json.loads(raw_body or b'{}')
    except ValueError:
        return Response({'error': 'Invalid JSON payload'}, status=status.HTTP_400_BAD_REQUEST)
    if not isinstance(payload, dict):
        return Response({'error': 'Invalid JSON payload'}, status=status.HTTP_400_BAD_REQUEST)

    signature = request.headers.get('mac') or str(payload.get('signature') or '')
    is_verified = False
    if signature_check_required(signature):
        if not verify_signature(raw_body, signature, settings.PAYMENT_WEBHOOK_SECRET):
            logger.warning(f"Payment webhook signature mismatch for {payload.get('order_id') or payload.get('merchant_ref_no')}")
            return Response({'error': 'Invalid signature'}, status=status.HTTP_401_UNAUTHORIZED)
        is_verified = True

    notification, invoice = record_notification(payload, signature, is_verified)
    logger.info(f"Payment webhook: order={notification.order_id} status={notification.status} simulated={notification.is_simulated}")

    if invoice is None:
        logger.warning(f"Payment webhook for unknown invoice {notification.order_id!r}")
        return Response({'ack': 'OK', 'warning': 'invoice_not_found'})

    note = apply_notification(notification, invoice)
    create_audit_log(
        request=request,
        action='payment_webhook',
        model_name='Invoice',
        object_id=invoice.id,
        object_name=invoice.invoice_number,
        object_reference=invoice.order_number or invoice.invoice_number,
        changes={'status': notification.status, 'result': note, 'simulated': notification.is_simulated}
    )
    return Response({'ack': 'OK', 'note': note})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def simulate_payment(request):
    """Run the payment simulator for an invoice: select method, show VA, pay"""
    if not settings.PAYMENT_SIMULATOR_ENABLED:
        return Response({'error': 'Not found'}, status=status.HTTP_404_NOT_FOUND)

    serializer = SimulatePaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    invoice = get_object_or_404(Invoice, invoice_number=serializer.validated_data['invoice_number'])

    try:
        simulator = PaymentSimulator(
            invoice.invoice_number,
            invoice.amount,
            order_number=invoice.order_number,
            processing_delay=settings.PAYMENT_SIMULATOR_DELAY,
        )
        simulator.select_method(serializer.validated_data['method'])
        simulator.confirm_selection()
        simulator.pay()
    except SimulatorError as e:
        logger.warning(f"Payment simulation for {invoice.invoice_number} refused: {e}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='payment_simulated',
        model_name='Invoice',
        object_id=invoice.id,
        object_name=invoice.invoice_number,
        object_reference=invoice.order_number or invoice.invoice_number,
        changes={'method': simulator.selected_method, 'state': simulator.state}
    )
    return Response(simulator.to_dict())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_status(request, invoice_number):
    """Current invoice status, polled by the payment callback page"""
    invoice = get_object_or_404(Invoice, invoice_number=invoice_number)
    return Response(InvoiceSerializer(invoice).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def notification_list(request):
    """Received payment notifications, newest first"""
    queryset = PaymentNotification.objects.select_related('invoice')
    order_id = request.query_params.get('order_id')
    if order_id:
        queryset = queryset.filter(order_id=order_id)
    return Response(PaymentNotificationSerializer(queryset[:200], many=True).data)
