"""
Payment webhook processing
Accepts both the gateway notification format and the simulator's
"""
from decimal import Decimal, InvalidOperation
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .models import Invoice, PaymentNotification
from .signatures import SIMULATED_SIGNATURE

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = {'success', 'SETLD', 'SUCCESS', '00', 'PAID'}
FAILURE_STATUSES = {'failed', 'FAILED', 'REJEC', 'REJECTED', 'EXPIRED', 'CANCELLED'}

# Invoices in these states may still be settled by a late payment
PAYABLE_STATUSES = ['unpaid', 'failed', 'expired', 'cancelled']


def parse_amount(value):
    if value in (None, ''):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        logger.warning(f"Unparseable webhook amount: {value!r}")
        return None
    if not amount.is_finite():
        logger.warning(f"Non-finite webhook amount: {value!r}")
        return None
    return amount


def normalize_payload(payload):
    """Map gateway (merchant_ref_no, payment_status, ...) and simulator field names onto one shape"""
    return {
        'order_id': str(payload.get('order_id') or payload.get('merchant_ref_no') or ''),
        'transaction_id': str(payload.get('transaction_id') or payload.get('plink_ref_no') or ''),
        'status': str(payload.get('status') or payload.get('payment_status') or ''),
        'amount': parse_amount(payload.get('amount', payload.get('transaction_amount'))),
        'payment_type': str(payload.get('payment_type') or payload.get('payment_method') or ''),
    }


def find_invoice(order_id):
    if not order_id:
        return None
    return Invoice.objects.filter(Q(invoice_number=order_id) | Q(order_number=order_id)).first()


def record_notification(payload, signature, is_verified):
    """Store the notification and link it to its invoice. Returns (notification, invoice)."""
    data = normalize_payload(payload)
    invoice = find_invoice(data['order_id'])
    notification = PaymentNotification.objects.create(
        invoice=invoice,
        transaction_id=data['transaction_id'],
        order_id=data['order_id'],
        status=data['status'],
        amount=data['amount'],
        payment_type=data['payment_type'],
        signature=signature or '',
        is_simulated=signature == SIMULATED_SIGNATURE,
        is_verified=is_verified,
        raw=payload,
    )
    return notification, invoice


def apply_notification(notification, invoice):
    """
    Move the invoice according to the notification status.

    Returns a short note: 'paid', 'failed', 'already_paid',
    'already_processed' or 'ignored'.
    """
    if invoice.status == 'paid':
        return 'already_paid'

    if notification.status in SUCCESS_STATUSES:
        with transaction.atomic():
            # conditional update so two concurrent notifications settle the invoice once
            updated = Invoice.objects.filter(pk=invoice.pk, status__in=PAYABLE_STATUSES).update(
                status='paid',
                paid_at=timezone.now(),
                payment_method=notification.payment_type or invoice.payment_method,
                updated_at=timezone.now(),
            )
        if not updated:
            return 'already_processed'
        logger.info(f"Invoice {invoice.invoice_number} paid via {notification.payment_type or 'unknown'}")
        return 'paid'

    if notification.status in FAILURE_STATUSES:
        updated = Invoice.objects.filter(pk=invoice.pk, status='unpaid').update(
            status='failed', updated_at=timezone.now()
        )
        if updated:
            logger.info(f"Invoice {invoice.invoice_number} payment failed ({notification.status})")
            return 'failed'
        return 'ignored'

    logger.info(f"Ignoring payment status {notification.status!r} for {invoice.invoice_number}")
    return 'ignored'
