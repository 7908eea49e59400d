"""
Test suite for payments
Tests: simulator state machine, webhook signature handling, invoice settlement, simulate endpoint
"""
import importlib
import json
import os
from decimal import Decimal
from unittest import mock

from django.test import SimpleTestCase, TestCase, override_settings
import requests
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .exceptions import InvalidTransition, SimulatorDisabled
from .models import PaymentNotification
from .signatures import generate_signature, verify_signature
from .simulator import PaymentSimulator, format_countdown, generate_va_number
from .utils import parse_amount
from .views import signature_check_required

WEBHOOK_URL = '/api/v1/webhooks/payment/'
SIMULATE_URL = '/api/v1/payments/simulate/'


class FixedRandom:
    def __init__(self, value=0.5, digit=7):
        self.value = value
        self.digit = digit

    def random(self):
        return self.value

    def randint(self, a, b):
        return self.digit


def make_simulator(**kwargs):
    kwargs.setdefault('enabled', True)
    kwargs.setdefault('sleep', lambda seconds: None)
    kwargs.setdefault('rng', FixedRandom())
    kwargs.setdefault('clock', lambda: 1700000000.5)
    kwargs.setdefault('webhook_url', 'http://api.test/api/v1/webhooks/payment/')
    return PaymentSimulator('INV-001', Decimal('150000.00'), order_number='ORD-001', **kwargs)


class PaymentSimulatorTests(SimpleTestCase):

    @override_settings(PAYMENT_SIMULATOR_ENABLED=False)
    def test_disabled_simulator_refuses(self):
        with self.assertRaises(SimulatorDisabled):
            PaymentSimulator('INV-001', 1000)

    def test_va_prefixes(self):
        rng = FixedRandom(digit=3)
        self.assertEqual(generate_va_number('va_bca', rng), '80777' + '3' * 10)
        self.assertEqual(generate_va_number('va_bni', rng), '988' + '3' * 10)
        self.assertEqual(generate_va_number('gopay', rng), '100' + '3' * 10)

    def test_confirm_requires_method(self):
        sim = make_simulator()
        with self.assertRaises(InvalidTransition):
            sim.confirm_selection()

    def test_unknown_method(self):
        sim = make_simulator()
        with self.assertRaises(ValueError):
            sim.select_method('bitcoin')

    def test_change_method_returns_to_pending(self):
        sim = make_simulator()
        sim.select_method('va_bni')
        sim.confirm_selection()
        self.assertEqual(sim.state, PaymentSimulator.SHOWING_VA)
        sim.change_method()
        self.assertEqual(sim.state, PaymentSimulator.PENDING)

    def test_pay_requires_va(self):
        sim = make_simulator()
        with self.assertRaises(InvalidTransition):
            sim.pay()

    @mock.patch('backend.payments.simulator.requests.post')
    def test_successful_payment_posts_webhook(self, mock_post):
        sleeps = []
        sim = make_simulator(sleep=sleeps.append)
        sim.select_method('va_bca')
        sim.confirm_selection()

        self.assertEqual(sim.pay(), PaymentSimulator.SUCCESS)
        self.assertEqual(sleeps, [3])
        mock_post.assert_called_once_with(
            'http://api.test/api/v1/webhooks/payment/',
            json={
                'transaction_id': 'SIM-1700000000500',
                'order_id': 'INV-001',
                'status': 'success',
                'amount': '150000.00',
                'signature': 'SIMULATED',
                'payment_type': 'va_bca',
            },
            timeout=10,
        )

    @mock.patch('backend.payments.simulator.requests.post')
    def test_declined_payment_skips_webhook(self, mock_post):
        sim = make_simulator(rng=FixedRandom(value=0.01))
        sim.select_method('qris')
        sim.confirm_selection()
        self.assertEqual(sim.pay(), PaymentSimulator.FAILED)
        mock_post.assert_not_called()

    @mock.patch('backend.payments.simulator.requests.post')
    def test_webhook_failure_counts_as_failed(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError('refused')
        sim = make_simulator()
        sim.select_method('dana')
        sim.confirm_selection()
        self.assertEqual(sim.pay(), PaymentSimulator.FAILED)
        self.assertEqual(sim.error, 'Webhook delivery failed')

        sim.reset()
        self.assertEqual(sim.state, PaymentSimulator.PENDING)
        with self.assertRaises(InvalidTransition):
            sim.reset()

    def test_countdown(self):
        sim = make_simulator()
        self.assertEqual(format_countdown(sim.countdown), '5:00')
        sim.tick(61)
        self.assertEqual(format_countdown(sim.countdown), '3:59')
        sim.tick(1000)
        self.assertEqual(sim.countdown, 0)
        self.assertTrue(sim.expired)

    @mock.patch('backend.payments.simulator.requests.post')
    def test_countdown_stops_after_processing(self, mock_post):
        sim = make_simulator()
        sim.select_method('ovo')
        sim.confirm_selection()
        sim.pay()
        self.assertEqual(sim.tick(), 300)


class SignatureTests(SimpleTestCase):

    def test_verify_signature(self):
        body = b'{"order_id": "INV-001"}'
        signature = generate_signature(body, 'secret')
        self.assertTrue(verify_signature(body, signature, 'secret'))
        self.assertTrue(verify_signature(body, signature.upper(), 'secret'))
        self.assertFalse(verify_signature(body, signature, 'other'))
        self.assertFalse(verify_signature(body, '', 'secret'))

    @override_settings(PAYMENT_WEBHOOK_SECRET='', PAYMENT_SIMULATOR_ENABLED=False)
    def test_simulated_signature_checked_while_simulator_off(self):
        self.assertTrue(signature_check_required('SIMULATED'))
        self.assertFalse(signature_check_required(''))

    @override_settings(PAYMENT_WEBHOOK_SECRET='s3cret', PAYMENT_SIMULATOR_ENABLED=True)
    def test_simulated_signature_skipped_while_simulator_on(self):
        self.assertFalse(signature_check_required('SIMULATED'))
        self.assertTrue(signature_check_required('abc123'))

    def test_simulator_off_by_default(self):
        from backend.config import settings as project_settings
        with mock.patch.dict(os.environ):
            os.environ.pop('PAYMENT_SIMULATOR_ENABLED', None)
            importlib.reload(project_settings)
            self.assertFalse(project_settings.PAYMENT_SIMULATOR_ENABLED)
        importlib.reload(project_settings)


class ParseAmountTests(SimpleTestCase):

    def test_parses_decimal_strings_and_numbers(self):
        self.assertEqual(parse_amount('250000.00'), Decimal('250000.00'))
        self.assertEqual(parse_amount(250000), Decimal('250000'))
        self.assertIsNone(parse_amount(''))
        self.assertIsNone(parse_amount(None))

    def test_rejects_garbage_and_non_finite(self):
        with self.assertLogs('backend.payments.utils', level='WARNING'):
            self.assertIsNone(parse_amount('abc'))
        for value in ('NaN', 'Infinity', '-Infinity', float('inf')):
            with self.assertLogs('backend.payments.utils', level='WARNING'):
                self.assertIsNone(parse_amount(value))


@override_settings(PAYMENT_WEBHOOK_SECRET='', PAYMENT_SIMULATOR_ENABLED=True)
class PaymentWebhookTests(TestCase):
    """Test payment webhook endpoint"""

    def setUp(self):
        self.client = APIClient()
        self.invoice = TestDataFactory.create_invoice(invoice_number='INV-100', order_number='ORD-100')

    def post(self, payload, **extra):
        body = json.dumps(payload)
        return self.client.post(WEBHOOK_URL, data=body, content_type='application/json', **extra), body

    def payload(self, **overrides):
        data = {
            'transaction_id': 'SIM-1',
            'order_id': 'INV-100',
            'status': 'success',
            'amount': '250000.00',
            'signature': 'SIMULATED',
            'payment_type': 'va_bca',
        }
        data.update(overrides)
        return data

    def test_success_marks_invoice_paid(self):
        response, _ = self.post(self.payload())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'ack': 'OK', 'note': 'paid'})

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, 'paid')
        self.assertEqual(self.invoice.payment_method, 'va_bca')
        self.assertIsNotNone(self.invoice.paid_at)

        notification = PaymentNotification.objects.get()
        self.assertEqual(notification.invoice, self.invoice)
        self.assertTrue(notification.is_simulated)
        self.assertEqual(notification.amount, Decimal('250000.00'))
        self.assertTrue(AuditLog.objects.filter(action='payment_webhook', object_name='INV-100').exists())

    def test_second_notification_is_idempotent(self):
        self.post(self.payload())
        response, _ = self.post(self.payload(transaction_id='SIM-2'))
        self.assertEqual(response.data, {'ack': 'OK', 'note': 'already_paid'})
        self.assertEqual(PaymentNotification.objects.count(), 2)

    def test_unknown_invoice(self):
        response, _ = self.post(self.payload(order_id='INV-404'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'ack': 'OK', 'warning': 'invoice_not_found'})

    def test_gateway_format_by_order_number(self):
        response, _ = self.post({
            'merchant_ref_no': 'ORD-100',
            'plink_ref_no': 'PL-9',
            'payment_status': 'SETLD',
            'transaction_amount': 250000,
        })
        self.assertEqual(response.data['note'], 'paid')

    def test_failure_status(self):
        response, _ = self.post(self.payload(status='FAILED'))
        self.assertEqual(response.data['note'], 'failed')
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, 'failed')

    def test_late_payment_settles_failed_invoice(self):
        self.post(self.payload(status='FAILED'))
        response, _ = self.post(self.payload(status='00'))
        self.assertEqual(response.data['note'], 'paid')

    def test_invalid_json(self):
        response = self.client.post(WEBHOOK_URL, data='not json', content_type='application/json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(PAYMENT_WEBHOOK_SECRET='s3cret')
    def test_valid_hmac_header(self):
        payload = self.payload(signature='')
        body = json.dumps(payload)
        response = self.client.post(
            WEBHOOK_URL, data=body, content_type='application/json',
            HTTP_MAC=generate_signature(body, 's3cret'),
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(PaymentNotification.objects.get().is_verified)

    @override_settings(PAYMENT_WEBHOOK_SECRET='s3cret')
    def test_invalid_hmac_rejected(self):
        response, _ = self.post(self.payload(signature='deadbeef'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(PaymentNotification.objects.exists())

    @override_settings(PAYMENT_WEBHOOK_SECRET='s3cret')
    def test_simulated_signature_accepted_while_simulator_enabled(self):
        response, _ = self.post(self.payload())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(PaymentNotification.objects.get().is_verified)

    @override_settings(PAYMENT_WEBHOOK_SECRET='s3cret', PAYMENT_SIMULATOR_ENABLED=False)
    def test_simulated_signature_rejected_when_simulator_disabled(self):
        response, _ = self.post(self.payload())
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, 'unpaid')

    @override_settings(PAYMENT_SIMULATOR_ENABLED=False)
    def test_simulated_signature_rejected_without_secret_when_simulator_disabled(self):
        response, _ = self.post(self.payload())
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(PaymentNotification.objects.exists())
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, 'unpaid')


@override_settings(PAYMENT_SIMULATOR_ENABLED=True, PAYMENT_SIMULATOR_DELAY=0)
class SimulatePaymentAPITests(TestCase):
    """Test simulate payment endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.invoice = TestDataFactory.create_invoice(invoice_number='INV-200', amount=Decimal('99000.00'))

    @mock.patch('backend.payments.simulator.FAILURE_RATE', -1)
    @mock.patch('backend.payments.simulator.requests.post')
    def test_simulation_succeeds(self, mock_post):
        response = self.client.post(SIMULATE_URL, {'invoice_number': 'INV-200', 'method': 'va_bni'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'success')
        self.assertTrue(response.data['va_number'].startswith('988'))
        self.assertEqual(len(response.data['va_number']), 13)
        sent = mock_post.call_args.kwargs['json']
        self.assertEqual(sent['order_id'], 'INV-200')
        self.assertEqual(sent['signature'], 'SIMULATED')
        self.assertTrue(AuditLog.objects.filter(action='payment_simulated').exists())

    def test_unknown_invoice(self):
        response = self.client.post(SIMULATE_URL, {'invoice_number': 'INV-404', 'method': 'qris'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_method(self):
        response = self.client.post(SIMULATE_URL, {'invoice_number': 'INV-200', 'method': 'cash'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(PAYMENT_SIMULATOR_ENABLED=False)
    def test_disabled_simulator_is_not_found(self):
        response = self.client.post(SIMULATE_URL, {'invoice_number': 'INV-200', 'method': 'qris'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invoice_status(self):
        response = self.client.get('/api/v1/payments/invoices/INV-200/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'unpaid')

    def test_notifications_require_admin(self):
        response = self.client.get('/api/v1/payments/notifications/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
