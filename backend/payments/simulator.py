"""
Development payment simulator.

Walks one invoice through the hosted payment page flow without a real
gateway: pick a method, show a fake virtual account, pay. A successful
payment is reported to our own webhook exactly like the gateway would, with
the signature set to SIMULATED.

    pending --select/confirm--> showing_va --pay--> processing --> success
       ^                            |                         \--> failed
       '-------change_method--------'                 failed --reset--> pending

Only available when PAYMENT_SIMULATOR_ENABLED is on.
"""
import logging
import random
import time

from django.conf import settings
import requests

from .exceptions import InvalidTransition, SimulatorDisabled
from .signatures import SIMULATED_SIGNATURE

logger = logging.getLogger(__name__)

PAYMENT_METHODS = [
    {'id': 'va_bca', 'name': 'BCA Virtual Account'},
    {'id': 'va_bni', 'name': 'BNI Virtual Account'},
    {'id': 'va_mandiri', 'name': 'Mandiri Virtual Account'},
    {'id': 'qris', 'name': 'QRIS / GPN'},
    {'id': 'gopay', 'name': 'GoPay'},
    {'id': 'ovo', 'name': 'OVO Cash'},
    {'id': 'dana', 'name': 'DANA Wallet'},
]
PAYMENT_METHOD_IDS = [method['id'] for method in PAYMENT_METHODS]

PAYMENT_WINDOW_SECONDS = 300
PROCESSING_DELAY_SECONDS = 3
FAILURE_RATE = 0.05


def va_prefix(method_id):
    if 'bca' in method_id:
        return '80777'
    if 'bni' in method_id:
        return '988'
    return '100'


def generate_va_number(method_id, rng=random):
    digits = ''.join(str(rng.randint(0, 9)) for _ in range(10))
    return va_prefix(method_id) + digits


def format_countdown(seconds):
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


class PaymentSimulator:
    PENDING = 'pending'
    SHOWING_VA = 'showing_va'
    PROCESSING = 'processing'
    SUCCESS = 'success'
    FAILED = 'failed'

    def __init__(self, invoice_number, amount, order_number='', webhook_url=None, enabled=None,
                 sleep=None, rng=None, clock=None, processing_delay=PROCESSING_DELAY_SECONDS,
                 timeout=10):
        if enabled is None:
            enabled = getattr(settings, 'PAYMENT_SIMULATOR_ENABLED', False)
        if not enabled:
            raise SimulatorDisabled("Payment simulator is disabled")

        self.invoice_number = invoice_number
        self.order_number = order_number
        self.amount = amount
        self.webhook_url = webhook_url or f"{settings.API_BASE_URL.rstrip('/')}/webhooks/payment/"
        self.sleep = sleep or time.sleep
        self.rng = rng or random.Random()
        self.clock = clock or time.time
        self.processing_delay = processing_delay
        self.timeout = timeout

        self.state = self.PENDING
        self.selected_method = ''
        self.va_number = ''
        self.transaction_id = ''
        self.error = ''
        self.countdown = PAYMENT_WINDOW_SECONDS

    def _require(self, action, *states):
        if self.state not in states:
            raise InvalidTransition(action, self.state)

    def select_method(self, method_id):
        self._require('select a method', self.PENDING)
        if method_id not in PAYMENT_METHOD_IDS:
            raise ValueError(f"Unknown payment method: {method_id}")
        self.selected_method = method_id

    def confirm_selection(self):
        self._require('confirm a method', self.PENDING)
        if not self.selected_method:
            raise InvalidTransition('confirm without a method', self.state)
        self.va_number = generate_va_number(self.selected_method, self.rng)
        self.state = self.SHOWING_VA
        return self.va_number

    def change_method(self):
        self._require('change method', self.SHOWING_VA)
        self.state = self.PENDING

    def pay(self):
        """
        Simulate the customer paying. Blocks for the processing delay, then
        succeeds most of the time; success is only final once our webhook has
        accepted the notification.
        """
        self._require('pay', self.SHOWING_VA)
        self.state = self.PROCESSING
        self.sleep(self.processing_delay)

        if self.rng.random() <= FAILURE_RATE:
            logger.info(f"Simulated payment for {self.invoice_number} declined")
            self.error = 'Payment declined'
            self.state = self.FAILED
            return self.state

        self.transaction_id = f"SIM-{int(self.clock() * 1000)}"
        try:
            response = requests.post(self.webhook_url, json=self.webhook_payload(), timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Simulated webhook for {self.invoice_number} failed: {e}")
            self.error = 'Webhook delivery failed'
            self.state = self.FAILED
            return self.state

        logger.info(f"Simulated payment {self.transaction_id} for {self.invoice_number} succeeded")
        self.state = self.SUCCESS
        return self.state

    def webhook_payload(self):
        return {
            'transaction_id': self.transaction_id,
            'order_id': self.invoice_number,
            'status': 'success',
            'amount': str(self.amount),
            'signature': SIMULATED_SIGNATURE,
            'payment_type': self.selected_method,
        }

    def reset(self):
        """Manual retry after a failed payment"""
        self._require('retry', self.FAILED)
        self.error = ''
        self.transaction_id = ''
        self.state = self.PENDING

    def tick(self, seconds=1):
        """Advance the payment window countdown; it only runs before processing starts"""
        if self.state in (self.PENDING, self.SHOWING_VA) and self.countdown > 0:
            self.countdown = max(self.countdown - seconds, 0)
        return self.countdown

    @property
    def expired(self):
        return self.countdown == 0

    def to_dict(self):
        return {
            'invoice_number': self.invoice_number,
            'order_number': self.order_number,
            'amount': str(self.amount),
            'state': self.state,
            'method': self.selected_method,
            'va_number': self.va_number,
            'transaction_id': self.transaction_id,
            'countdown': format_countdown(self.countdown),
            'error': self.error,
        }
