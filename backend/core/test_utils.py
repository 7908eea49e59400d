"""
Test utilities and factories for creating test data
"""
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from backend.core.models import Setting
from backend.core.utils import infer_setting_group
from backend.payments.models import Invoice

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_admin(username=None, password='testpass123'):
        """Create a staff user allowed into the back-office"""
        return TestDataFactory.create_user(username=username, password=password, is_staff=True)

    @staticmethod
    def create_setting(key=None, value='', group=None, description=''):
        """Create a test setting"""
        if not key:
            key = f'setting_{TestDataFactory.random_string(6).lower()}'
        return Setting.objects.create(
            key=key,
            value=value,
            group=group or infer_setting_group(key),
            description=description
        )

    @staticmethod
    def create_invoice(invoice_number=None, order_number='', amount=None, status='unpaid'):
        """Create a test invoice"""
        if not invoice_number:
            invoice_number = f'INV-{TestDataFactory.random_string(8).upper()}'
        return Invoice.objects.create(
            invoice_number=invoice_number,
            order_number=order_number,
            amount=amount if amount is not None else Decimal('250000.00'),
            status=status
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
