"""
Test suite for email previews
Tests: template resolution order, placeholder filling, layout wrapping, preview endpoint
"""
from django.test import SimpleTestCase, TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .email_templates import apply_email_vars
from .renderer import render_email_preview


class ApplyEmailVarsTests(SimpleTestCase):

    def test_replaces_known_placeholders_only(self):
        result = apply_email_vars('Hi {{name}}, {{unknown}}', {'name': 'Ana'})
        self.assertEqual(result, 'Hi Ana, {{unknown}}')

    def test_repeated_placeholders(self):
        self.assertEqual(apply_email_vars('{{a}}-{{a}}', {'a': 1}), '1-1')


class RenderEmailPreviewTests(TestCase):

    def test_default_payment_preview(self):
        subject, html = render_email_preview('payment')
        self.assertEqual(subject, 'Konfirmasi Pembayaran - Warung Forza')
        self.assertIn('<title>Konfirmasi Pembayaran - Warung Forza</title>', html)
        self.assertIn('INV-2026-X123', html)
        self.assertIn('#e11d48', html)
        self.assertNotIn('{{', html)

    def test_unknown_type_falls_back_to_payment(self):
        _, html = render_email_preview('nope')
        self.assertIn('INV-2026-X123', html)

    def test_stored_setting_beats_default(self):
        TestDataFactory.create_setting('store_name', 'Toko Figur', group='general')
        TestDataFactory.create_setting('email_tpl_refund', '<p>Refund {{order_number}}</p>', group='email')
        subject, html = render_email_preview('refund')
        self.assertEqual(subject, 'Konfirmasi Refund - Toko Figur')
        self.assertIn('<p>Refund ORD-9999</p>', html)

    def test_override_beats_stored_setting(self):
        TestDataFactory.create_setting('theme_accent_color', '#00ff00', group='theme')
        _, html = render_email_preview('otp', {'theme_accent_color': '#0000ff'})
        self.assertIn('#0000ff', html)
        self.assertNotIn('#00ff00', html)
        self.assertIn('123456', html)

    def test_empty_override_is_ignored(self):
        TestDataFactory.create_setting('store_name', 'Toko Figur', group='general')
        subject, _ = render_email_preview('reset_password', {'store_name': ''})
        self.assertEqual(subject, 'Reset Password - Toko Figur')


class EmailPreviewAPITests(TestCase):
    """Test email preview endpoint"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_preview_returns_html(self):
        response = self.client.post(
            '/api/v1/settings/email-preview/',
            {'type': 'po_arrival', 'overrides': {'email_tpl_po_arrival': '<p>{{product_name}} tiba</p>'}},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/html'))
        self.assertIn(b'1/4 Scale T-Rex Premium tiba', response.content)

    def test_preview_requires_admin(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.post('/api/v1/settings/email-preview/', {'type': 'payment'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
