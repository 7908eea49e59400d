"""
Comprehensive test suite for Core module
Tests: Auth, Settings (single, bulk, public, env fallbacks), Uploads, Audit Logs
"""
from io import BytesIO, StringIO
import os
import shutil
import tempfile
from unittest import mock

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.models import AuditLog, Setting
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.cache_utils import PUBLIC_SETTINGS_CACHE_KEY
from backend.core import utils


class AuthTests(TestCase):
    """Test JWT login and current user"""

    def setUp(self):
        self.user = TestDataFactory.create_admin(username='admin1', password='testpass123')
        self.client = APIClient()

    def test_login_returns_tokens(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'admin1', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'admin1', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'admin1', 'password': 'testpass123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'admin1')
        self.assertTrue(response.data['can_edit_theme'])

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class SettingTests(TestCase):
    """Test settings endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_requires_admin(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @override_settings(SETTINGS_ENV_FALLBACKS={'smtp_host': 'smtp.env.test', 'smtp_port': '', 'store_address': 'Jl. Env'})
    def test_list_includes_env_fallbacks(self):
        TestDataFactory.create_setting('store_address', 'Jl. Stored 1')
        response = self.client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        values = {item['key']: item['value'] for item in response.data}
        self.assertEqual(values['smtp_host'], 'smtp.env.test')
        self.assertEqual(values['store_address'], 'Jl. Stored 1')
        self.assertNotIn('smtp_port', values)

    def test_upsert_creates_then_updates(self):
        response = self.client.post('/api/v1/settings/', {'key': 'theme_logo', 'value': '/a.png'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['setting']['group'], 'theme')

        self.client.post('/api/v1/settings/', {'key': 'theme_logo', 'value': '/b.png'}, format='json')
        self.assertEqual(Setting.objects.filter(key='theme_logo').count(), 1)
        self.assertEqual(Setting.objects.get(key='theme_logo').value, '/b.png')

    def test_upsert_keeps_whitespace_and_empty_values(self):
        self.client.post('/api/v1/settings/', {'key': 'theme_custom_css', 'value': '  .a {}\n'}, format='json')
        self.assertEqual(Setting.objects.get(key='theme_custom_css').value, '  .a {}\n')
        self.client.post('/api/v1/settings/', {'key': 'theme_custom_css', 'value': ''}, format='json')
        self.assertEqual(Setting.objects.get(key='theme_custom_css').value, '')

    def test_upsert_rejects_blank_key(self):
        response = self.client.post('/api/v1/settings/', {'key': '  ', 'value': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_update(self):
        TestDataFactory.create_setting('theme_accent_color', '#e11d48')
        payload = [
            {'key': 'theme_accent_color', 'value': '#111111'},
            {'key': 'theme_bg_color', 'value': '#000000'},
        ]
        response = self.client.post('/api/v1/settings/bulk/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(Setting.objects.get(key='theme_accent_color').value, '#111111')
        self.assertEqual(Setting.objects.get(key='theme_bg_color').group, 'theme')

        log = AuditLog.objects.get(action='settings_bulk_update')
        self.assertEqual(log.user, self.admin)
        self.assertEqual(log.changes['theme_bg_color'], '#000000')

    def test_bulk_update_requires_list(self):
        response = self.client.post('/api/v1/settings/bulk/', {'key': 'theme_logo', 'value': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_update_invalid_item_writes_nothing(self):
        payload = [{'key': 'theme_logo', 'value': 'x'}, {'value': 'no key'}]
        response = self.client.post('/api/v1/settings/bulk/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Setting.objects.filter(key='theme_logo').exists())

    def test_bulk_upsert_is_atomic(self):
        real_upsert = utils.upsert_setting

        def failing_upsert(key, value, group=None):
            if key == 'theme_bg_color':
                raise RuntimeError('disk full')
            return real_upsert(key, value, group)

        items = [{'key': 'theme_accent_color', 'value': '#111111'}, {'key': 'theme_bg_color', 'value': '#000000'}]
        with mock.patch('backend.core.utils.upsert_setting', side_effect=failing_upsert):
            with self.assertRaises(RuntimeError):
                utils.bulk_upsert_settings(items)
        self.assertFalse(Setting.objects.filter(key='theme_accent_color').exists())

    def test_detail_update_and_delete(self):
        setting = TestDataFactory.create_setting('store_name', 'Old')
        response = self.client.patch(f'/api/v1/settings/{setting.id}/', {'value': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['value'], 'New')

        response = self.client.delete(f'/api/v1/settings/{setting.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Setting.objects.filter(pk=setting.id).exists())


class PublicSettingTests(TestCase):
    """Test public settings endpoint and its cache"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_only_safe_and_theme_keys(self):
        TestDataFactory.create_setting('store_name', 'Warung Forza')
        TestDataFactory.create_setting('theme_accent_color', '#111111')
        TestDataFactory.create_setting('smtp_password', 'secret')
        response = self.client.get('/api/v1/settings/public/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        keys = {item['key'] for item in response.data}
        self.assertEqual(keys, {'store_name', 'theme_accent_color'})

    def test_response_is_cached(self):
        TestDataFactory.create_setting('store_name', 'Warung Forza')
        self.client.get('/api/v1/settings/public/')
        self.assertIsNotNone(cache.get(PUBLIC_SETTINGS_CACHE_KEY))

    def test_write_invalidates_cache(self):
        setting = TestDataFactory.create_setting('store_name', 'Before')
        self.client.get('/api/v1/settings/public/')

        setting.value = 'After'
        setting.save()
        self.assertIsNone(cache.get(PUBLIC_SETTINGS_CACHE_KEY))
        response = self.client.get('/api/v1/settings/public/')
        self.assertEqual(response.data, [{'key': 'store_name', 'value': 'After'}])

    def test_bulk_update_invalidates_cache(self):
        self.client.get('/api/v1/settings/public/')
        admin_client = AuthenticatedAPIClient()
        admin_client.authenticate_user(TestDataFactory.create_admin())
        admin_client.post('/api/v1/settings/bulk/', [{'key': 'theme_logo', 'value': '/x.png'}], format='json')

        response = self.client.get('/api/v1/settings/public/')
        self.assertIn({'key': 'theme_logo', 'value': '/x.png'}, response.data)


class UploadTests(TestCase):
    """Test image upload endpoint"""

    def setUp(self):
        self.upload_root = tempfile.mkdtemp()
        self.override = override_settings(UPLOAD_ROOT=self.upload_root)
        self.override.enable()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.upload_root, ignore_errors=True)

    def make_png(self, name='logo.png'):
        buffer = BytesIO()
        Image.new('RGB', (8, 8), color=(225, 29, 72)).save(buffer, 'PNG')
        return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')

    def test_png_is_converted_to_webp(self):
        response = self.client.post('/api/v1/upload/', {'file': self.make_png()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        url = response.data['url']
        self.assertTrue(url.startswith('/uploads/'))
        self.assertTrue(url.endswith('-logo.webp'))
        stored = os.path.join(self.upload_root, url[len('/uploads/'):])
        with Image.open(stored) as img:
            self.assertEqual(img.format, 'WEBP')
        self.assertTrue(AuditLog.objects.filter(action='upload', object_name='logo.png').exists())

    def test_gif_is_stored_as_is(self):
        upload = SimpleUploadedFile('anim.gif', b'GIF89a-not-really', content_type='image/gif')
        response = self.client.post('/api/v1/upload/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['url'].endswith('-anim.gif'))

    def test_undecodable_jpg_falls_back_to_original(self):
        upload = SimpleUploadedFile('broken.jpg', b'not an image', content_type='image/jpeg')
        response = self.client.post('/api/v1/upload/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['url'].endswith('-broken.jpg'))

    def test_rejects_non_image(self):
        upload = SimpleUploadedFile('script.exe', b'MZ', content_type='application/octet-stream')
        response = self.client.post('/api/v1/upload/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_file(self):
        response = self.client.post('/api/v1/upload/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogTests(TestCase):
    """Test audit log endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        utils.create_audit_log(action='settings_bulk_update', model_name='Setting', object_id='bulk', user=self.admin)
        utils.create_audit_log(action='payment_webhook', model_name='Invoice', object_id=1,
                               object_name='INV-1', object_reference='ORD-77')

    def test_list(self):
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_filter_by_action(self):
        response = self.client.get('/api/v1/audit-logs/?action=payment_webhook')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['object_reference'], 'ORD-77')

    def test_filter_by_reference(self):
        response = self.client.get('/api/v1/audit-logs/?reference=ord-7')
        self.assertEqual(len(response.data), 1)

    def test_non_staff_sees_own_logs_only(self):
        user = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(user)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.data, [])

    def test_missing_required_fields_skips_log(self):
        self.assertIsNone(utils.create_audit_log(action='upload', model_name='Upload'))


class SeedSettingsCommandTests(TestCase):
    """Test seed_settings management command"""

    def test_seeds_missing_settings_only(self):
        TestDataFactory.create_setting('company_name', 'Already Set')
        call_command('seed_settings', stdout=StringIO())
        self.assertEqual(Setting.objects.get(key='company_name').value, 'Already Set')
        self.assertEqual(Setting.objects.get(key='bank_name').group, 'payment')
        self.assertFalse(Setting.objects.filter(key__startswith='theme_').exists())

    def test_theme_option(self):
        out = StringIO()
        call_command('seed_settings', '--theme', stdout=out)
        self.assertEqual(Setting.objects.get(key='theme_accent_color').value, '#e11d48')
        self.assertIn('Seeded', out.getvalue())
