"""
Seed the settings the admin expects to find editable.

Usage:
    python manage.py seed_settings
    python manage.py seed_settings --theme   # also store every theme default
"""
from django.core.management.base import BaseCommand

from backend.core.models import Setting
from backend.core.cache_utils import invalidate_public_settings
from backend.theme.tokens import DEFAULT_THEME

COMPANY_SETTINGS = [
    ('company_name', 'WARUNG FORZA SHOP', 'general'),
    ('company_tagline', 'Premium Collectibles Indonesia', 'general'),
    ('company_address', 'Jakarta, Indonesia', 'general'),
    ('company_email', 'info@warungforza.com', 'general'),
    ('company_phone', '+62 812-XXXX-XXXX', 'general'),
    ('bank_name', 'Bank Central Asia (BCA)', 'payment'),
    ('bank_account_number', '123-456-7890', 'payment'),
    ('bank_account_name', 'PT Warung Forza Indonesia', 'payment'),
    ('store_url', 'http://localhost:5173', 'general'),
]


class Command(BaseCommand):
    help = 'Create company, bank and (optionally) theme settings that do not exist yet'

    def add_arguments(self, parser):
        parser.add_argument('--theme', action='store_true', help='Also store the default theme tokens')

    def handle(self, *args, **options):
        items = list(COMPANY_SETTINGS)
        if options['theme']:
            items += [(key, value, 'theme') for key, value in DEFAULT_THEME.items()]

        created = 0
        for key, value, group in items:
            _, was_created = Setting.objects.get_or_create(key=key, defaults={'value': value, 'group': group})
            if was_created:
                created += 1
        invalidate_public_settings()

        self.stdout.write(self.style.SUCCESS(f"✅ Seeded {created} setting(s), {len(items) - created} already present"))
