"""
Caching utilities for settings served to the storefront
Uses Redis (django-redis) when configured, local memory otherwise
"""
from django.core.cache import cache
from django.db.models import Q
import logging

from .models import Setting

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PUBLIC_SETTINGS_CACHE_TTL = 300  # 5 minutes

PUBLIC_SETTINGS_CACHE_KEY = 'settings:public'

# Non-theme keys the storefront may read without authentication
PUBLIC_SETTING_KEYS = [
    'store_name', 'store_url', 'currency', 'enable_bank_transfer', 'bank_account',
    'po_deposit_percentage', 'company_name', 'company_tagline', 'company_address',
    'company_email', 'company_phone', 'store_email', 'maintenance_mode',
    'bank_name', 'bank_account_number', 'bank_account_name',
]


def get_public_settings():
    """
    Return the public settings as a list of {key, value} dicts.

    Safe keys plus every theme_* key. Cached for PUBLIC_SETTINGS_CACHE_TTL.
    """
    data = cache.get(PUBLIC_SETTINGS_CACHE_KEY)
    if data is not None:
        logger.debug("Cache HIT for public settings")
        return data

    logger.debug("Cache MISS for public settings")
    queryset = Setting.objects.filter(
        Q(key__in=PUBLIC_SETTING_KEYS) | Q(key__startswith='theme_')
    ).order_by('key')
    data = [{'key': s.key, 'value': s.value} for s in queryset]
    cache.set(PUBLIC_SETTINGS_CACHE_KEY, data, PUBLIC_SETTINGS_CACHE_TTL)
    return data


def invalidate_public_settings():
    """Drop the cached public settings (call after any settings write)"""
    try:
        cache.delete(PUBLIC_SETTINGS_CACHE_KEY)
    except Exception as e:
        logger.warning(f"Failed to invalidate public settings cache: {e}")
