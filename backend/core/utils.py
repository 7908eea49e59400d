"""Utility functions for audit logging and settings storage"""
import logging

from django.conf import settings as django_settings
from django.db import transaction

from .cache_signals import suspend_cache_signals
from .cache_utils import invalidate_public_settings
from .models import AuditLog, Setting

logger = logging.getLogger(__name__)

# Key prefix -> Setting.group
SETTING_GROUP_PREFIXES = [
    ('theme_', 'theme'),
    ('email_tpl_', 'email'),
    ('smtp_', 'email'),
    ('prismalink_', 'payment'),
    ('payment_', 'payment'),
    ('biteship_', 'shipping'),
    ('shipping_', 'shipping'),
]


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (settings_bulk_update, upload, payment_webhook, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., setting key, file name)
        object_reference: Reference identifier (e.g., invoice number)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def infer_setting_group(key):
    """Guess the Setting.group for a key from its prefix"""
    for prefix, group in SETTING_GROUP_PREFIXES:
        if key.startswith(prefix):
            return group
    return 'general'


def get_setting(key, fallback=''):
    """Return the stored value for key, or fallback when missing or empty"""
    value = Setting.objects.filter(key=key).values_list('value', flat=True).first()
    if value:
        return value
    return fallback


def upsert_setting(key, value, group=None):
    """Create or update a single setting by key. Returns (setting, created)."""
    setting, created = Setting.objects.get_or_create(
        key=key,
        defaults={'value': value, 'group': group or infer_setting_group(key)}
    )
    if not created:
        setting.value = value
        if group:
            setting.group = group
        setting.save(update_fields=['value', 'group', 'updated_at'])
    return setting, created


def bulk_upsert_settings(items):
    """
    Save or update many settings in one transaction.

    items: iterable of dicts with 'key', 'value' and optional 'group'.
    Either every item is written or none is.

    Returns a dict with the created and updated keys.
    """
    created_keys = []
    updated_keys = []
    with suspend_cache_signals():
        with transaction.atomic():
            for item in items:
                _, created = upsert_setting(item['key'], item.get('value', ''), item.get('group'))
                (created_keys if created else updated_keys).append(item['key'])
    invalidate_public_settings()
    return {'created': created_keys, 'updated': updated_keys}


def get_env_setting_fallbacks():
    """Settings that may come from the environment when missing in the database"""
    return {
        key: value
        for key, value in getattr(django_settings, 'SETTINGS_ENV_FALLBACKS', {}).items()
        if value
    }
