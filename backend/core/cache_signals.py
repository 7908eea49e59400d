"""
Cache invalidation signals
Automatically invalidate the public settings cache when settings change
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_public_settings
from .models import Setting

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver(post_save, sender=Setting)
@receiver(post_delete, sender=Setting)
def invalidate_settings_cache(sender, instance, **kwargs):
    """Drop cached public settings whenever a setting is written or removed"""
    if is_suspended():
        return
    logger.debug(f"Setting '{instance.key}' changed, invalidating public settings cache")
    invalidate_public_settings()
