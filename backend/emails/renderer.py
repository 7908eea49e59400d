"""
Email preview rendering.

Values resolve from the request overrides first (unsaved drafts in the admin
editor), then stored settings, then the built-in defaults.
"""
import logging

from django.utils import timezone

from backend.core.utils import get_setting
from .email_templates import (
    DEFAULT_ACCENT_COLOR, DEFAULT_EMAIL_TYPE, DEFAULT_SHOP_NAME, EMAIL_TYPES, GLOBAL_LAYOUT,
    apply_email_vars,
)

logger = logging.getLogger(__name__)

PREVIEW_VARS = {
    'customer_name': 'John Collector',
    'invoice_number': 'INV-2026-X123',
    'amount': 'Rp 1.500.000',
    'product_name': '1/4 Scale T-Rex Premium',
    'balance': 'Rp 3.000.000',
    'due_date': '12 Oct 2026',
    'order_number': 'ORD-9999',
    'refund_type': 'Store Wallet',
    'reason': 'Out of Stock Guarantee',
    'otp_code': '123456',
    'reset_link': '#',
}


def resolve_value(key, overrides, fallback):
    value = overrides.get(key)
    if value:
        return value
    return get_setting(key, fallback)


def render_email_preview(email_type=None, overrides=None):
    """
    Render a full preview email.

    Unknown types render the payment template. Returns (subject, html).
    """
    overrides = overrides or {}
    if email_type not in EMAIL_TYPES:
        if email_type:
            logger.debug(f"Unknown email type {email_type!r}, previewing {DEFAULT_EMAIL_TYPE}")
        email_type = DEFAULT_EMAIL_TYPE
    subject_key, default_subject, body_key, default_body = EMAIL_TYPES[email_type]

    shop_name = resolve_value('store_name', overrides, DEFAULT_SHOP_NAME)
    accent_color = resolve_value('theme_accent_color', overrides, DEFAULT_ACCENT_COLOR)
    identity = {
        'shop_name': shop_name,
        'accent_color': accent_color,
        'logo_url': resolve_value('email_tpl_logo_url', overrides, ''),
        'year': str(timezone.now().year),
    }
    variables = {
        **PREVIEW_VARS,
        'message': resolve_value(
            'email_tpl_deposit_message', overrides, 'Terima kasih! Pembayaran Anda telah dikonfirmasi.'
        ),
        'next_step': resolve_value('email_tpl_deposit_nextstep', overrides, 'Kami sedang mengemas pesanan Anda.'),
        **identity,
    }

    subject = apply_email_vars(resolve_value(subject_key, overrides, default_subject), identity)
    body = apply_email_vars(resolve_value(body_key, overrides, default_body), variables)
    layout = resolve_value('email_tpl_global_layout', overrides, GLOBAL_LAYOUT)
    html = apply_email_vars(layout, {**identity, 'subject': subject, 'body_content': body})
    return subject, html
