"""
One-click theme presets.

A preset only carries color and typography tokens. Content tokens (logo, hero
copy, custom CSS) are never part of a preset and are preserved when one is
applied, see ThemeEditor.apply_preset.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .tokens import DEFAULT_THEME, PRESERVED_CONTENT_KEYS


@dataclass(frozen=True)
class Preset:
    name: str
    emoji: str
    type: str  # 'dark' or 'light'
    colors: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self):
        return {
            'name': self.name,
            'emoji': self.emoji,
            'type': self.type,
            'colors': dict(self.colors),
        }


def generate_preset(name, emoji, type, primary, primary_hover, bg, surface, nav_bg, font=None) -> Preset:
    """Derive a complete color/typography preset from a handful of brand colors"""
    is_dark = type == 'dark'
    text_primary = '#ffffff' if is_dark else '#111827'
    text_secondary = '#9ca3af' if is_dark else '#4b5563'
    text_muted = '#6b7280' if is_dark else '#9ca3af'

    border = 'rgba(255,255,255,0.08)' if is_dark else 'rgba(0,0,0,0.08)'
    border_strong = 'rgba(255,255,255,0.15)' if is_dark else 'rgba(0,0,0,0.2)'
    font = font or "'Outfit', sans-serif"

    colors = {
        'theme_accent_color': primary,
        'theme_accent_hover': primary_hover,
        'theme_accent_muted': 'rgba(255,255,255,0.05)' if is_dark else 'rgba(0,0,0,0.05)',
        'theme_bg_color': bg,
        'theme_surface_color': surface,
        'theme_surface_2': surface,
        'theme_border_color': border,
        'theme_border_strong': border_strong,

        'theme_text_primary': text_primary,
        'theme_text_secondary': text_secondary,
        'theme_text_muted': text_muted,
        'theme_text_accent': primary,

        'theme_navbar_bg': nav_bg,
        'theme_navbar_text': text_secondary,
        'theme_navbar_text_hover': text_primary,
        'theme_navbar_border': border,

        'theme_btn_primary_bg': primary,
        'theme_btn_primary_text': '#ffffff',
        'theme_btn_primary_hover': primary_hover,
        'theme_btn_secondary_bg': 'rgba(255,255,255,0.1)' if is_dark else '#f3f4f6',
        'theme_btn_secondary_text': text_primary,
        'theme_btn_secondary_hover': 'rgba(255,255,255,0.2)' if is_dark else '#e5e7eb',
        'theme_btn_radius': '8px',

        'theme_card_bg': surface,
        'theme_card_border': border,
        'theme_card_radius': '12px',
        'theme_card_hover_border': primary_hover,
        'theme_card_price_color': primary,
        'theme_card_title_color': text_primary,
        'theme_card_brand_color': text_secondary,

        'theme_blog_card_bg': surface,
        'theme_blog_card_border': border,
        'theme_blog_card_radius': '12px',
        'theme_blog_card_hover_border': primary_hover,
        'theme_blog_tag_color': primary_hover,
        'theme_blog_tag_bg': 'rgba(255,255,255,0.1)' if is_dark else 'rgba(0,0,0,0.05)',
        'theme_blog_title_color': text_primary,
        'theme_blog_title_hover': primary,
        'theme_blog_text_color': text_secondary,
        'theme_blog_date_color': text_muted,
        'theme_blog_section_bg': bg,

        'theme_shop_filter_bg': surface,
        'theme_shop_filter_border': border,
        'theme_shop_filter_text': text_secondary,
        'theme_shop_filter_active_bg': primary,
        'theme_shop_filter_active_text': '#ffffff',
        'theme_shop_section_bg': bg,
        'theme_shop_section_heading': text_primary,
        'theme_shop_label_color': primary_hover,

        'theme_detail_bg': bg,
        'theme_detail_panel_bg': surface,
        'theme_detail_panel_border': border,
        'theme_detail_price_color': primary,
        'theme_detail_title_color': text_primary,
        'theme_detail_text_color': text_secondary,
        'theme_detail_tab_active': primary,
        'theme_detail_tab_bg': border_strong,

        'theme_input_bg': 'rgba(0,0,0,0.3)' if is_dark else '#ffffff',
        'theme_input_border': border_strong,
        'theme_input_text': text_primary,
        'theme_input_placeholder': text_muted,
        'theme_input_focus_border': primary,
        'theme_input_radius': '8px',
        'theme_label_color': text_secondary,

        'theme_section_label_color': primary_hover,
        'theme_section_heading_color': text_primary,
        'theme_section_subtext_color': text_secondary,
        'theme_section_divider': border,
        'theme_section_bg_alt': surface,

        'theme_footer_bg': bg,
        'theme_footer_text': text_secondary,
        'theme_footer_heading': text_primary,
        'theme_footer_link': text_secondary,
        'theme_footer_link_hover': text_primary,
        'theme_footer_border': border,

        'theme_font_primary': font,
        'theme_font_heading': font,

        'theme_badge_success': '#10b981',
        'theme_badge_warning': '#f59e0b',
        'theme_badge_error': '#ef4444',
        'theme_badge_info': '#3b82f6',
    }
    return Preset(name=name, emoji=emoji, type=type, colors=MappingProxyType(colors))


PRESETS = (
    generate_preset('Midnight Rose', '🌹', 'dark', '#e11d48', '#be123c', '#030303', '#0d0d0d', 'rgba(3,3,3,0.92)'),
    generate_preset('Ocean Deep', '🌊', 'dark', '#0ea5e9', '#0284c7', '#020c18', '#041020', 'rgba(2,12,24,0.92)'),
    generate_preset('Forest Dark', '🌲', 'dark', '#10b981', '#059669', '#030a06', '#050f09', 'rgba(3,10,6,0.92)'),
    generate_preset('Gold Rush', '✨', 'dark', '#f59e0b', '#d97706', '#0a0804', '#120f06', 'rgba(10,8,4,0.92)', "'Playfair Display', serif"),
    generate_preset('Violet Storm', '⚡', 'dark', '#8b5cf6', '#7c3aed', '#05030f', '#090618', 'rgba(5,3,15,0.92)'),
    generate_preset('Pure Light', '☀️', 'light', '#6366f1', '#4f46e5', '#f8fafc', '#ffffff', 'rgba(248,250,252,0.95)', "'Inter', sans-serif"),
    generate_preset('Neon Tokyo', '🏙️', 'dark', '#f0abfc', '#e879f9', '#020008', '#0a0015', 'rgba(2,0,8,0.95)', "'Space Grotesk', sans-serif"),
    generate_preset('Crimson Light', '🎭', 'light', '#dc2626', '#b91c1c', '#fff1f2', '#ffffff', 'rgba(255,241,242,0.95)'),
    generate_preset('Minimalist White', '⚪️', 'light', '#111827', '#000000', '#ffffff', '#fcfcfc', 'rgba(255,255,255,0.95)', "'Plus Jakarta Sans', sans-serif"),
)

RADIUS_OPTIONS = [
    {'value': '0px', 'label': 'Square'},
    {'value': '2px', 'label': 'Micro'},
    {'value': '4px', 'label': 'Sharp'},
    {'value': '8px', 'label': 'Rounded'},
    {'value': '12px', 'label': 'Soft'},
    {'value': '16px', 'label': 'Smooth'},
    {'value': '24px', 'label': 'Pill'},
    {'value': '9999px', 'label': 'Full'},
]

FONT_OPTIONS = [
    {'value': "'Outfit', sans-serif", 'label': 'Outfit'},
    {'value': "'Inter', sans-serif", 'label': 'Inter'},
    {'value': "'Plus Jakarta Sans', sans-serif", 'label': 'Plus Jakarta Sans'},
    {'value': "'DM Sans', sans-serif", 'label': 'DM Sans'},
    {'value': "'Space Grotesk', sans-serif", 'label': 'Space Grotesk'},
    {'value': "'Poppins', sans-serif", 'label': 'Poppins'},
    {'value': "'Syne', sans-serif", 'label': 'Syne (Display)'},
    {'value': "'Bebas Neue', cursive", 'label': 'Bebas Neue'},
    {'value': "'Playfair Display', serif", 'label': 'Playfair Display'},
    {'value': 'Georgia, serif', 'label': 'Georgia (Serif)'},
]


def get_preset(name) -> Optional[Preset]:
    for preset in PRESETS:
        if preset.name == name:
            return preset
    return None


def merge_preset(draft, preset):
    """
    Lay a preset over a draft: defaults, then the draft, then the preset's
    colors, then the preserved content keys taken from the draft (last, so
    they always win).
    """
    preserved = {key: draft.get(key, DEFAULT_THEME.get(key, '')) for key in PRESERVED_CONTENT_KEYS}
    return {**DEFAULT_THEME, **draft, **preset.colors, **preserved}
