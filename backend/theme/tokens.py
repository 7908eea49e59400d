"""
Theme token table and merge rules.

A theme is a flat mapping of `theme_<area>_<property>` keys to string values
(colors, CSS lengths, font stacks, or raw HTML/CSS). Every key in
DEFAULT_THEME always resolves to a value: backend records only override it
when they carry a non-empty value.
"""

THEME_KEY_PREFIX = 'theme_'

DEFAULT_THEME = {
    # Hero / Landing
    'theme_hero_title': 'Discover the Best Collectibles at Warung Forza',
    'theme_hero_subtitle': "Curating the most detailed and rare specimens from the world's leading artisans. Your gateway to the ultimate collection.",
    'theme_hero_image': '/images/horror-hero.jpg',
    'theme_logo': '/forza.png',

    # Core Brand
    'theme_accent_color': '#e11d48',
    'theme_accent_hover': '#be123c',
    'theme_accent_muted': 'rgba(225,29,72,0.15)',

    # Page Layout
    'theme_bg_color': '#030303',
    'theme_surface_color': '#0d0d0d',
    'theme_surface_2': '#111118',
    'theme_border_color': 'rgba(255,255,255,0.08)',
    'theme_border_strong': 'rgba(255,255,255,0.15)',

    # Text
    'theme_text_primary': '#ffffff',
    'theme_text_secondary': '#9ca3af',
    'theme_text_muted': '#6b7280',
    'theme_text_accent': '#e11d48',

    # Navbar
    'theme_navbar_bg': 'rgba(3,3,3,0.80)',
    'theme_navbar_text': 'rgba(255,255,255,0.5)',
    'theme_navbar_text_hover': '#ffffff',
    'theme_navbar_border': 'rgba(255,255,255,0.05)',

    # Buttons
    'theme_btn_primary_bg': '#e11d48',
    'theme_btn_primary_text': '#ffffff',
    'theme_btn_primary_hover': '#be123c',
    'theme_btn_secondary_bg': 'rgba(255,255,255,0.1)',
    'theme_btn_secondary_text': '#ffffff',
    'theme_btn_secondary_hover': 'rgba(255,255,255,0.2)',
    'theme_btn_radius': '4px',

    # Product Cards
    'theme_card_bg': 'rgba(255,255,255,0.03)',
    'theme_card_border': 'rgba(255,255,255,0.08)',
    'theme_card_radius': '12px',
    'theme_card_hover_border': 'rgba(225,29,72,0.3)',
    'theme_card_price_color': '#e11d48',
    'theme_card_title_color': '#ffffff',
    'theme_card_brand_color': '#6b7280',

    # Blog / News Cards
    'theme_blog_card_bg': '#0a0a0b',
    'theme_blog_card_border': 'rgba(255,255,255,0.05)',
    'theme_blog_card_radius': '8px',
    'theme_blog_card_hover_border': 'rgba(225,29,72,0.3)',
    'theme_blog_tag_color': '#d4af37',
    'theme_blog_tag_bg': 'rgba(212,175,55,0.1)',
    'theme_blog_title_color': '#ffffff',
    'theme_blog_title_hover': '#e11d48',
    'theme_blog_text_color': '#9ca3af',
    'theme_blog_date_color': 'rgba(255,255,255,0.4)',
    'theme_blog_section_bg': '#030303',

    # Shop / Listing Page
    'theme_shop_filter_bg': 'rgba(255,255,255,0.03)',
    'theme_shop_filter_border': 'rgba(255,255,255,0.06)',
    'theme_shop_filter_text': '#9ca3af',
    'theme_shop_filter_active_bg': '#e11d48',
    'theme_shop_filter_active_text': '#ffffff',
    'theme_shop_section_bg': '#030303',
    'theme_shop_section_heading': '#ffffff',
    'theme_shop_label_color': '#e11d48',

    # Product Detail Page
    'theme_detail_bg': '#030303',
    'theme_detail_panel_bg': 'rgba(255,255,255,0.02)',
    'theme_detail_panel_border': 'rgba(255,255,255,0.06)',
    'theme_detail_price_color': '#e11d48',
    'theme_detail_title_color': '#ffffff',
    'theme_detail_text_color': '#9ca3af',
    'theme_detail_tab_active': '#e11d48',
    'theme_detail_tab_bg': 'rgba(255,255,255,0.04)',

    # Forms & Inputs
    'theme_input_bg': 'rgba(255,255,255,0.04)',
    'theme_input_border': 'rgba(255,255,255,0.1)',
    'theme_input_text': '#ffffff',
    'theme_input_placeholder': '#6b7280',
    'theme_input_focus_border': '#e11d48',
    'theme_input_radius': '8px',
    'theme_label_color': '#9ca3af',

    # Section Headers
    'theme_section_label_color': '#e11d48',
    'theme_section_heading_color': '#ffffff',
    'theme_section_subtext_color': '#6b7280',
    'theme_section_divider': 'rgba(255,255,255,0.05)',
    'theme_section_bg_alt': 'rgba(255,255,255,0.01)',

    # Footer
    'theme_footer_bg': '#030303',
    'theme_footer_text': '#6b7280',
    'theme_footer_heading': '#ffffff',
    'theme_footer_link': '#6b7280',
    'theme_footer_link_hover': '#ffffff',
    'theme_footer_border': 'rgba(255,255,255,0.05)',

    # Jurassic Series Banner
    'theme_jurassic_label': 'The Lost World Collection',
    'theme_jurassic_title': 'Explore Our<br/>Jurassic Series<br/>Prime Figures!',
    'theme_jurassic_desc': 'Unleash the prehistoric adventure with our premium Jurassic series collections. Masterfully crafted statues for the true enthusiast.',
    'theme_jurassic_btn': 'Get Yours Now',
    'theme_jurassic_bg': '/images/jurassic-bg.jpg',
    'theme_jurassic_img1': '',
    'theme_jurassic_img2': '',

    # Typography
    'theme_font_primary': 'Inter, sans-serif',
    'theme_font_heading': 'Inter, sans-serif',

    # Badge / Status Colors
    'theme_badge_success': '#10b981',
    'theme_badge_warning': '#f59e0b',
    'theme_badge_error': '#ef4444',
    'theme_badge_info': '#3b82f6',

    # Custom CSS
    'theme_custom_css': '',
}

# Token key -> CSS custom property on the document root
CSS_VARIABLES = {
    # Core Brand
    'theme_accent_color': '--accent',
    'theme_accent_hover': '--accent-hover',
    'theme_accent_muted': '--accent-muted',
    # Page
    'theme_bg_color': '--bg',
    'theme_surface_color': '--surface',
    'theme_surface_2': '--surface-2',
    'theme_border_color': '--border',
    'theme_border_strong': '--border-strong',
    # Text
    'theme_text_primary': '--text-primary',
    'theme_text_secondary': '--text-secondary',
    'theme_text_muted': '--text-muted',
    'theme_text_accent': '--text-accent',
    # Navbar
    'theme_navbar_bg': '--navbar-bg',
    'theme_navbar_text': '--navbar-text',
    'theme_navbar_text_hover': '--navbar-text-hover',
    'theme_navbar_border': '--navbar-border',
    # Buttons
    'theme_btn_primary_bg': '--btn-primary-bg',
    'theme_btn_primary_text': '--btn-primary-text',
    'theme_btn_primary_hover': '--btn-primary-hover',
    'theme_btn_secondary_bg': '--btn-secondary-bg',
    'theme_btn_secondary_text': '--btn-secondary-text',
    'theme_btn_secondary_hover': '--btn-secondary-hover',
    'theme_btn_radius': '--btn-radius',
    # Product Cards
    'theme_card_bg': '--card-bg',
    'theme_card_border': '--card-border',
    'theme_card_radius': '--card-radius',
    'theme_card_hover_border': '--card-hover-border',
    'theme_card_price_color': '--card-price-color',
    'theme_card_title_color': '--card-title-color',
    'theme_card_brand_color': '--card-brand-color',
    # Blog Cards
    'theme_blog_card_bg': '--blog-card-bg',
    'theme_blog_card_border': '--blog-card-border',
    'theme_blog_card_radius': '--blog-card-radius',
    'theme_blog_card_hover_border': '--blog-card-hover-border',
    'theme_blog_tag_color': '--blog-tag-color',
    'theme_blog_tag_bg': '--blog-tag-bg',
    'theme_blog_title_color': '--blog-title-color',
    'theme_blog_title_hover': '--blog-title-hover',
    'theme_blog_text_color': '--blog-text-color',
    'theme_blog_date_color': '--blog-date-color',
    'theme_blog_section_bg': '--blog-section-bg',
    # Shop
    'theme_shop_filter_bg': '--shop-filter-bg',
    'theme_shop_filter_border': '--shop-filter-border',
    'theme_shop_filter_text': '--shop-filter-text',
    'theme_shop_filter_active_bg': '--shop-filter-active-bg',
    'theme_shop_filter_active_text': '--shop-filter-active-text',
    'theme_shop_section_bg': '--shop-section-bg',
    'theme_shop_section_heading': '--shop-section-heading',
    'theme_shop_label_color': '--shop-label-color',
    # Product Detail
    'theme_detail_bg': '--detail-bg',
    'theme_detail_panel_bg': '--detail-panel-bg',
    'theme_detail_panel_border': '--detail-panel-border',
    'theme_detail_price_color': '--detail-price-color',
    'theme_detail_title_color': '--detail-title-color',
    'theme_detail_text_color': '--detail-text-color',
    'theme_detail_tab_active': '--detail-tab-active',
    'theme_detail_tab_bg': '--detail-tab-bg',
    # Forms
    'theme_input_bg': '--input-bg',
    'theme_input_border': '--input-border',
    'theme_input_text': '--input-text',
    'theme_input_placeholder': '--input-placeholder',
    'theme_input_focus_border': '--input-focus-border',
    'theme_input_radius': '--input-radius',
    'theme_label_color': '--label-color',
    # Sections
    'theme_section_label_color': '--section-label-color',
    'theme_section_heading_color': '--section-heading-color',
    'theme_section_subtext_color': '--section-subtext-color',
    'theme_section_divider': '--section-divider',
    'theme_section_bg_alt': '--section-bg-alt',
    # Footer
    'theme_footer_bg': '--footer-bg',
    'theme_footer_text': '--footer-text',
    'theme_footer_heading': '--footer-heading',
    'theme_footer_link': '--footer-link',
    'theme_footer_link_hover': '--footer-link-hover',
    'theme_footer_border': '--footer-border',
    # Typography
    'theme_font_primary': '--font-primary',
    'theme_font_heading': '--font-heading',
    # Badges
    'theme_badge_success': '--badge-success',
    'theme_badge_warning': '--badge-warning',
    'theme_badge_error': '--badge-error',
    'theme_badge_info': '--badge-info',
}

CUSTOM_CSS_KEY = 'theme_custom_css'

# User-authored copy that switching presets must never overwrite
PRESERVED_CONTENT_KEYS = (
    'theme_hero_title',
    'theme_hero_subtitle',
    'theme_hero_image',
    'theme_logo',
    'theme_custom_css',
)


def records_to_mapping(records):
    """Turn a list of {key, value} records into a dict (later records win)"""
    mapping = {}
    for record in records or []:
        key = record.get('key') if isinstance(record, dict) else None
        if key:
            mapping[key] = record.get('value')
    return mapping


def merge_settings(records, defaults=None):
    """
    Build a complete token mapping from backend settings records.

    Only keys of the default table are taken from the records, and only when
    the stored value is non-empty; everything else keeps its default.

    Args:
        records: list of {'key': ..., 'value': ...} dicts
        defaults: default table (DEFAULT_THEME when omitted)

    Returns:
        A new dict with exactly the keys of the default table.
    """
    defaults = DEFAULT_THEME if defaults is None else defaults
    stored = records_to_mapping(records)
    merged = dict(defaults)
    for key in defaults:
        value = stored.get(key)
        if value:
            merged[key] = value
    return merged


def split_public_settings(records):
    """
    Split public settings into (theme, other_settings).

    theme_* records with a value are laid over DEFAULT_THEME; any other record
    goes to the plain settings mapping as-is.
    """
    theme = dict(DEFAULT_THEME)
    other = {}
    for record in records or []:
        key = record.get('key')
        value = record.get('value')
        if not key:
            continue
        if key.startswith(THEME_KEY_PREFIX):
            if value:
                theme[key] = value
        else:
            other[key] = value
    return theme, other


def dirty_keys(draft, baseline):
    """Keys whose draft value differs from the baseline, in draft order"""
    return [key for key in draft if draft[key] != baseline.get(key)]
