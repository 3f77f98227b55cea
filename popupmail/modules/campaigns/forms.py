"""
Campaign Form
=============

Defaults, allowed values and parsing of the campaign editor form.
"""

import re

STATUSES = ['DRAFT', 'ACTIVE', 'PAUSED']

TRIGGER_PAGES = [
    ('all', 'All pages'),
    ('homepage', 'Homepage only'),
    ('products', 'Product pages'),
    ('collections', 'Collection pages'),
]

IMAGE_POSITIONS = [('left', 'Left'), ('right', 'Right')]
MOBILE_IMAGE_POSITIONS = [('top', 'Top'), ('bottom', 'Bottom'), ('hidden', 'Hidden')]

DISCOUNT_TYPES = [
    ('none', 'No discount'),
    ('existing', 'Use existing code'),
    ('auto', 'Auto-generate code'),
]

BUTTON_STYLES = [('filled', 'Filled'), ('outline', 'Outline'), ('text', 'Text Only')]
CLOSE_BUTTON_STYLES = [('circle', 'Circle'), ('square', 'Square'), ('x', 'X only')]

FONT_FAMILIES = [
    ('inherit', 'Inherit from theme'),
    ("'Space Grotesk', sans-serif", 'Space Grotesk'),
    ("'Playfair Display', serif", 'Playfair Display'),
    ("'Montserrat', sans-serif", 'Montserrat'),
    ("'Roboto', sans-serif", 'Roboto'),
]

# Defaults for a new campaign (also used for missing/invalid form values)
CAMPAIGN_DEFAULTS = {
    'title': '',
    'status': 'DRAFT',
    'trigger_delay': 3,
    'trigger_pages': 'all',
    'trigger_url_param': '',
    'show_to_members': False,
    'redisplay_after_days': 7,
    'prevent_duplicates': True,
    'desktop_image': None,
    'mobile_image': None,
    'image_position': 'left',
    'mobile_image_position': 'top',
    'hide_image_on_mobile': False,
    'image_ratio': 40,
    'welcome_title': 'GET 10% OFF',
    'welcome_subtitle': 'Sign up to our newsletter and unlock your exclusive discount.',
    'welcome_button_text': 'CLAIM OFFER',
    'form_title': 'UNLOCK YOUR DISCOUNT',
    'form_subtitle': 'Enter your details below.',
    'show_email_field': True,
    'email_required': True,
    'email_placeholder': 'Email Address',
    'show_phone_field': False,
    'phone_required': False,
    'phone_placeholder': 'Phone Number',
    'form_button_text': 'SIGN UP',
    'success_title': "YOU'RE IN!",
    'success_subtitle': 'Here is your discount code:',
    'success_btn1_text': 'CONTINUE',
    'success_btn1_link': '',
    'success_btn2_text': '',
    'success_btn2_link': '',
    'discount_type': 'none',
    'discount_code': None,
    'discount_value': 10,
    'background_color': '#1a1a1a',
    'text_color': '#ffffff',
    'button_text_color': '#ffffff',
    'accent_color': '#d4a017',
    'overlay_color': 'rgba(0,0,0,0.7)',
    'input_border_color': '#cccccc',
    'border_radius': 16,
    'button_style': 'filled',
    'close_button_style': 'circle',
    'no_thanks_text': 'No thanks',
    'font_family': 'inherit',
    'title_font_size': 40,
    'subtitle_font_size': 18,
    'button_font_size': 16,
    'title_font_size_mobile': 24,
    'subtitle_font_size_mobile': 14,
    'button_font_size_mobile': 14,
}

BOOLEAN_FIELDS = [
    'show_to_members', 'prevent_duplicates', 'hide_image_on_mobile',
    'show_email_field', 'email_required', 'show_phone_field', 'phone_required',
]

# (min, max) for numeric fields; None means unbounded on that side
INTEGER_RANGES = {
    'trigger_delay': (0, 600),
    'redisplay_after_days': (0, 365),
    'image_ratio': (20, 60),
    'discount_value': (1, 100),
    'border_radius': (0, 32),
    'title_font_size': (20, 80),
    'subtitle_font_size': (12, 40),
    'button_font_size': (12, 30),
    'title_font_size_mobile': (16, 40),
    'subtitle_font_size_mobile': (10, 24),
    'button_font_size_mobile': (10, 24),
}

CHOICE_FIELDS = {
    'status': STATUSES,
    'trigger_pages': [value for value, _ in TRIGGER_PAGES],
    'image_position': [value for value, _ in IMAGE_POSITIONS],
    'mobile_image_position': [value for value, _ in MOBILE_IMAGE_POSITIONS],
    'discount_type': [value for value, _ in DISCOUNT_TYPES],
    'button_style': [value for value, _ in BUTTON_STYLES],
    'close_button_style': [value for value, _ in CLOSE_BUTTON_STYLES],
    'font_family': [value for value, _ in FONT_FAMILIES],
}

# Text fields stored as NULL when left blank
NULLABLE_FIELDS = ['desktop_image', 'mobile_image', 'discount_code']

# Text fields the merchant may clear on purpose
BLANKABLE_FIELDS = [
    'trigger_url_param', 'welcome_subtitle', 'form_subtitle', 'success_subtitle',
    'success_btn1_link', 'success_btn2_text', 'success_btn2_link',
]

EDITABLE_FIELDS = list(CAMPAIGN_DEFAULTS.keys())


def generate_url_param(title):
    """Build the default URL trigger (memberspace=<slug>) from a campaign title"""
    slug = re.sub(r'[^a-z0-9]+', '-', (title or '').lower())
    slug = slug.strip('-')[:20]
    return f"memberspace={slug or 'popup'}"


def _parse_int(raw, field):
    default = CAMPAIGN_DEFAULTS[field]
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    low, high = INTEGER_RANGES[field]
    if low is not None and value < low:
        value = low
    if high is not None and value > high:
        value = high
    return value


def parse_campaign_form(form, shop):
    """
    Turn submitted editor fields into a validated campaign dict.

    Checkboxes count as set only for the literal string "true". Integers are
    clamped to their editor ranges, choices outside the allowed set and blank
    text fields fall back to the defaults.
    """
    data = {'shop': shop}

    for field in EDITABLE_FIELDS:
        raw = form.get(field)

        if field in BOOLEAN_FIELDS:
            data[field] = raw == 'true'
        elif field in INTEGER_RANGES:
            data[field] = _parse_int(raw, field)
        elif field in CHOICE_FIELDS:
            data[field] = raw if raw in CHOICE_FIELDS[field] else CAMPAIGN_DEFAULTS[field]
        elif field in NULLABLE_FIELDS:
            data[field] = raw.strip() if raw and raw.strip() else None
        elif field in BLANKABLE_FIELDS:
            data[field] = raw.strip() if isinstance(raw, str) else ''
        else:
            value = raw.strip() if isinstance(raw, str) else ''
            data[field] = value or CAMPAIGN_DEFAULTS[field]

    data['title'] = data['title'] or 'Untitled Campaign'
    if not data['trigger_url_param']:
        data['trigger_url_param'] = generate_url_param(data['title'])

    return data
