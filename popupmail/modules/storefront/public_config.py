"""
Shape a stored campaign into the JSON document the storefront script renders.
"""


def _form_fields(campaign):
    fields = []
    if campaign.get('show_email_field'):
        fields.append({
            'type': 'email',
            'name': 'email',
            'placeholder': campaign.get('email_placeholder'),
            'required': bool(campaign.get('email_required')),
        })
    if campaign.get('show_phone_field'):
        fields.append({
            'type': 'tel',
            'name': 'phone',
            'placeholder': campaign.get('phone_placeholder'),
            'required': bool(campaign.get('phone_required')),
        })
    return fields


def build_public_config(campaign):
    """Public popup config for one campaign (no shop data beyond what the popup shows)"""
    c = campaign
    return {
        'id': c['id'],
        'triggerDelay': c.get('trigger_delay'),
        'triggerPages': c.get('trigger_pages'),
        'triggerUrlParam': c.get('trigger_url_param'),
        'showToMembers': bool(c.get('show_to_members')),
        'preventDuplicates': bool(c.get('prevent_duplicates')),
        'redisplayAfterDays': c.get('redisplay_after_days'),
        'images': {
            'desktop': c.get('desktop_image'),
            'mobile': c.get('mobile_image'),
        },
        'imagePosition': c.get('image_position'),
        'mobileImagePosition': c.get('mobile_image_position'),
        'hideImageOnMobile': bool(c.get('hide_image_on_mobile')),
        'imageRatio': c.get('image_ratio'),
        'steps': {
            'welcome': {
                'title': c.get('welcome_title'),
                'subtitle': c.get('welcome_subtitle'),
                'btnText': c.get('welcome_button_text'),
            },
            'form': {
                'title': c.get('form_title'),
                'subtitle': c.get('form_subtitle'),
                'fields': _form_fields(c),
                'btnText': c.get('form_button_text'),
            },
            'success': {
                'title': c.get('success_title'),
                'subtitle': c.get('success_subtitle'),
                'code': c.get('discount_code') or '',
                'btns': [
                    {
                        'text': c.get('success_btn1_text') or 'CONTINUE',
                        'link': c.get('success_btn1_link') or '',
                    },
                    {
                        'text': c.get('success_btn2_text') or '',
                        'link': c.get('success_btn2_link') or '',
                    },
                ],
            },
        },
        'discountType': c.get('discount_type'),
        'styles': {
            'backgroundColor': c.get('background_color'),
            'textColor': c.get('text_color'),
            'buttonTextColor': c.get('button_text_color') or '#ffffff',
            'accentColor': c.get('accent_color'),
            'overlayColor': c.get('overlay_color'),
            'borderRadius': c.get('border_radius'),
            'buttonStyle': c.get('button_style'),
            'closeButtonStyle': c.get('close_button_style'),
            'noThanksText': c.get('no_thanks_text') or 'No thanks',
            'fontFamily': c.get('font_family'),
            'titleFontSize': c.get('title_font_size') or 40,
            'subtitleFontSize': c.get('subtitle_font_size') or 18,
            'buttonFontSize': c.get('button_font_size') or 16,
            'titleFontSizeMobile': c.get('title_font_size_mobile') or 24,
            'subtitleFontSizeMobile': c.get('subtitle_font_size_mobile') or 14,
            'buttonFontSizeMobile': c.get('button_font_size_mobile') or 14,
            'inputBorderColor': c.get('input_border_color') or '#cccccc',
        },
    }
