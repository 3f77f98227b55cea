"""
Popup Mail - Shopify popup and lead capture
===========================================

A Flask app for Shopify merchants with:
- Campaign editor (triggers, content, styling, discount behaviour)
- Public config and subscribe endpoints for the storefront popup
- Subscriber list and CSV export
- OAuth install, image uploads to Shopify Files, privacy webhooks

Usage:
    from flask import Flask
    from popupmail import PopupMail

    app = Flask(__name__)
    PopupMail(app)
"""

__version__ = '0.1.0'

from .app import PopupMail

__all__ = ['PopupMail']
