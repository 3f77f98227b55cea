"""
Popup Mail Modules
==================

One Flask blueprint per feature.
"""

__all__ = ['auth', 'campaigns', 'ops', 'storefront', 'subscribers', 'uploads', 'webhooks']
