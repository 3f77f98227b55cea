"""
Popup Mail Core
===============

Core utilities and shared functionality for Popup Mail modules.
"""

from .config import Config
from .database import Database, get_config_value
from .logging_service import LoggingService, db_log
from .shopify import ShopifyAdminClient, ShopifyAPIError, ShopifyAuthError, normalize_shop_domain

__all__ = [
    'Config', 'Database', 'get_config_value', 'LoggingService', 'db_log',
    'ShopifyAdminClient', 'ShopifyAPIError', 'ShopifyAuthError', 'normalize_shop_domain',
]
