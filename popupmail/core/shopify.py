"""
Shopify Admin API client.
Runs GraphQL queries for a shop using its stored offline access token.
"""

import re
import logging
import requests
from typing import Optional, Dict, Any

from .database import get_config_value

logger = logging.getLogger(__name__)

SHOP_DOMAIN_REGEX = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$')


class ShopifyAPIError(Exception):
    """Admin API returned an HTTP error or GraphQL errors"""

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class ShopifyAuthError(ShopifyAPIError):
    """No usable access token for the shop"""


def normalize_shop_domain(shop: Optional[str]) -> Optional[str]:
    """
    Strip scheme and trailing slashes from a shop domain and make sure it is a
    *.myshopify.com host. Returns None for anything else.
    """
    if not shop:
        return None
    shop = shop.strip().lower().replace('https://', '').replace('http://', '').rstrip('/')
    if not SHOP_DOMAIN_REGEX.match(shop):
        return None
    return shop


class ShopifyAdminClient:
    """Client for the Shopify Admin GraphQL API"""

    def __init__(self, shop: str, access_token: str, api_version: str = None):
        self.shop = shop
        self.access_token = access_token
        self.api_version = api_version or get_config_value('SHOPIFY_API_VERSION', '2024-10')
        self.graphql_url = f'https://{self.shop}/admin/api/{self.api_version}/graphql.json'

    @classmethod
    def for_shop(cls, shop: str) -> 'ShopifyAdminClient':
        """
        Build a client from the offline session stored at install time.
        Usable outside of an admin request (e.g. from the public subscribe endpoint).
        """
        from popupmail.modules.auth.sessions import get_session

        stored = get_session(shop)
        if not stored or not stored.get('access_token'):
            raise ShopifyAuthError(f"No offline session stored for {shop}")
        return cls(shop, stored['access_token'])

    def graphql(self, query: str, variables: Optional[Dict] = None) -> Dict[str, Any]:
        """Execute a GraphQL document and return its `data` payload"""
        headers = {
            'X-Shopify-Access-Token': self.access_token,
            'Content-Type': 'application/json'
        }

        payload = {'query': query}
        if variables:
            payload['variables'] = variables

        try:
            response = requests.post(self.graphql_url, headers=headers, json=payload, timeout=30)
        except requests.RequestException as e:
            raise ShopifyAPIError(f"Request to {self.shop} failed: {e}")

        if response.status_code == 401:
            raise ShopifyAuthError(f"Access token rejected by {self.shop}", status_code=401)
        if not response.ok:
            raise ShopifyAPIError(
                f"Admin API returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        result = response.json()
        if result.get('errors'):
            raise ShopifyAPIError(f"GraphQL errors: {result['errors']}", errors=result['errors'])

        return result.get('data') or {}
