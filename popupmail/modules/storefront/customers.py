"""
Shopify customer sync for popup sign-ups.

Subscribers become (or update) Shopify customers with email marketing consent
SUBSCRIBED / SINGLE_OPT_IN, so merchants can mail them from Shopify directly.
"""

import logging
import secrets
import string
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DISCOUNT_PREFIX = 'POPUP'
_CODE_ALPHABET = string.ascii_uppercase + string.digits

CUSTOMER_SEARCH_QUERY = """
query customerSearch($query: String!) {
  customers(first: 1, query: $query) {
    edges {
      node {
        id
        email
      }
    }
  }
}
"""

CUSTOMER_CREATE_MUTATION = """
mutation customerCreate($input: CustomerInput!) {
  customerCreate(input: $input) {
    customer {
      id
      email
      emailMarketingConsent {
        marketingState
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

CUSTOMER_UPDATE_MUTATION = """
mutation customerUpdate($input: CustomerInput!) {
  customerUpdate(input: $input) {
    customer {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""


def generate_discount_code(prefix=DISCOUNT_PREFIX):
    """Prefix plus six random uppercase letters/digits, e.g. POPUPX7K2QA"""
    return prefix + ''.join(secrets.choice(_CODE_ALPHABET) for _ in range(6))


def resolve_discount_code(campaign):
    """Code handed to a new subscriber, by the campaign's discount type"""
    discount_type = campaign.get('discount_type')
    if discount_type == 'existing':
        return campaign.get('discount_code')
    if discount_type == 'auto':
        return generate_discount_code()
    return None


def _marketing_consent():
    return {
        'marketingState': 'SUBSCRIBED',
        'marketingOptInLevel': 'SINGLE_OPT_IN',
        'consentUpdatedAt': datetime.now(timezone.utc).isoformat(),
    }


def find_customer(client, email):
    data = client.graphql(CUSTOMER_SEARCH_QUERY, {'query': f'email:{email}'})
    edges = ((data.get('customers') or {}).get('edges')) or []
    return edges[0]['node'] if edges else None


def sync_customer(client, email, phone=None, campaign_id=None):
    """
    Mark the customer as subscribed, creating them if needed.

    Returns 'updated' when the customer already existed, 'created' otherwise.
    Raises ShopifyAPIError on transport or GraphQL errors; userErrors are only logged.
    """
    existing = find_customer(client, email)

    if existing:
        logger.info(f"Customer exists, updating consent: {existing['id']}")
        customer_input = {
            'id': existing['id'],
            'emailMarketingConsent': _marketing_consent(),
        }
        if phone:
            customer_input['phone'] = phone
        data = client.graphql(CUSTOMER_UPDATE_MUTATION, {'input': customer_input})
        user_errors = (data.get('customerUpdate') or {}).get('userErrors') or []
        if user_errors:
            logger.error(f"Customer update errors: {user_errors}")
        return 'updated'

    customer_input = {
        'email': email,
        'emailMarketingConsent': _marketing_consent(),
        'tags': [f'popup-{campaign_id}', 'popup-subscriber'],
    }
    if phone:
        customer_input['phone'] = phone
    data = client.graphql(CUSTOMER_CREATE_MUTATION, {'input': customer_input})
    result = data.get('customerCreate') or {}
    if result.get('userErrors'):
        logger.error(f"Customer create errors: {result['userErrors']}")
    else:
        logger.info(f"Customer created: {(result.get('customer') or {}).get('id')}")
    return 'created'
