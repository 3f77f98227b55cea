import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for Popup Mail.
    Deployments provide Shopify credentials and database paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    APP_DB = os.getenv('APP_DB', os.path.join(DB_DIR, "popupmail.db"))
    LOG_DB = os.getenv('LOG_DB', os.path.join(DB_DIR, "app_logs.db"))

    # Shopify app credentials (Partner dashboard -> App setup)
    SHOPIFY_API_KEY = os.getenv('SHOPIFY_API_KEY')
    SHOPIFY_API_SECRET = os.getenv('SHOPIFY_API_SECRET')
    SHOPIFY_SCOPES = os.getenv('SHOPIFY_SCOPES', 'write_customers,read_customers,write_files,read_files')
    SHOPIFY_API_VERSION = os.getenv('SHOPIFY_API_VERSION', '2024-10')

    # Public URL of this app, used for the OAuth redirect and by the storefront script
    APP_URL = os.getenv('APP_URL', 'http://localhost:5000')

    # Set to 'true' to accept unsigned app proxy requests (local development)
    SKIP_PROXY_SIGNATURE = os.getenv('SKIP_PROXY_SIGNATURE', '').lower() == 'true'

    ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')

    # Table names
    SESSIONS_TABLE = "shop_sessions"
    CAMPAIGNS_TABLE = "campaigns"
    SUBSCRIBERS_TABLE = "subscribers"
    LOGS_TABLE = "app_logs"

    # Port for local server (optional, projects can set this)
    port = int(os.getenv('PORT', '5000'))
