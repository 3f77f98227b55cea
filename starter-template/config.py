import os
from dotenv import load_dotenv

load_dotenv()

IS_PRODUCTION = (
    os.getenv('ENVIRONMENT') == 'production' or
    os.getenv('FLASK_ENV') == 'production' or
    os.getenv('PRODUCTION') == '1'
)

DB_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'databases')


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    IS_PRODUCTION = IS_PRODUCTION
    ENVIRONMENT = 'production' if IS_PRODUCTION else 'development'
    PORT = int(os.getenv('PORT', '5000'))
    BRAND_NAME = 'My Popups'

    # Database paths
    DB_DIR = DB_DIR
    APP_DB = os.path.join(DB_DIR, 'popupmail.db')
    LOG_DB = os.path.join(DB_DIR, 'app_logs.db')

    # Shopify app (Partner dashboard -> App setup)
    SHOPIFY_API_KEY = os.getenv('SHOPIFY_API_KEY', '')
    SHOPIFY_API_SECRET = os.getenv('SHOPIFY_API_SECRET', '')
    SHOPIFY_SCOPES = 'write_customers,read_customers,write_files,read_files'
    APP_URL = os.getenv('APP_URL', 'http://localhost:5000')

    # Local development against a dev store without a signed app proxy
    # SKIP_PROXY_SIGNATURE = True
