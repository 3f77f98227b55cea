"""
PopupMail Flask extension.

Usage:
    from flask import Flask
    from popupmail import PopupMail

    app = Flask(__name__)
    PopupMail(app)

or with the application factory pattern:

    popupmail = PopupMail()
    popupmail.init_app(app, {'brand_name': 'My Popups'})
"""

import os
import logging

from flask import redirect, url_for

from .core.config import Config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'brand_name': 'Popup Mail',
    'redirect_root': True,
    'features': {
        'auth': True,
        'campaigns': True,
        'storefront': True,
        'subscribers': True,
        'uploads': True,
        'webhooks': True,
        'ops': True,
    },
}

# Flask config keys filled from core Config when the host app does not set them
APP_CONFIG_DEFAULTS = [
    'SECRET_KEY',
    'DB_DIR',
    'SHOPIFY_API_KEY',
    'SHOPIFY_API_SECRET',
    'SHOPIFY_SCOPES',
    'SHOPIFY_API_VERSION',
    'APP_URL',
    'SKIP_PROXY_SIGNATURE',
    'ENVIRONMENT',
]


class PopupMail:
    """Registers the Popup Mail blueprints on a Flask app"""

    def __init__(self, app=None, config=None):
        self._config = {}
        self._registered_modules = []
        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config=None):
        self._config = self._merge_config(config or {})

        self._apply_app_defaults(app)
        self._setup_database_dir(app)

        with app.app_context():
            self._init_databases()

        self._register_blueprints(app)
        self._register_context_processor(app)

        if self._config.get('redirect_root') and self._is_enabled('campaigns'):
            self._register_root_redirect(app)

        app.extensions['popupmail'] = self
        logger.info(f"PopupMail initialised with modules: {', '.join(self._registered_modules)}")
        return self

    @property
    def config(self):
        return self._config

    def get_registered_modules(self):
        """Names of the feature modules whose blueprints were registered"""
        return list(self._registered_modules)

    def _merge_config(self, config):
        merged = dict(DEFAULT_CONFIG)
        merged.update({k: v for k, v in config.items() if k != 'features'})
        merged['features'] = dict(DEFAULT_CONFIG['features'])
        merged['features'].update(config.get('features', {}))
        return merged

    def _is_enabled(self, feature):
        return self._config['features'].get(feature, False)

    def _apply_app_defaults(self, app):
        for key in APP_CONFIG_DEFAULTS:
            if not app.config.get(key):
                app.config[key] = getattr(Config, key)

        # Database files follow DB_DIR unless set explicitly
        db_dir = app.config['DB_DIR']
        app.config.setdefault('APP_DB', os.path.join(db_dir, 'popupmail.db'))
        app.config.setdefault('LOG_DB', os.path.join(db_dir, 'app_logs.db'))

    def _setup_database_dir(self, app):
        db_dir = app.config.get('DB_DIR')
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
            logger.info(f"Created database directory: {db_dir}")

    def _init_databases(self):
        from .modules.auth.sessions import init_sessions_db
        from .modules.campaigns.models import init_campaigns_db
        from .modules.subscribers.models import init_subscribers_db

        init_sessions_db()
        init_campaigns_db()
        init_subscribers_db()

    def _register_blueprints(self, app):
        if self._is_enabled('auth'):
            from .modules.auth import auth_bp
            app.register_blueprint(auth_bp)
            self._registered_modules.append('auth')

        if self._is_enabled('campaigns'):
            from .modules.campaigns import campaigns_bp
            app.register_blueprint(campaigns_bp)
            self._registered_modules.append('campaigns')

        if self._is_enabled('storefront'):
            from .modules.storefront import storefront_bp
            app.register_blueprint(storefront_bp)
            self._registered_modules.append('storefront')

        if self._is_enabled('subscribers'):
            from .modules.subscribers import subscribers_bp
            app.register_blueprint(subscribers_bp)
            self._registered_modules.append('subscribers')

        if self._is_enabled('uploads'):
            from .modules.uploads import uploads_bp
            app.register_blueprint(uploads_bp)
            self._registered_modules.append('uploads')

        if self._is_enabled('webhooks'):
            from .modules.webhooks import webhooks_bp
            app.register_blueprint(webhooks_bp)
            self._registered_modules.append('webhooks')

        if self._is_enabled('ops'):
            from .modules.ops import ops_health_bp
            app.register_blueprint(ops_health_bp)
            self._registered_modules.append('ops')

    def _register_context_processor(self, app):
        @app.context_processor
        def inject_popupmail():
            return {
                'popupmail_config': self._config,
                'brand_name': self._config.get('brand_name') or 'Popup Mail',
            }

    def _register_root_redirect(self, app):
        # Host apps that define their own "/" keep it
        if any(rule.rule == '/' for rule in app.url_map.iter_rules()):
            return

        @app.route('/')
        def popupmail_root():
            return redirect(url_for('campaigns.index'))
