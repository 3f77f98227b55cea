"""
Popup Mail Starter Template
===========================

A ready-to-run Flask application with every Popup Mail module enabled.

Run with:
    python app.py

Visit:
    http://localhost:5000/auth/login  - Install / log in with a shop domain
    http://localhost:5000/app/        - Campaigns
    http://localhost:5000/health      - Health check
"""

from flask import Flask
from popupmail import PopupMail

from config import Config

# Create Flask app
app = Flask(__name__)
app.config.from_object(Config)

# Initialize Popup Mail - this registers all modules automatically
popupmail = PopupMail(app, {'brand_name': Config.BRAND_NAME})


# =============================================================================
# Run the app
# =============================================================================

if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Popup Mail Starter Template")
    print("=" * 60)
    print(f"Install / Login: http://localhost:{Config.PORT}/auth/login")
    print(f"Campaigns:       http://localhost:{Config.PORT}/app/")
    print(f"Subscribers:     http://localhost:{Config.PORT}/app/subscribers")
    print(f"Health:          http://localhost:{Config.PORT}/health")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.PORT, debug=not Config.IS_PRODUCTION)
