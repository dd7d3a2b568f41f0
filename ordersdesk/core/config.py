import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the Ordersdesk extension.
    Projects should provide the order service location via environment variables.
    """
    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Persistent app_logs table lives here
    ANALYTICS_DB = os.getenv('ANALYTICS_DB', os.path.join(DB_DIR, "analytics_log.db"))

    # Remote order service
    ORDERSDESK_ORDER_SERVICE_URL = os.getenv('ORDERSDESK_ORDER_SERVICE_URL', 'http://localhost:8080')
    ORDERSDESK_REQUEST_TIMEOUT = int(os.getenv('ORDERSDESK_REQUEST_TIMEOUT', '30'))

    # Where operators are sent when the order service rejects their token
    ORDERSDESK_LOGIN_URL = os.getenv('ORDERSDESK_LOGIN_URL', '/admin/login')

    # Day boundaries for the date-range filter and every displayed timestamp
    ORDERSDESK_TIMEZONE = os.getenv('ORDERSDESK_TIMEZONE', 'Asia/Ho_Chi_Minh')

    # Optional TTF font for the PDF export (Helvetica cannot draw Vietnamese diacritics)
    ORDERSDESK_PDF_FONT = os.getenv('ORDERSDESK_PDF_FONT')

    BRAND_NAME = os.getenv('BRAND_NAME', 'Ordersdesk')


def get_setting(key, default=None):
    """Resolve a setting from the app config, then Config, then the environment"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
