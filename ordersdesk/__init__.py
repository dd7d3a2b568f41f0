"""
Ordersdesk - Order management for Flask storefront admins
=========================================================

Search, filter, sort, page through and export a storefront's orders, all
on the order list already loaded from the order service.

Usage:
    from ordersdesk import Ordersdesk

    app = Flask(__name__)
    Ordersdesk(app)

    # or, with an application factory
    ordersdesk = Ordersdesk()
    ordersdesk.init_app(app, {'brand_name': 'My Store'})
"""

import os

from flask_cors import CORS

from .core.config import Config
from .modules.orders import orders_bp
from .modules.orders.board import BoardRegistry
from .modules.orders.constants import PAGE_SIZES, STATUS_OPTIONS, SORTABLE_KEYS
from .modules.orders.service import OrderServiceClient

__version__ = '0.1.0'

DEFAULT_SETTINGS = {
    'DB_DIR': Config.DB_DIR,
    'ANALYTICS_DB': Config.ANALYTICS_DB,
    'ORDERSDESK_ORDER_SERVICE_URL': Config.ORDERSDESK_ORDER_SERVICE_URL,
    'ORDERSDESK_REQUEST_TIMEOUT': Config.ORDERSDESK_REQUEST_TIMEOUT,
    'ORDERSDESK_LOGIN_URL': Config.ORDERSDESK_LOGIN_URL,
    'ORDERSDESK_TIMEZONE': Config.ORDERSDESK_TIMEZONE,
    'ORDERSDESK_PDF_FONT': Config.ORDERSDESK_PDF_FONT,
    'ORDERSDESK_ALLOWED_ORIGINS': [],
}


class Ordersdesk:
    """Flask extension wiring the orders blueprint, config and board registry"""

    def __init__(self, app=None, config=None, order_service=None):
        self._config = {}
        self._order_service = order_service
        self._registered = []
        self.boards = None
        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config=None):
        self._config = dict(config or {})

        for key, value in DEFAULT_SETTINGS.items():
            app.config.setdefault(key, value)
        if not app.config.get('ANALYTICS_DB'):
            app.config['ANALYTICS_DB'] = os.path.join(app.config['DB_DIR'], 'analytics_log.db')

        self._setup_database_dir(app)

        self.boards = BoardRegistry(lambda: self._make_service(app))
        app.register_blueprint(orders_bp)
        self._registered.append('orders')

        origins = app.config.get('ORDERSDESK_ALLOWED_ORIGINS')
        if origins:
            CORS(app, resources={
                f"{orders_bp.url_prefix}/api/*": {'origins': origins, 'supports_credentials': True}
            })

        @app.context_processor
        def inject_ordersdesk():
            return {
                'ordersdesk_config': {
                    'page_sizes': list(PAGE_SIZES),
                    'status_options': [{'value': v, 'label': label} for v, label in STATUS_OPTIONS],
                    'sortable_keys': list(SORTABLE_KEYS),
                },
                'brand_name': self._config.get('brand_name') or app.config.get('BRAND_NAME') or Config.BRAND_NAME,
            }

        app.extensions['ordersdesk'] = self

    def _setup_database_dir(self, app):
        db_dir = app.config.get('DB_DIR')
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _make_service(self, app):
        if self._order_service is not None:
            return self._order_service
        return OrderServiceClient(
            base_url=app.config['ORDERSDESK_ORDER_SERVICE_URL'],
            timeout=int(app.config['ORDERSDESK_REQUEST_TIMEOUT']),
        )

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['Ordersdesk', 'OrderServiceClient', '__version__']
