"""
Orders Admin Module
===================

Admin interface for order management.

Provides:
- Order listing with search, status and date-range filters
- Sorting and pagination over the loaded orders
- Revenue and order-count summary
- Excel / PDF export and printable bills
- Payment status updates
"""

from flask import Blueprint

orders_bp = Blueprint(
    'orders_admin',
    __name__,
    url_prefix='/admin/orders-manager',
)

from . import routes

__all__ = ['orders_bp']
