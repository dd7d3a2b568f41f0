"""
Ordersdesk Modules
==================

Flask blueprint modules for storefront admin screens.
"""

__all__ = ['orders']
