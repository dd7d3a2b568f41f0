"""
Ordersdesk Core
===============

Core utilities and shared functionality for Ordersdesk modules.
"""

from .config import Config, get_setting
from .logging_service import LoggingService, db_log

__all__ = ['Config', 'get_setting', 'LoggingService', 'db_log']
