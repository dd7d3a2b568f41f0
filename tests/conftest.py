"""
Shared fixtures: every test logs into its own temporary app_logs database.
"""

import os
from zoneinfo import ZoneInfo

import pytest

from ordersdesk.core.config import Config

STORE_TZ = ZoneInfo("Asia/Ho_Chi_Minh")

PAID = "Đã thanh toán"
PENDING = "Đang chờ thanh toán"
CANCELLED = "Đã hủy"


@pytest.fixture(autouse=True)
def isolated_log_db(tmp_path, monkeypatch):
    """Point the persistent logger at a throwaway database."""
    path = os.path.join(str(tmp_path), "analytics_log.db")
    monkeypatch.setattr(Config, "ANALYTICS_DB", path)
    monkeypatch.setattr(Config, "ORDERSDESK_TIMEZONE", "Asia/Ho_Chi_Minh")
    monkeypatch.setattr(Config, "ORDERSDESK_PDF_FONT", None)
    return path


def make_order(order_id, created_at="2024-03-05T10:00:00+07:00", status=PAID, total=100000, **extra):
    """Order record shaped like the order service payload."""
    order = {
        "orderId": order_id,
        "createdAt": created_at,
        "payment_status": status,
        "totalAmt": total,
        "quantity": 1,
    }
    order.update(extra)
    return order
