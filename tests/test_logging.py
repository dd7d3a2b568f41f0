"""
Logging Service Tests
=====================

Rows written to the app_logs table and the surface ordersdesk.core exposes.
"""

import json

import ordersdesk.core as core
from ordersdesk.core import Config, LoggingService, db_log


def test_core_exports_only_what_modules_use():
    assert sorted(core.__all__) == ["Config", "LoggingService", "db_log", "get_setting"]
    assert not hasattr(core, "logger")
    assert not hasattr(LoggingService, "cleanup_old_logs")


def test_config_carries_only_ordersdesk_settings():
    assert not hasattr(Config, "SECRET_KEY")
    assert not hasattr(Config, "port")


def test_db_log_and_user_action_rows():
    db_log("error", "orders", "Error loading orders", {"error": "boom"})
    LoggingService.log_user_action("orders", "Order A status -> Đã hủy", details={"order_id": "A"})

    rows = LoggingService.recent_logs("orders")
    assert [(r["level"], r["message"]) for r in rows] == [
        ("INFO", "User action: Order A status -> Đã hủy"),
        ("ERROR", "Error loading orders"),
    ]
    assert json.loads(rows[0]["details"]) == {"order_id": "A"}


def test_error_with_traceback_records_exception_type():
    try:
        raise RuntimeError("render failed")
    except RuntimeError as e:
        LoggingService.log_error_with_traceback("exports", e, {"format": "pdf"})

    row = LoggingService.recent_logs("exports")[0]
    details = json.loads(row["details"])
    assert row["message"] == "Exception occurred: RuntimeError"
    assert details["error_message"] == "render failed"
    assert details["additional_details"] == {"format": "pdf"}
    assert "Traceback" in details["traceback"]


def test_unwritable_log_db_falls_back_to_console(monkeypatch, tmp_path, capsys):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    monkeypatch.setattr(Config, "ANALYTICS_DB", str(blocker / "analytics_log.db"))

    LoggingService.log("warning", "orders", "Dropping stale order fetch")

    assert "[WARNING] [orders] Dropping stale order fetch" in capsys.readouterr().out
