# tests/pkghost/core/test_logging.py
import json
import logging

from pkghost.core.logging import (
    DevFormatter,
    JsonFormatter,
    clearLogContext,
    getLogContext,
    resetLogContext,
    setLogContext,
)


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("pkghost.packages", logging.WARNING, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_set_and_reset_log_context_nests():
    clearLogContext()
    outer = setLogContext(operation="load", packageName="foo")
    inner = setLogContext(packageName="bar", ignored=None)
    assert getLogContext() == {"operation": "load", "packageName": "bar"}
    resetLogContext(inner)
    assert getLogContext() == {"operation": "load", "packageName": "foo"}
    resetLogContext(outer)
    assert getLogContext() is None


def test_json_formatter_includes_context_and_warning_code():
    clearLogContext()
    token = setLogContext(operation="load", packageName="foo")
    try:
        line = JsonFormatter().format(_record("Failed to add panel", warningCode="PanelCollision"))
    finally:
        resetLogContext(token)
    data = json.loads(line)
    assert data["level"] == "warning"
    assert data["logger"] == "pkghost.packages"
    assert data["msg"] == "Failed to add panel"
    assert data["warningCode"] == "PanelCollision"
    assert data["ctx"] == {"operation": "load", "packageName": "foo"}


def test_json_formatter_serializes_exceptions():
    try:
        raise ValueError("boom")
    except ValueError:
        import sys
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
    data = json.loads(JsonFormatter().format(record))
    assert data["exc"]["type"] == "ValueError"
    assert data["exc"]["message"] == "boom"
    assert "Traceback" in data["exc"]["stack"]


def test_dev_formatter_shows_code_and_context_suffix():
    clearLogContext()
    token = setLogContext(operation="unload", packageName="foo")
    try:
        text = DevFormatter().format(_record("Failed to unload foo", warningCode="UnloadHookFailed"))
    finally:
        resetLogContext(token)
    assert text == "WARNING: [pkghost.packages] (UnloadHookFailed) Failed to unload foo [unload/foo]"
