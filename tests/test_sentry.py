from unittest import IsolatedAsyncioTestCase
from unittest.mock import patch

import pytest

from shoptrail.utils import sentry
from shoptrail.utils.sentry import monitor_errors, init_sentry, capture_error


@monitor_errors
def _explode(value):
    raise KeyError(value)


@monitor_errors
async def _explode_async(value):
    raise RuntimeError(value)


@monitor_errors
async def _fine(value):
    return value * 2


def test_monitor_errors_captures_and_reraises():
    with patch("shoptrail.utils.sentry.capture_error") as capture:
        with pytest.raises(KeyError):
            _explode("boom")
    error, extra = capture.call_args.args
    assert isinstance(error, KeyError)
    assert extra["function"] == "_explode"
    assert "boom" in extra["args"]


def test_init_sentry_disabled(monkeypatch):
    monkeypatch.setenv("DISABLE_SENTRY", "true")
    with patch.object(sentry.sentry_sdk, "init") as init:
        assert init_sentry(dsn="https://key@example.invalid/1") is False
    init.assert_not_called()


def test_init_sentry_without_dsn(monkeypatch):
    monkeypatch.delenv("DISABLE_SENTRY", raising=False)
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    assert init_sentry() is False


def test_init_sentry_with_dsn(monkeypatch):
    monkeypatch.delenv("DISABLE_SENTRY", raising=False)
    monkeypatch.setenv("SENTRY_ENVIRONMENT", "test")
    with patch.object(sentry.sentry_sdk, "init") as init:
        assert init_sentry(dsn="https://key@example.invalid/1") is True
    assert init.call_args.kwargs["environment"] == "test"


def test_capture_error_attaches_extra_data():
    error = ValueError("bad")
    with patch.object(sentry.sentry_sdk, "capture_exception") as capture_exception:
        capture_error(error, {"item": "x"})
        capture_error(error)
    assert capture_exception.call_count == 2


class TestMonitorErrorsAsync(IsolatedAsyncioTestCase):
    async def test_async_errors_are_captured(self):
        with patch("shoptrail.utils.sentry.capture_error") as capture:
            with self.assertRaises(RuntimeError):
                await _explode_async("down")
        capture.assert_called_once()

    async def test_async_results_pass_through(self):
        with patch("shoptrail.utils.sentry.capture_error") as capture:
            self.assertEqual(await _fine(21), 42)
        capture.assert_not_called()


def test_dropped_items_are_not_reported():
    from scrapy.exceptions import DropItem

    drop = DropItem("duplicate")
    assert sentry._drop_ignored({"event": 1}, {"exc_info": (DropItem, drop, None)}) is None
    error = RuntimeError("real")
    assert sentry._drop_ignored({"event": 1}, {"exc_info": (RuntimeError, error, None)}) == {"event": 1}
    assert sentry._drop_ignored({"event": 1}, {}) == {"event": 1}


def test_call_context_is_truncated():
    context = sentry._call_context(_explode, ("x" * 5000,), {})
    assert len(context["args"]) == sentry.MAX_CONTEXT_CHARS
    assert context["function"] == "_explode"
