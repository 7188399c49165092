"""Sentry setup and capture helpers for storage and pipeline code."""

import inspect
import logging
import os
from functools import wraps
from typing import Dict, Any, Optional

import sentry_sdk
from scrapy.exceptions import DropItem
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)

# Longest repr kept for captured call arguments; stored payloads can be large
MAX_CONTEXT_CHARS = 1000

# Exceptions that are part of normal item flow, never reported
IGNORED_EXCEPTIONS = (DropItem,)


def _sentry_disabled() -> bool:
    return os.getenv('DISABLE_SENTRY', '').lower() in ('true', '1', 'yes')


def _drop_ignored(event, hint):
    exc_info = hint.get('exc_info') if hint else None
    if exc_info and isinstance(exc_info[1], IGNORED_EXCEPTIONS):
        return None
    return event


def init_sentry(
    dsn: Optional[str] = None,
    environment: Optional[str] = None,
    traces_sample_rate: Optional[float] = None,
) -> bool:
    """Start the Sentry client unless disabled or unconfigured.

    Args:
        dsn: Project DSN, defaults to SENTRY_DSN
        environment: Defaults to SENTRY_ENVIRONMENT, then "development"
        traces_sample_rate: Defaults to SENTRY_TRACES_SAMPLE_RATE, then 1.0

    Returns:
        True when the client was initialized
    """
    if _sentry_disabled():
        logger.info("Sentry is disabled via DISABLE_SENTRY environment variable")
        return False

    dsn = dsn or os.getenv('SENTRY_DSN')
    if not dsn:
        logger.warning("Sentry DSN not provided, skipping Sentry initialization")
        return False

    environment = environment or os.getenv('SENTRY_ENVIRONMENT', 'development')
    if traces_sample_rate is None:
        traces_sample_rate = float(os.getenv('SENTRY_TRACES_SAMPLE_RATE', '1.0'))

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[
            # Breadcrumbs from INFO, events from ERROR
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            AsyncioIntegration(),
        ],
        traces_sample_rate=traces_sample_rate,
        before_send=_drop_ignored,
        send_default_pii=False,
        max_breadcrumbs=50,
        attach_stacktrace=True,
        release=os.getenv('RELEASE_VERSION', 'development'),
    )
    sentry_sdk.set_tag('component', 'shoptrail')

    logger.info(f"Sentry initialized for environment: {environment}")
    return True


def capture_error(error: Exception, extra_data: Optional[Dict[str, Any]] = None) -> None:
    """Report error, attaching extra_data to its scope"""
    if not extra_data:
        sentry_sdk.capture_exception(error)
        return
    with sentry_sdk.new_scope() as scope:
        for key, value in extra_data.items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(error)


def add_breadcrumb(
    message: str,
    category: Optional[str] = None,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None
) -> None:
    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data)


def _call_context(func, args, kwargs) -> Dict[str, str]:
    return {
        'function': func.__qualname__,
        'args': repr(args)[:MAX_CONTEXT_CHARS],
        'kwargs': repr(kwargs)[:MAX_CONTEXT_CHARS],
    }


def monitor_errors(func):
    """Decorator reporting any exception raised by func, then re-raising it.

    Accepts plain and coroutine functions.

    Usage:
        @monitor_errors
        async def store_page_data(self, observation):
            ...
    """
    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                capture_error(e, _call_context(func, args, kwargs))
                raise
        return async_wrapper

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            capture_error(e, _call_context(func, args, kwargs))
            raise
    return wrapper
