"""
Error capture: every captured exception is logged through structlog and, when
a Sentry DSN is configured, reported to Sentry tagged with the request id and
user id of the current request.

Usage:
    with ErrorHandler("load_portfolio_inputs", context={"user_id": user.id}, reraise=True):
        inputs = PortfolioDataLoader(session).load(user)
"""

import logging
import os
from typing import Any, Dict, Optional

import sentry_sdk
import structlog
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from cardvault.core.context import get_context_dict, get_request_id, get_user_id

logger = structlog.get_logger(__name__)

__all__ = ["init_sentry", "capture_exception", "ErrorHandler"]

_sentry_initialized: bool = False


def init_sentry(
    dsn: str,
    environment: str = "production",
    traces_sample_rate: float = 0.1,
    release: Optional[str] = None,
) -> bool:
    """
    Returns:
        True when Sentry was initialized; an empty DSN leaves it disabled
    """
    global _sentry_initialized

    if not dsn:
        logger.info("Sentry disabled (no DSN provided)")
        return False

    release = release or os.environ.get("GIT_COMMIT_SHA")
    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            traces_sample_rate=traces_sample_rate,
            release=release,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                SqlalchemyIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            ],
            before_send=_before_send,
        )
    except Exception as e:
        logger.error("Failed to initialize Sentry", error=str(e))
        return False

    _sentry_initialized = True
    logger.info("Sentry initialized", environment=environment, release=release)
    return True


def _before_send(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    # Health probes are not worth an event
    if "/health" in event.get("request", {}).get("url", ""):
        return None

    request_id = get_request_id()
    if request_id:
        event.setdefault("tags", {})["request_id"] = request_id

    user_id = get_user_id()
    if user_id:
        event.setdefault("user", {})["id"] = str(user_id)

    return event


def capture_exception(
    exc: BaseException,
    context: Optional[Dict[str, Any]] = None,
    fingerprint: Optional[list[str]] = None,
) -> Optional[str]:
    """
    Log exc with the request context and send it to Sentry when enabled.

    Returns:
        Sentry event id, None when nothing was sent
    """
    details = {**get_context_dict(), "error_type": type(exc).__name__, **(context or {})}
    logger.error("Exception captured", exc_info=exc, **details)

    if not _sentry_initialized:
        return None

    try:
        with sentry_sdk.new_scope() as scope:
            for key, value in details.items():
                if value is not None:
                    scope.set_extra(key, value)
            if fingerprint:
                scope.fingerprint = fingerprint
            return sentry_sdk.capture_exception(exc)
    except Exception as e:
        logger.warning("Failed to send exception to Sentry", error=str(e))
        return None


class ErrorHandler:
    """
    Context manager that captures any exception raised in its block.

    Exceptions are suppressed unless reraise is set. Events are grouped in
    Sentry by operation name and exception type.
    """

    def __init__(
        self,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        reraise: bool = False,
    ):
        self.operation = operation
        self.context = context or {}
        self.reraise = reraise
        self.event_id: Optional[str] = None

    def __enter__(self) -> "ErrorHandler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            return False

        self.event_id = capture_exception(
            exc_val,
            context={"operation": self.operation, **self.context},
            fingerprint=[self.operation, type(exc_val).__name__],
        )
        return not self.reraise
