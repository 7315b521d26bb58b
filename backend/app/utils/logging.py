"""Structured logging and per-request log suppression."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from backend.app.db.context import Authenticated, Caller

_silenced: ContextVar[bool] = ContextVar("log_silenced", default=False)


class SilencedFilter(logging.Filter):
    """Drops every record emitted while the current context is silenced."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not _silenced.get()


_FILTER = SilencedFilter()


def get_logger(name: str) -> logging.Logger:
    """Module logger that honours ``silence_logs``."""
    logger = logging.getLogger(name)
    if _FILTER not in logger.filters:
        logger.addFilter(_FILTER)
    return logger


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and attach the silencing filter to its handlers.

    Handler-level filtering also catches records propagated from library
    loggers (SQLAlchemy, httpx) emitted while a request is silenced.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if _FILTER not in handler.filters:
            handler.addFilter(_FILTER)


def logs_silenced() -> bool:
    return _silenced.get()


@contextmanager
def silence_logs(enabled: bool = True) -> Iterator[None]:
    """Suppress log output for the enclosed block in the current context only.

    The flag lives in a ContextVar, so concurrent requests are unaffected,
    and it is reset on every exit path, including exceptions.
    """
    if not enabled:
        yield
        return

    token = _silenced.set(True)
    try:
        yield
    finally:
        _silenced.reset(token)


logger = get_logger(__name__)


class StructuredRequestLogger:
    """Structured logger for API operation outcomes."""

    def log_outcome(
        self,
        operation: str,
        caller: Caller,
        status_code: int,
        reason: str | None = None,
    ) -> None:
        """Log one handled request with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "account_id": caller.account_id if isinstance(caller, Authenticated) else None,
            "status": status_code,
        }

        if reason:
            log_data["reason"] = reason

        log_msg = f"API {operation} - {status_code}"

        if status_code < 400:
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
