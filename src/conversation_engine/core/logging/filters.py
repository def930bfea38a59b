"""
Logging filters.

- RequestIdFilter stamps a correlation id on every record. The id lives in a
  ContextVar so it follows a resolver call across awaits; the reassignment
  service sets one per run so every chunk's log lines can be grouped.
- RedactFilter masks contact phone numbers and secrets passed through `extra`.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """Set the id for the current context; returns the token for reset_request_id()."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee a `request_id` attribute on every record.

    An explicit `extra={"request_id": ...}` wins, then the context value, then "-".
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    REDACTED = "***REDACTED***"
    SENSITIVE = {
        "password",
        "secret",
        "token",
        "authorization",
        "redis_url",
        # contact PII
        "cell",
        "contact_number",
        "user_number",
    }

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.REDACTED
        return True


__all__ = [
    "set_request_id",
    "reset_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RedactFilter",
]
