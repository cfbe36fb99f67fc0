"""
Logging filters.

- RequestIdFilter stamps every LogRecord with `request_id`, read from a
  contextvar that RequestIDMiddleware sets per HTTP request. contextvars
  follow asyncio tasks across `await`, which threading.local() does not.
  Records logged outside a request get the sentinel "-", so format strings
  using `%(request_id)s` never KeyError.
- RedactFilter masks attributes whose name looks like a secret
  (`extra={"password": ...}` ends up as "***REDACTED***").

Both filters always return True: they annotate records, never drop them.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context.

    Returns:
        token: pass it to reset_request_id(token) to restore the previous value.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `request_id` attribute.

    Precedence: explicit `extra={"request_id": ...}` > contextvar > "-".
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization",
                 "connection_string", "database_url"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
