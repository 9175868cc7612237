# src/bookstore/core/logging/filters.py
"""
Logging filters

Request ID filter and helpers for logging.

Correlating the log lines that belong to one HTTP request is done with a
`contextvars.ContextVar`: the middleware stores the id at the start of the
request and `RequestIdFilter` copies it onto every `LogRecord` emitted in the
same async context. Unlike `threading.local()`, a ContextVar survives `await`
boundaries and stays isolated between concurrent requests on one thread.

Records emitted outside a request get the sentinel "-", so format strings that
reference `%(request_id)s` never raise KeyError.

`RedactFilter` masks record attributes whose name looks sensitive (values passed
through `extra={...}`), before any formatter sees them.
"""

import logging
from logging import LogRecord
import contextvars

# Default is None to indicate "no request id set".
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context and return the token to allow reset.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token):
    """
    Reset the contextvar to the previously saved token returned by set_request_id().
    """
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Logging filter that guarantees every LogRecord has a `request_id` attribute.

    Precedence: an explicit `extra={"request_id": ...}` on the record, then the
    contextvar set by the middleware, then "-".
    Always returns True; the filter only annotates.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "database_url"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
