"""Request id logging context for tracing one validation across modules.

Every inbound validation gets its own id so log lines from the service,
the validator and the store adapter can be tied back to a single call.

Usage:
    from slotguard.logging_context import get_request_logger, new_request_id

    new_request_id()
    logger = get_request_logger(__name__)
    logger.info("Validating slot")  # record.request_id is set
"""

import logging
import uuid
from contextvars import ContextVar

from rich.logging import RichHandler

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")


def set_request_id(request_id: str) -> None:
    """Set the request id for the current context."""
    _request_id.set(request_id)


def new_request_id() -> str:
    """Generate, set and return a fresh request id."""
    request_id = f"REQ-{uuid.uuid4().hex[:12]}"
    _request_id.set(request_id)
    return request_id


def get_request_id() -> str:
    """Retrieve the current request id."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def configure_logging(level: str = "INFO") -> None:
    """Route records through a rich handler that prints the request id."""
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter("[%(request_id)s] %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())
