"""Request-scoped context for routed calls.

Each ``Router.route()`` invocation binds a fresh ULID to ``request_id`` so
log records, audit events and tool responses emitted while the call is in
flight can be correlated.

Example:
    with request_context() as rid:
        logger.info("routing %s", rid)
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from ulid import ULID

request_id: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    """Generate a sortable request identifier."""
    return f"req_{ULID()}"


def get_request_id() -> str:
    """Return the request id bound to the current context, or ``""``."""
    return request_id.get()


@contextmanager
def request_context(rid: Optional[str] = None) -> Iterator[str]:
    """Bind a request id for the duration of the block.

    An id already bound by an outer scope is reused so nested calls
    (``embed`` inside a tool handler, for instance) share one id.
    """
    existing = request_id.get()
    if rid is None and existing:
        yield existing
        return

    token = request_id.set(rid or new_request_id())
    try:
        yield request_id.get()
    finally:
        request_id.reset(token)
