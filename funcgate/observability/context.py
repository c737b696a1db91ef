"""
Correlation ID tracking.

Each inbound call gets a correlation ID that every log record emitted
while handling it carries, including fault records from the pipeline.
"""

import time
import uuid
from contextvars import ContextVar
from typing import Optional

# Context variables are isolated per thread and per asyncio task
_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    _correlation_id.set(correlation_id)


class RequestContext:
    """
    Binds a correlation ID for the duration of one request and times it.

    The Flask hooks enter it in before_request and leave it on teardown:

        ctx = request_context(request.headers.get('X-Correlation-ID'))
        ctx.__enter__()
        ...
        log(duration_ms=ctx.elapsed_ms)
        ctx.__exit__(None, None, None)
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._started = time.perf_counter()
        self._previous: Optional[str] = None

    def __enter__(self) -> 'RequestContext':
        self._previous = _correlation_id.get()
        _correlation_id.set(self.correlation_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id.set(self._previous)

    @property
    def elapsed_ms(self) -> int:
        """Milliseconds since the context was created."""
        return int((time.perf_counter() - self._started) * 1000)


def request_context(correlation_id: Optional[str] = None) -> RequestContext:
    """
    Create a new request context.

    Args:
        correlation_id: Caller-supplied ID; a fresh one is generated when empty

    Returns:
        RequestContext instance, not yet entered
    """
    return RequestContext(correlation_id)
