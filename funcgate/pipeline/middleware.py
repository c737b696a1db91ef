"""
Pipeline middleware.

Provides:
- Fault interception (catch, log, synthesize a fallback response)
- Request timing and counters
"""

import time
import traceback
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Optional, Union

from ..observability import get_correlation_id, get_logger, metrics
from .chain import CallNext
from .http import Request, Response, fallback_response


@dataclass(frozen=True)
class FaultInfo:
    """What was captured from a fault raised downstream."""
    type_name: str
    message: str
    stack: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> 'FaultInfo':
        stack = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(type_name=type(exc).__name__, message=str(exc), stack=stack or None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type_name,
            'message': self.message,
            'stack': self.stack
        }


def capture(call_next: CallNext) -> Union[Response, FaultInfo]:
    """Run the rest of the chain, returning its response or the fault it raised."""
    try:
        return call_next()
    except Exception as exc:
        return FaultInfo.from_exception(exc)


class FaultInterceptor:
    """
    Failure boundary around the remainder of the chain.

    Any exception raised downstream is recorded as one WARNING record and
    replaced by a fallback response; nothing propagates to the caller.

    Usage:
        chain = MiddlewareChain([FaultInterceptor()], handler)
    """

    source = 'FaultInterceptor'

    def __init__(self, fallback_status: int = HTTPStatus.INTERNAL_SERVER_ERROR):
        self.fallback_status = int(fallback_status)
        self.logger = get_logger(f"{__name__}.{self.source}")

    def __call__(self, request: Request, call_next: CallNext) -> Response:
        outcome = capture(call_next)
        if isinstance(outcome, FaultInfo):
            self._record(request, outcome)
            return fallback_response(self.fallback_status)
        return outcome

    def _record(self, request: Request, fault: FaultInfo) -> None:
        # recording must never fault the request path; each sink is guarded alone
        try:
            self.logger.warning(
                f"{fault.type_name}: {fault.message}",
                extra={
                    'source': self.source,
                    'fault': fault.to_dict(),
                    'method': request.method,
                    'path': request.path,
                    'correlation_id': get_correlation_id() or 'none'
                }
            )
        except Exception:
            pass

        try:
            metrics.increment("handler_faults_total", tags={
                "fault_type": fault.type_name,
                "path": request.path
            })
        except Exception:
            pass


def timing_middleware(request: Request, call_next: CallNext) -> Response:
    """
    Record request count and latency, and expose the latency as a header.

    Register it ahead of FaultInterceptor so the fallback 500 of a faulted
    request is counted too.
    """
    start_time = time.perf_counter()
    response = call_next()
    duration_ms = (time.perf_counter() - start_time) * 1000

    tags = {
        "method": request.method,
        "path": request.path,
        "status": str(response.status_code)
    }
    metrics.increment("http_requests_total", tags=tags)
    metrics.timing("http_request_duration_ms", duration_ms, tags=tags)

    response.set_header('X-Response-Time-Ms', f"{duration_ms:.2f}")
    return response
