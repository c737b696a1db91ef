"""
Middleware chain executor.

Composes an ordered list of middleware around a terminal handler so that
middleware run in registration order on the way in and in reverse order
on the way out:

    chain = MiddlewareChain([timing_middleware, FaultInterceptor()], handler)
    response = chain(request)

A middleware is any callable ``(request, call_next) -> Response``. It
either returns a Response itself or calls ``call_next()`` once and
returns (possibly after inspecting) what it got back.
"""

from http import HTTPStatus
from typing import Callable, Iterable, List, Optional, Tuple

from ..exceptions import MiddlewareContractError
from ..observability import get_logger
from .http import Request, Response, fallback_response

logger = get_logger(__name__)

Handler = Callable[[Request], Response]
CallNext = Callable[[], Response]
Middleware = Callable[[Request, CallNext], Response]


def _stage_name(stage) -> str:
    return getattr(stage, '__name__', None) or type(stage).__name__


class _Continuation:
    """The ``call_next`` passed to one middleware for one request."""

    def __init__(self, chain: 'MiddlewareChain', index: int, request: Request):
        self._chain = chain
        self._index = index
        self._request = request
        self._called = False

    def __call__(self) -> Response:
        if self._called:
            raise MiddlewareContractError(
                f"call_next invoked more than once by "
                f"{_stage_name(self._chain.middlewares[self._index - 1])}"
            )
        self._called = True
        return self._chain._dispatch(self._index, self._request)


class MiddlewareChain:
    """
    Ordered middleware around a terminal handler.

    The chain holds no per-request state, so one instance serves
    concurrent requests. Middleware can be appended with ``use()`` until
    the first request is served.
    """

    def __init__(
        self,
        middlewares: Optional[Iterable[Middleware]] = None,
        handler: Optional[Handler] = None,
        fallback_status: int = HTTPStatus.INTERNAL_SERVER_ERROR
    ):
        if handler is None:
            raise TypeError("MiddlewareChain requires a terminal handler")

        self._pending: List[Middleware] = list(middlewares or [])
        self._middlewares: Optional[Tuple[Middleware, ...]] = None
        self.handler = handler
        self.fallback_status = int(fallback_status)

    @property
    def middlewares(self) -> Tuple[Middleware, ...]:
        if self._middlewares is not None:
            return self._middlewares
        return tuple(self._pending)

    def use(self, middleware: Middleware) -> 'MiddlewareChain':
        """Append a middleware; only allowed before the chain has served."""
        if self._middlewares is not None:
            raise MiddlewareContractError("Cannot add middleware after the chain started serving")
        self._pending.append(middleware)
        return self

    def __call__(self, request: Request) -> Response:
        if self._middlewares is None:
            self._middlewares = tuple(self._pending)
        return self._dispatch(0, request)

    def _dispatch(self, index: int, request: Request) -> Response:
        middlewares = self._middlewares
        if index == len(middlewares):
            stage = self.handler
            response = stage(request)
        else:
            stage = middlewares[index]
            response = stage(request, _Continuation(self, index + 1, request))

        if response is None:
            logger.error(
                "Pipeline stage produced no response",
                extra={
                    'stage': _stage_name(stage),
                    'method': request.method,
                    'path': request.path,
                    'fallback_status': self.fallback_status
                }
            )
            return fallback_response(self.fallback_status)

        return response
