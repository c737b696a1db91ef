"""
Request pipeline: values, middleware chain executor and middleware.
"""

from .http import HeaderMap, Request, Response, fallback_response
from .chain import MiddlewareChain
from .middleware import FaultInfo, FaultInterceptor, capture, timing_middleware

__all__ = [
    'HeaderMap',
    'Request',
    'Response',
    'fallback_response',
    'MiddlewareChain',
    'FaultInfo',
    'FaultInterceptor',
    'capture',
    'timing_middleware',
]
