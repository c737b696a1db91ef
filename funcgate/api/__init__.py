"""
HTTP host layer.

Provides:
- Standardized error responses for routing failures
- Correlation ID hooks
"""

from .errors import (
    AppError,
    MethodNotAllowedError,
    error_response,
    not_found_response
)

from .middleware import (
    correlation_id_middleware,
    error_handler_middleware,
    setup_middleware
)

__all__ = [
    # Errors
    'AppError',
    'MethodNotAllowedError',
    'error_response',
    'not_found_response',

    # Middleware
    'correlation_id_middleware',
    'error_handler_middleware',
    'setup_middleware',
]
