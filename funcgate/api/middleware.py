"""
Flask hooks wrapped around every request.

Provides:
- Correlation ID binding and request/response logging
- Host-level error handling for routing failures
"""

from flask import request, g

from ..observability import request_context, get_logger
from .errors import AppError, MethodNotAllowedError, error_response, not_found_response

logger = get_logger(__name__)


def correlation_id_middleware(app):
    """
    Bind a correlation ID to every request.

    Reuses the caller's X-Correlation-ID header when present and echoes
    the ID back on the response.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def before_request():
        ctx = request_context(request.headers.get('X-Correlation-ID'))
        ctx.__enter__()

        g.request_context = ctx

        logger.info(
            "Request started",
            extra={
                'method': request.method,
                'path': request.path,
                'remote_addr': request.remote_addr
            }
        )

    @app.after_request
    def after_request(response):
        if hasattr(g, 'request_context'):
            response.headers['X-Correlation-ID'] = g.request_context.correlation_id

            logger.info(
                "Request completed",
                extra={
                    'method': request.method,
                    'path': request.path,
                    'status_code': response.status_code,
                    'duration_ms': g.request_context.elapsed_ms
                }
            )

        return response

    @app.teardown_request
    def teardown_request(exc=None):
        if hasattr(g, 'request_context'):
            g.request_context.__exit__(None, None, None)


def error_handler_middleware(app):
    """
    Convert routing errors into responses.

    Unknown paths get the same empty 404 as hidden documentation; a wrong
    method on a function route gets a JSON 405.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        logger.error(
            f"Application error: {error.message}",
            extra={
                'error_code': error.code,
                'error_details': error.details,
                'status_code': error.status_code
            }
        )
        return error_response(error)

    @app.errorhandler(404)
    def handle_404(error):
        logger.debug("No route matched", extra={'method': request.method, 'path': request.path})
        return not_found_response()

    @app.errorhandler(405)
    def handle_405(error):
        return error_response(MethodNotAllowedError(
            f"Method {request.method} not allowed on {request.path}",
            details={"path": request.path, "method": request.method}
        ))


def setup_middleware(app):
    """
    Setup all host hooks for the Flask application.

    Args:
        app: Flask application instance
    """
    error_handler_middleware(app)
    correlation_id_middleware(app)

    logger.info("Host middleware configured")
