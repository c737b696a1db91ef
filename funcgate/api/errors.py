"""
Standardized error responses for the HTTP host.

An unknown path is answered exactly like hidden documentation: an empty
text/plain 404, so a caller cannot tell the two apart. Other routing
failures (wrong method on a function route) get a JSON error envelope.
Faults inside the pipeline are handled by the fault interceptor and never
reach this module.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from flask import Response, jsonify

from ..observability import get_correlation_id
from ..openapi.authorization import NOT_FOUND


class AppError(Exception):
    """
    Base host-level error.

    Carries the HTTP status and a machine-readable code.
    """

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize application error.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "correlation_id": get_correlation_id() or "none",
                "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
            }
        }


class MethodNotAllowedError(AppError):
    """HTTP method not supported by the route (405 Method Not Allowed)."""
    code = "METHOD_NOT_ALLOWED"
    status_code = 405


def error_response(error: AppError):
    """
    Create a Flask JSON response from an AppError.

    Args:
        error: Application error instance

    Returns:
        Flask JSON response with appropriate status code
    """
    response = jsonify(error.to_dict())
    response.status_code = error.status_code
    return response


def not_found_response() -> Response:
    """Empty 404, byte-for-byte what a denied documentation request gets."""
    return Response(
        NOT_FOUND.payload,
        status=NOT_FOUND.status_code,
        headers={'Content-Type': NOT_FOUND.content_type}
    )
