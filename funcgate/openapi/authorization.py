"""
Documentation authorization.

Decides per request whether the OpenAPI documents may be served. Outside
development the documents answer 404 so that a caller cannot tell they
exist at all.
"""

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Optional, Protocol

from ..pipeline.http import Request


class AuthorizationDecision(str, Enum):
    ALLOW = 'allow'
    DENY = 'deny'


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a documentation authorization check."""
    decision: AuthorizationDecision
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    payload: str = ""

    @classmethod
    def allow(cls) -> 'AuthorizationResult':
        return cls(AuthorizationDecision.ALLOW)

    @classmethod
    def deny(cls, status_code: int, content_type: str, payload: str = "") -> 'AuthorizationResult':
        return cls(AuthorizationDecision.DENY, int(status_code), content_type, payload)

    @property
    def allowed(self) -> bool:
        return self.decision is AuthorizationDecision.ALLOW


# Denied documentation looks exactly like a route that does not exist
NOT_FOUND = AuthorizationResult.deny(HTTPStatus.NOT_FOUND, 'text/plain', '')


class DocumentationAuthorization(Protocol):
    """Anything that can decide on a documentation request."""

    def authorize(self, request: Request) -> AuthorizationResult: ...


class EnvironmentAuthorization:
    """
    Allow documentation in development, hide it everywhere else.

    The flag is fixed at construction; the request itself never
    influences the decision.
    """

    def __init__(self, is_development: bool):
        self.is_development = bool(is_development)

    def authorize(self, request: Request) -> AuthorizationResult:
        if self.is_development:
            return AuthorizationResult.allow()

        return NOT_FOUND
