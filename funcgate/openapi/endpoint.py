"""
Documentation endpoint: authorization gate in front of the document provider.
"""

from http import HTTPStatus
from typing import Optional

from ..observability import get_logger
from ..pipeline.http import Request, Response
from .authorization import DocumentationAuthorization
from .document import DocumentProvider
from .models import DocumentFormat, OpenApiVersion

logger = get_logger(__name__)


class DocumentationEndpoint:
    """
    Serves rendered documents to callers the gate allows.

    A denied request gets the gate's payload verbatim and never reaches
    the provider.
    """

    def __init__(
        self,
        authorization: DocumentationAuthorization,
        provider: DocumentProvider,
        route_prefix: str = 'api'
    ):
        self.authorization = authorization
        self.provider = provider
        self.route_prefix = route_prefix.strip('/')

    def request_host(self, request: Request) -> Optional[str]:
        """Base URI of the API as the caller reached it."""
        if not request.host_url:
            return None
        base = request.host_url.rstrip('/')
        return f"{base}/{self.route_prefix}" if self.route_prefix else base

    def serve(
        self,
        request: Request,
        fmt: DocumentFormat,
        version: Optional[OpenApiVersion] = None
    ) -> Response:
        result = self.authorization.authorize(request)
        if not result.allowed:
            logger.debug(
                "Documentation request denied",
                extra={'path': request.path, 'status_code': result.status_code}
            )
            response = Response(status_code=result.status_code)
            response.set_header('Content-Type', result.content_type)
            return response.write_string(result.payload)

        fmt = DocumentFormat(fmt)
        body = self.provider.render(fmt, self.request_host(request), version)

        response = Response(status_code=HTTPStatus.OK, body=body)
        response.set_header('Content-Type', fmt.content_type)
        return response
