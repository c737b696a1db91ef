"""
Flask host for the function gateway.

Wires configuration, the operation registry, the middleware chain and
the documentation endpoint into a Flask application:

    GET|POST /api/Function1          -> middleware chain -> update_pet
    * /api/swagger.{json,yaml}       -> documentation gate -> provider
    * /api/openapi/{v2,v3}.{json,yaml}
"""

import sys
from dataclasses import dataclass
from typing import Optional

from flask import Flask, request
from flask import Response as FlaskResponse
from flask_cors import CORS
from pydantic import ValidationError

from .api.middleware import setup_middleware
from .config import Settings, load_settings
from .exceptions import GatewayError
from .functions import FUNCTION_ROUTE, build_registry, make_update_pet
from .observability import setup_logging, get_logger, metrics
from .openapi import (
    DocumentFormat,
    DocumentProvider,
    DocumentationEndpoint,
    EnvironmentAuthorization,
    OpenApiConfiguration,
    OpenApiVersion,
    OperationRegistry,
)
from .pipeline import FaultInterceptor, MiddlewareChain, Request, Response, timing_middleware

logger = get_logger(__name__)

# Documentation rules answer every method so the gate, not Flask's method
# check, decides the response
DOCUMENT_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


@dataclass(frozen=True)
class Gateway:
    """Everything built at startup, published once create_app() returns."""
    settings: Settings
    openapi: OpenApiConfiguration
    registry: OperationRegistry
    chain: MiddlewareChain
    docs: DocumentationEndpoint


def to_pipeline_request() -> Request:
    """Snapshot the current Flask request as an immutable pipeline Request."""
    return Request(
        method=request.method,
        path=request.path,
        headers=dict(request.headers.items()),
        body=request.get_data(cache=True),
        query=request.args.to_dict(),
        host_url=request.host_url
    )


def to_flask_response(response: Response) -> FlaskResponse:
    return FlaskResponse(
        response.body,
        status=response.status_code,
        headers=dict(response.headers)
    )


def _route(prefix: str, path: str) -> str:
    return f"/{prefix}/{path}" if prefix else f"/{path}"


def build_gateway(settings: Settings) -> Gateway:
    """
    Build and validate every startup component.

    Raises:
        ConfigurationConflictError: contradictory OpenAPI flags
        RegistryError: invalid operation registration
    """
    openapi_config = settings.openapi_configuration()

    update_pet = make_update_pet(always_fault=settings.sample_faults)
    registry = build_registry(update_pet)
    registry.freeze()

    middlewares = [FaultInterceptor()]
    if settings.enable_metrics:
        middlewares.insert(0, timing_middleware)
    chain = MiddlewareChain(middlewares, update_pet)

    docs = DocumentationEndpoint(
        authorization=EnvironmentAuthorization(settings.is_development),
        provider=DocumentProvider(openapi_config, registry),
        route_prefix=settings.route_prefix
    )

    return Gateway(
        settings=settings,
        openapi=openapi_config,
        registry=registry,
        chain=chain,
        docs=docs
    )


def create_app(settings: Optional[Settings] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        settings: Loaded settings; read from the environment when None

    Returns:
        Configured Flask app, ready to serve
    """
    settings = settings or load_settings()
    gateway = build_gateway(settings)

    app = Flask(__name__)
    CORS(app)
    setup_middleware(app)
    app.extensions['funcgate'] = gateway

    prefix = settings.route_prefix

    def run_function():
        return to_flask_response(gateway.chain(to_pipeline_request()))

    app.add_url_rule(
        _route(prefix, FUNCTION_ROUTE),
        endpoint='function1',
        view_func=run_function,
        methods=['GET', 'POST']
    )

    def swagger_document(extension: str):
        response = gateway.docs.serve(to_pipeline_request(), DocumentFormat(extension))
        return to_flask_response(response)

    def openapi_document(version: str, extension: str):
        response = gateway.docs.serve(
            to_pipeline_request(),
            DocumentFormat(extension),
            OpenApiVersion(version)
        )
        return to_flask_response(response)

    app.add_url_rule(
        _route(prefix, 'swagger.<any(json, yaml):extension>'),
        endpoint='swagger_document',
        view_func=swagger_document,
        methods=DOCUMENT_METHODS
    )
    app.add_url_rule(
        _route(prefix, 'openapi/<any(v2, v3):version>.<any(json, yaml):extension>'),
        endpoint='openapi_document',
        view_func=openapi_document,
        methods=DOCUMENT_METHODS
    )

    logger.info(
        "Gateway ready",
        extra={
            'environment': settings.environment,
            'route_prefix': prefix,
            'operations': len(gateway.registry),
            'document_version': gateway.openapi.document_version.value
        }
    )
    return app


def main():
    """Run the gateway with Flask's built-in server."""
    try:
        settings = load_settings()
    except ValidationError as e:
        logger.critical(f"Invalid gateway settings: {e}", extra={'error_type': type(e).__name__})
        sys.exit(1)

    setup_logging(
        log_level=settings.observability.log_level,
        log_format=settings.observability.log_format,
        log_dir=settings.observability.log_dir
    )

    try:
        app = create_app(settings)
    except GatewayError as e:
        logger.critical(f"Gateway failed to start: {e}", extra={'error_type': type(e).__name__})
        sys.exit(1)

    logger.info("Starting gateway", extra={'host': settings.host, 'port': settings.port})
    try:
        app.run(host=settings.host, port=settings.port, debug=settings.debug)
    finally:
        logger.info("Gateway stopped", extra={'metrics': metrics.get_summary()})


if __name__ == '__main__':
    main()
