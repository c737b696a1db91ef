"""
OpenAPI documentation: descriptors, registry, document generation and
the environment-gated documentation endpoint.
"""

from .models import (
    Contact,
    DocumentFormat,
    License,
    OpenApiConfiguration,
    OpenApiVersion,
    OperationDescriptor,
    ResponseOutcome,
    Visibility,
)
from .registry import OperationRegistry
from .document import DocumentProvider, derive_servers, generate_document, render_document
from .authorization import (
    AuthorizationDecision,
    AuthorizationResult,
    DocumentationAuthorization,
    EnvironmentAuthorization,
)
from .endpoint import DocumentationEndpoint

__all__ = [
    'Contact',
    'DocumentFormat',
    'License',
    'OpenApiConfiguration',
    'OpenApiVersion',
    'OperationDescriptor',
    'ResponseOutcome',
    'Visibility',
    'OperationRegistry',
    'DocumentProvider',
    'derive_servers',
    'generate_document',
    'render_document',
    'AuthorizationDecision',
    'AuthorizationResult',
    'DocumentationAuthorization',
    'EnvironmentAuthorization',
    'DocumentationEndpoint',
]
