"""
OpenAPI document generation.

Builds a Swagger 2.0 or OpenAPI 3.0.1 document from the process-wide
configuration and the registered operation descriptors. Generation is a
pure function of its inputs: the same configuration, descriptors and
request host always render to the same bytes.
"""

from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit

import orjson
import yaml

from ..exceptions import DuplicateOperationError
from ..observability import get_logger, metrics
from .models import (
    DocumentFormat,
    OpenApiConfiguration,
    OpenApiVersion,
    OperationDescriptor,
    ResponseOutcome,
    Visibility,
)
from .registry import OperationRegistry

logger = get_logger(__name__)

OPENAPI_V3_VERSION = '3.0.1'
SWAGGER_V2_VERSION = '2.0'

# Body type names that map straight onto JSON schema primitives
PRIMITIVE_SCHEMAS = {
    'string': {'type': 'string'},
    'str': {'type': 'string'},
    'integer': {'type': 'integer', 'format': 'int32'},
    'int': {'type': 'integer', 'format': 'int32'},
    'long': {'type': 'integer', 'format': 'int64'},
    'number': {'type': 'number'},
    'float': {'type': 'number', 'format': 'float'},
    'double': {'type': 'number', 'format': 'double'},
    'boolean': {'type': 'boolean'},
    'bool': {'type': 'boolean'},
    'object': {'type': 'object'},
    'dict': {'type': 'object'},
}


def derive_servers(config: OpenApiConfiguration, request_host: Optional[str] = None) -> List[str]:
    """
    Server base URIs in document order.

    Static servers come first; the requesting host is appended when
    ``include_requesting_host_name`` is set. Protocol forcing rewrites the
    scheme of every entry, then duplicates are dropped.
    """
    candidates = list(config.servers)
    if config.include_requesting_host_name and request_host:
        candidates.append(request_host.rstrip('/'))

    scheme = config.forced_scheme
    servers: List[str] = []
    for server in candidates:
        if scheme:
            parts = urlsplit(server)
            server = urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))
        if server not in servers:
            servers.append(server)
    return servers


def _info(config: OpenApiConfiguration) -> Dict[str, Any]:
    info: Dict[str, Any] = {'title': config.title}
    if config.description:
        info['description'] = config.description
    if config.terms_of_service:
        info['termsOfService'] = config.terms_of_service
    if config.contact:
        info['contact'] = config.contact.model_dump(exclude_none=True)
    if config.license:
        info['license'] = config.license.model_dump(exclude_none=True)
    info['version'] = config.version
    return info


def _tags(descriptors: Iterable[OperationDescriptor]) -> List[Dict[str, str]]:
    names: Dict[str, None] = {}
    for descriptor in descriptors:
        for tag in descriptor.tags:
            names.setdefault(tag, None)
    return [{'name': name} for name in names]


class _SchemaCollector:
    """Resolves body type names and remembers the named schemas referenced."""

    def __init__(self, ref_prefix: str):
        self.ref_prefix = ref_prefix
        self.named: Dict[str, Dict[str, Any]] = {}

    def schema_for(self, body_type: str) -> Dict[str, Any]:
        primitive = PRIMITIVE_SCHEMAS.get(body_type.lower())
        if primitive is not None:
            return dict(primitive)
        self.named.setdefault(body_type, {'type': 'object'})
        return {'$ref': f"{self.ref_prefix}{body_type}"}


def _operation_ids(descriptors: Iterable[OperationDescriptor]) -> List[Dict[str, str]]:
    """Per-descriptor method ids, rejecting any id that would appear twice."""
    seen: Dict[str, str] = {}
    resolved = []
    for descriptor in descriptors:
        ids = descriptor.operation_ids()
        for operation_id in ids.values():
            if operation_id in seen:
                raise DuplicateOperationError(
                    f"Operation id '{operation_id}' is produced by both '{seen[operation_id]}' "
                    f"and '{descriptor.operation_id}'"
                )
            seen[operation_id] = descriptor.operation_id
        resolved.append(ids)
    return resolved


def _operation_common(descriptor: OperationDescriptor, operation_id: str) -> Dict[str, Any]:
    operation: Dict[str, Any] = {}
    if descriptor.tags:
        operation['tags'] = list(descriptor.tags)
    if descriptor.summary:
        operation['summary'] = descriptor.summary
    if descriptor.description:
        operation['description'] = descriptor.description
    operation['operationId'] = operation_id
    return operation


def _response_v3(outcome: ResponseOutcome, schemas: _SchemaCollector) -> Dict[str, Any]:
    response: Dict[str, Any] = {'description': outcome.description}
    if outcome.summary:
        response['x-summary'] = outcome.summary
    if outcome.has_body:
        media: Dict[str, Any] = {}
        if outcome.body_type:
            media['schema'] = schemas.schema_for(outcome.body_type)
        response['content'] = {outcome.content_type: media}
    return response


def _response_v2(outcome: ResponseOutcome, schemas: _SchemaCollector) -> Dict[str, Any]:
    response: Dict[str, Any] = {'description': outcome.description}
    if outcome.summary:
        response['x-summary'] = outcome.summary
    if outcome.body_type:
        response['schema'] = schemas.schema_for(outcome.body_type)
    return response


def _paths(descriptors: Iterable[OperationDescriptor], version: OpenApiVersion, schemas: _SchemaCollector) -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    descriptors = list(descriptors)
    for descriptor, ids in zip(descriptors, _operation_ids(descriptors)):
        path_item = paths.setdefault(descriptor.route, {})
        for method in descriptor.methods:
            operation = _operation_common(descriptor, ids[method])

            if version is OpenApiVersion.V2:
                produces = list(dict.fromkeys(r.content_type for r in descriptor.responses if r.has_body))
                if produces:
                    operation['produces'] = produces
                render = _response_v2
            else:
                render = _response_v3

            operation['responses'] = {
                str(outcome.status_code): render(outcome, schemas)
                for outcome in descriptor.responses
            }
            if descriptor.visibility is not Visibility.UNDEFINED:
                operation['x-visibility'] = descriptor.visibility.value

            path_item[method] = operation
    return paths


def generate_document(
    config: OpenApiConfiguration,
    descriptors: Iterable[OperationDescriptor],
    request_host: Optional[str] = None,
    version: Optional[OpenApiVersion] = None
) -> Dict[str, Any]:
    """
    Assemble the API description.

    Args:
        config: Process-wide document configuration
        descriptors: Operation descriptors in registration order
        request_host: Base URI the caller reached the gateway on
        version: Document flavour; defaults to ``config.document_version``

    Returns:
        The document as plain dicts and lists, keys in output order

    Raises:
        DuplicateOperationError: two operations would share an operation id
    """
    version = OpenApiVersion(version or config.document_version)
    descriptors = list(descriptors)
    servers = derive_servers(config, request_host)

    if version is OpenApiVersion.V2:
        schemas = _SchemaCollector('#/definitions/')
        document: Dict[str, Any] = {'swagger': SWAGGER_V2_VERSION, 'info': _info(config)}
        if servers:
            primary = urlsplit(servers[0])
            document['host'] = primary.netloc
            document['basePath'] = primary.path or '/'
            document['schemes'] = list(dict.fromkeys(urlsplit(s).scheme for s in servers))
        tags = _tags(descriptors)
        if tags:
            document['tags'] = tags
        document['paths'] = _paths(descriptors, version, schemas)
        document['definitions'] = schemas.named
    else:
        schemas = _SchemaCollector('#/components/schemas/')
        document = {'openapi': OPENAPI_V3_VERSION, 'info': _info(config)}
        if servers:
            document['servers'] = [{'url': server} for server in servers]
        tags = _tags(descriptors)
        if tags:
            document['tags'] = tags
        document['paths'] = _paths(descriptors, version, schemas)
        document['components'] = {'schemas': schemas.named}

    return document


def render_document(document: Dict[str, Any], fmt: DocumentFormat) -> bytes:
    """Serialize a generated document to JSON or YAML bytes."""
    fmt = DocumentFormat(fmt)
    if fmt is DocumentFormat.JSON:
        return orjson.dumps(document, option=orjson.OPT_INDENT_2)
    return yaml.safe_dump(
        document,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False
    ).encode('utf-8')


class DocumentProvider:
    """
    Generates documents from a fixed configuration and a frozen registry.

    Example:
        provider = DocumentProvider(config, registry)
        body = provider.render(DocumentFormat.JSON, request_host='http://localhost:7071/api')
    """

    def __init__(self, config: OpenApiConfiguration, registry: OperationRegistry):
        self.config = config
        self.registry = registry

    def generate(self, request_host: Optional[str] = None, version: Optional[OpenApiVersion] = None) -> Dict[str, Any]:
        return generate_document(self.config, self.registry.descriptors(), request_host, version)

    def render(
        self,
        fmt: DocumentFormat,
        request_host: Optional[str] = None,
        version: Optional[OpenApiVersion] = None
    ) -> bytes:
        version = OpenApiVersion(version or self.config.document_version)
        with metrics.timer('openapi_render_ms', tags={'version': version.value, 'format': DocumentFormat(fmt).value}):
            body = render_document(self.generate(request_host, version), fmt)

        logger.debug(
            "Rendered OpenAPI document",
            extra={'version': version.value, 'format': DocumentFormat(fmt).value, 'bytes': len(body)}
        )
        return body
