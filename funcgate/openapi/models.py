"""
Declarative OpenAPI metadata.

Operation descriptors and the document configuration are built once at
startup and never mutated afterwards, so requests share them without
locking.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ..exceptions import ConfigurationConflictError


class OpenApiVersion(str, Enum):
    V2 = 'v2'
    V3 = 'v3'


class DocumentFormat(str, Enum):
    JSON = 'json'
    YAML = 'yaml'

    @property
    def content_type(self) -> str:
        if self is DocumentFormat.JSON:
            return 'application/json'
        return 'text/vnd.yaml'


class Visibility(str, Enum):
    """How prominently a client generator should surface an operation."""
    UNDEFINED = 'undefined'
    IMPORTANT = 'important'
    ADVANCED = 'advanced'
    INTERNAL = 'internal'


@dataclass(frozen=True)
class ResponseOutcome:
    """One documented response of an operation."""
    status_code: int
    description: str
    summary: Optional[str] = None
    content_type: Optional[str] = None
    body_type: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'status_code', int(self.status_code))
        if self.body_type is not None and self.content_type is None:
            raise ValueError(f"Response {self.status_code} declares a body type without a content type")

    @property
    def has_body(self) -> bool:
        return self.content_type is not None


@dataclass(frozen=True)
class OperationDescriptor:
    """Documented contract of one handler."""
    operation_id: str
    route: str
    methods: Tuple[str, ...] = ('get',)
    tags: Tuple[str, ...] = ()
    summary: Optional[str] = None
    description: Optional[str] = None
    visibility: Visibility = Visibility.UNDEFINED
    responses: Tuple[ResponseOutcome, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.operation_id:
            raise ValueError("operation_id must be a non-empty string")

        # a bare string is one method, not a sequence of letters
        declared = (self.methods,) if isinstance(self.methods, str) else self.methods
        methods = tuple(dict.fromkeys(m.lower() for m in declared))
        if not methods:
            raise ValueError(f"Operation {self.operation_id} declares no HTTP methods")

        statuses = [r.status_code for r in self.responses]
        if len(statuses) != len(set(statuses)):
            raise ValueError(f"Operation {self.operation_id} declares a status code twice")

        object.__setattr__(self, 'route', '/' + self.route.strip('/'))
        object.__setattr__(self, 'methods', methods)
        tags = (self.tags,) if isinstance(self.tags, str) else self.tags
        object.__setattr__(self, 'tags', tuple(dict.fromkeys(tags)))
        object.__setattr__(self, 'responses', tuple(self.responses))

    def operation_ids(self) -> Dict[str, str]:
        """Document operation id per method; later methods get a method suffix."""
        return {
            method: self.operation_id if index == 0 else f"{self.operation_id}_{method}"
            for index, method in enumerate(self.methods)
        }


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None


class License(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: Optional[str] = None


class OpenApiConfiguration(BaseModel):
    """
    Process-wide document configuration.

    Constructing it with both protocol-forcing flags set raises
    ConfigurationConflictError.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    version: str = '1.0.0'
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact: Optional[Contact] = None
    license: Optional[License] = None
    servers: Tuple[str, ...] = ()
    document_version: OpenApiVersion = OpenApiVersion.V2
    include_requesting_host_name: bool = False
    force_https: bool = False
    force_http: bool = False

    @field_validator('servers')
    @classmethod
    def validate_servers(cls, v):
        for server in v:
            parts = urlsplit(server)
            if parts.scheme not in ('http', 'https') or not parts.netloc:
                raise ValueError(f'Server must be an absolute http(s) URI: {server!r}')
        return tuple(s.rstrip('/') for s in v)

    @model_validator(mode='after')
    def validate_protocol_flags(self):
        if self.force_https and self.force_http:
            raise ConfigurationConflictError(
                "force_https and force_http are both set; pick one protocol"
            )
        return self

    @property
    def forced_scheme(self) -> Optional[str]:
        if self.force_https:
            return 'https'
        if self.force_http:
            return 'http'
        return None
