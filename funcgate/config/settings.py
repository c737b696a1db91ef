"""
Centralized configuration using Pydantic settings.

Configuration is loaded once from environment variables or a .env file
by load_settings() and handed to create_app(); nothing reads it through
a module-level global afterwards.
"""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..openapi.models import Contact, License, OpenApiConfiguration, OpenApiVersion

DEFAULT_DOC_TITLE = 'OpenAPI Document on the Function Gateway'
DEFAULT_DOC_DESCRIPTION = 'This is the OpenAPI Document on the Function Gateway'


class OpenApiSettings(BaseSettings):
    """OpenAPI document configuration."""

    doc_title: str = Field(DEFAULT_DOC_TITLE, validation_alias='OPENAPI_DOC_TITLE')
    doc_version: str = Field('1.0.0', validation_alias='OPENAPI_DOC_VERSION')
    doc_description: str = Field(DEFAULT_DOC_DESCRIPTION, validation_alias='OPENAPI_DOC_DESCRIPTION')
    title_suffix: str = Field(' (Injected)', validation_alias='OPENAPI_TITLE_SUFFIX')
    terms_of_service: Optional[str] = Field(
        'https://github.com/Azure/azure-functions-openapi-extension',
        validation_alias='OPENAPI_TERMS_OF_SERVICE'
    )

    contact_name: Optional[str] = Field('Test', validation_alias='OPENAPI_CONTACT_NAME')
    contact_email: Optional[str] = Field('test@localhost', validation_alias='OPENAPI_CONTACT_EMAIL')
    contact_url: Optional[str] = Field('https://localhost', validation_alias='OPENAPI_CONTACT_URL')
    license_name: Optional[str] = Field('MIT', validation_alias='OPENAPI_LICENSE_NAME')
    license_url: Optional[str] = Field('http://opensource.org/licenses/MIT', validation_alias='OPENAPI_LICENSE_URL')

    host_names: str = Field(
        '',
        validation_alias='OPENAPI_HOST_NAMES',
        description='Comma-separated server base URIs'
    )
    version: OpenApiVersion = Field(OpenApiVersion.V2, validation_alias='OPENAPI_VERSION')
    force_https: bool = Field(False, validation_alias='OPENAPI_FORCE_HTTPS')
    force_http: bool = Field(False, validation_alias='OPENAPI_FORCE_HTTP')
    include_requesting_host_name: Optional[bool] = Field(
        None,
        validation_alias='OPENAPI_INCLUDE_REQUESTING_HOST_NAME',
        description='Defaults to the development flag when unset'
    )

    model_config = SettingsConfigDict(case_sensitive=False, populate_by_name=True, extra='ignore')

    @field_validator('version', mode='before')
    @classmethod
    def validate_version(cls, v):
        if isinstance(v, str):
            v = v.lower()
            if v not in ('v2', 'v3'):
                raise ValueError('OpenAPI version must be "v2" or "v3"')
        return v

    @property
    def servers(self) -> List[str]:
        return [h.strip() for h in self.host_names.split(',') if h.strip()]

    def to_configuration(self, is_development: bool) -> OpenApiConfiguration:
        """
        Build the immutable document configuration.

        Raises:
            ConfigurationConflictError: if both force flags are set
        """
        include_host = self.include_requesting_host_name
        if include_host is None:
            include_host = is_development

        contact = None
        if self.contact_name or self.contact_email or self.contact_url:
            contact = Contact(name=self.contact_name, email=self.contact_email, url=self.contact_url)

        license_ = License(name=self.license_name, url=self.license_url) if self.license_name else None

        return OpenApiConfiguration(
            title=f"{self.doc_title}{self.title_suffix}",
            version=self.doc_version,
            description=self.doc_description,
            terms_of_service=self.terms_of_service,
            contact=contact,
            license=license_,
            servers=tuple(self.servers),
            document_version=self.version,
            include_requesting_host_name=include_host,
            force_https=self.force_https,
            force_http=self.force_http
        )


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    log_level: str = Field('INFO', validation_alias='LOG_LEVEL')
    log_format: str = Field('json', validation_alias='LOG_FORMAT', description='Log format: json or text')
    log_dir: Optional[str] = Field(None, validation_alias='LOG_DIR')

    model_config = SettingsConfigDict(case_sensitive=False, populate_by_name=True, extra='ignore')

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f'Log level must be one of {valid_levels}')
        return v

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ['json', 'text']:
            raise ValueError('Log format must be "json" or "text"')
        return v


class Settings(BaseSettings):
    """Main gateway settings."""

    host: str = Field('0.0.0.0', validation_alias='FUNCGATE_HOST')
    port: int = Field(7071, validation_alias='FUNCGATE_PORT')
    debug: bool = Field(False, validation_alias='FUNCGATE_DEBUG')
    environment: str = Field('Production', validation_alias='FUNCGATE_ENVIRONMENT')
    route_prefix: str = Field('api', validation_alias='FUNCGATE_ROUTE_PREFIX')

    sample_faults: bool = Field(
        True,
        validation_alias='FUNCGATE_SAMPLE_FAULTS',
        description='Make the sample handler fault on every call'
    )
    enable_metrics: bool = Field(True, validation_alias='ENABLE_METRICS')

    openapi: OpenApiSettings = Field(default_factory=OpenApiSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        populate_by_name=True,
        extra='ignore'
    )

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if v <= 0 or v > 65535:
            raise ValueError('Port must be between 1 and 65535')
        return v

    @field_validator('route_prefix')
    @classmethod
    def validate_route_prefix(cls, v):
        return v.strip('/')

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == 'development'

    def openapi_configuration(self) -> OpenApiConfiguration:
        return self.openapi.to_configuration(self.is_development)


def load_settings(**overrides) -> Settings:
    """Read settings from the environment (and .env), applying keyword overrides."""
    return Settings(**overrides)
