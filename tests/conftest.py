"""
Pytest configuration and shared fixtures.
"""

import pytest

from funcgate.config import Settings, OpenApiSettings
from funcgate.observability import metrics
from funcgate.openapi import Contact, License, OpenApiConfiguration, OpenApiVersion
from funcgate.pipeline import Request
from funcgate.server import create_app


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty metrics collector."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def make_request():
    """Factory for pipeline requests."""

    def _make(method='GET', path='/api/Function1', headers=None, body=b'', host_url='http://localhost:7071/'):
        return Request(
            method=method,
            path=path,
            headers=headers or {},
            body=body,
            host_url=host_url
        )

    return _make


@pytest.fixture
def openapi_config():
    """A fully populated document configuration."""
    return OpenApiConfiguration(
        title='Pet Gateway (Injected)',
        version='1.0.0',
        description='This is the OpenAPI Document on the Function Gateway',
        terms_of_service='https://github.com/Azure/azure-functions-openapi-extension',
        contact=Contact(name='Test', email='test@localhost', url='https://localhost'),
        license=License(name='MIT', url='http://opensource.org/licenses/MIT'),
        servers=('https://pets.example.com/api',),
        document_version=OpenApiVersion.V3
    )


@pytest.fixture
def make_settings():
    """Settings factory that ignores the surrounding environment's .env file."""

    def _make(environment='Production', **openapi_overrides):
        return Settings(
            environment=environment,
            openapi=OpenApiSettings(**openapi_overrides),
            _env_file=None
        )

    return _make


@pytest.fixture
def production_app(make_settings):
    return create_app(make_settings('Production'))


@pytest.fixture
def development_app(make_settings):
    return create_app(make_settings('Development'))
