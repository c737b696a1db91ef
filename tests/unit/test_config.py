"""
Unit tests for configuration module.
"""

import pytest
from pydantic import ValidationError

from funcgate.config import Settings, OpenApiSettings, ObservabilitySettings, load_settings
from funcgate.exceptions import ConfigurationConflictError
from funcgate.openapi import OpenApiVersion


class TestSettings:
    """Test main gateway settings."""

    def test_default_settings(self, make_settings):
        settings = make_settings()

        assert settings.port == 7071
        assert settings.route_prefix == 'api'
        assert settings.sample_faults is True
        assert settings.is_development is False

    @pytest.mark.parametrize("environment", ['Development', 'development', ' DEVELOPMENT '])
    def test_development_flag(self, make_settings, environment):
        assert make_settings(environment).is_development is True

    @pytest.mark.parametrize("environment", ['Production', 'Staging', ''])
    def test_non_development_environments(self, make_settings, environment):
        assert make_settings(environment).is_development is False

    def test_environment_variable_override(self, monkeypatch):
        monkeypatch.setenv("FUNCGATE_ENVIRONMENT", "Development")
        monkeypatch.setenv("FUNCGATE_PORT", "8080")
        monkeypatch.setenv("FUNCGATE_ROUTE_PREFIX", "/functions/")

        settings = load_settings(_env_file=None)

        assert settings.is_development is True
        assert settings.port == 8080
        assert settings.route_prefix == 'functions'

    def test_invalid_port_rejected(self):
        with pytest.raises(ValidationError):
            Settings(port=70000, _env_file=None)


class TestOpenApiSettings:
    """Test OpenAPI settings and the configuration they build."""

    def test_host_names_split(self):
        settings = OpenApiSettings(host_names='https://a.example.com/api, http://b.example.com/api,')

        assert settings.servers == ['https://a.example.com/api', 'http://b.example.com/api']

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_DOC_TITLE", "Pets")
        monkeypatch.setenv("OPENAPI_VERSION", "V3")
        monkeypatch.setenv("OPENAPI_FORCE_HTTPS", "true")

        settings = OpenApiSettings()

        assert settings.doc_title == 'Pets'
        assert settings.version is OpenApiVersion.V3
        assert settings.force_https is True

    def test_invalid_version_rejected(self):
        with pytest.raises(ValidationError):
            OpenApiSettings(version='v4')

    def test_to_configuration_defaults(self):
        config = OpenApiSettings().to_configuration(is_development=False)

        assert config.title.endswith(' (Injected)')
        assert config.contact.email == 'test@localhost'
        assert config.license.name == 'MIT'
        assert config.document_version is OpenApiVersion.V2
        assert config.include_requesting_host_name is False

    def test_requesting_host_follows_development_flag(self):
        assert OpenApiSettings().to_configuration(is_development=True).include_requesting_host_name is True

    def test_requesting_host_explicit_override(self):
        settings = OpenApiSettings(include_requesting_host_name=False)

        assert settings.to_configuration(is_development=True).include_requesting_host_name is False

    def test_both_force_flags_fail_fast(self):
        settings = OpenApiSettings(force_https=True, force_http=True)

        with pytest.raises(ConfigurationConflictError):
            settings.to_configuration(is_development=False)


class TestObservabilitySettings:
    """Test observability-specific settings."""

    def test_log_level_normalised(self):
        assert ObservabilitySettings(log_level='debug').log_level == 'DEBUG'

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            ObservabilitySettings(log_level='verbose')

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValidationError):
            ObservabilitySettings(log_format='xml')

    def test_log_dir_optional(self):
        assert ObservabilitySettings().log_dir is None
