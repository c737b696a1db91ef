"""
Integration tests for the Flask gateway.

Covers the end-to-end paths: faulting sample function through the
middleware chain, and documentation behind the environment gate.
"""

import json
import logging

import pytest
import yaml

from funcgate.exceptions import ConfigurationConflictError
from funcgate import server
from funcgate.observability import metrics
from funcgate.openapi import DocumentProvider
from funcgate.server import create_app, main

INTERCEPTOR_LOGGER = "funcgate.pipeline.middleware.FaultInterceptor"


class TestFunctionEndpoint:
    """Test the sample function through the full chain."""

    @pytest.mark.parametrize("method", ["get", "post"])
    def test_fault_yields_fallback_and_one_warning(self, production_app, caplog, method):
        client = production_app.test_client()

        with caplog.at_level(logging.WARNING, logger=INTERCEPTOR_LOGGER):
            response = getattr(client, method)("/api/Function1")

        assert response.status_code == 500
        assert response.data == b""

        records = [r for r in caplog.records if r.name == INTERCEPTOR_LOGGER]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "Ooops" in records[0].getMessage()

    def test_correlation_id_echoed(self, production_app):
        response = production_app.test_client().get(
            "/api/Function1",
            headers={"X-Correlation-ID": "req_test123"}
        )

        assert response.headers["X-Correlation-ID"] == "req_test123"

    def test_fault_log_carries_correlation_id(self, production_app, caplog):
        with caplog.at_level(logging.WARNING, logger=INTERCEPTOR_LOGGER):
            production_app.test_client().get("/api/Function1", headers={"X-Correlation-ID": "req_fault"})

        record = [r for r in caplog.records if r.name == INTERCEPTOR_LOGGER][0]
        assert record.correlation_id == "req_fault"
        assert record.path == "/api/Function1"

    def test_welcome_response_when_faults_disabled(self, make_settings):
        settings = make_settings()
        settings = settings.model_copy(update={"sample_faults": False})
        client = create_app(settings).test_client()

        response = client.get("/api/Function1")

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.data == b"Welcome to the function gateway!"
        assert "X-Response-Time-Ms" in response.headers

    def test_unsupported_method_is_405(self, production_app):
        response = production_app.test_client().delete("/api/Function1")

        assert response.status_code == 405
        assert response.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_unknown_route_is_empty_404(self, production_app):
        response = production_app.test_client().get("/api/Function2")

        assert response.status_code == 404
        assert response.headers["Content-Type"] == "text/plain"
        assert response.data == b""

    def test_faulted_requests_are_counted(self, production_app):
        client = production_app.test_client()

        for _ in range(5):
            assert client.get("/api/Function1").status_code == 500

        tags = {"method": "GET", "path": "/api/Function1", "status": "500"}
        assert metrics.get_counter("http_requests_total", tags=tags) == 5
        timings = metrics.get_summary()["timings"]["http_request_duration_ms"]
        assert timings["method=GET,path=/api/Function1,status=500"]["count"] == 5
        assert metrics.get_counter(
            "handler_faults_total",
            tags={"fault_type": "HandlerFault", "path": "/api/Function1"}
        ) == 5


class TestDocumentationEndpoints:
    """Test environment-gated documentation."""

    @pytest.mark.parametrize("path", [
        "/api/swagger.json",
        "/api/swagger.yaml",
        "/api/openapi/v2.json",
        "/api/openapi/v3.yaml",
    ])
    def test_production_hides_documents(self, production_app, monkeypatch, path):
        calls = []
        original = DocumentProvider.generate

        def spy(self, *args, **kwargs):
            calls.append(args)
            return original(self, *args, **kwargs)

        monkeypatch.setattr(DocumentProvider, "generate", spy)

        response = production_app.test_client().get(path)

        assert response.status_code == 404
        assert response.headers["Content-Type"] == "text/plain"
        assert response.data == b""
        assert calls == []

    @pytest.mark.parametrize("method", ["post", "put", "patch", "delete"])
    def test_hidden_documents_look_like_missing_routes(self, production_app, method):
        """Any method on a hidden document answers exactly like an unknown path."""
        client = production_app.test_client()

        hidden = client.get("/api/swagger.json")
        missing = client.get("/api/nothing.json")
        other_method = client.open("/api/swagger.json", method=method.upper())
        versioned = client.open("/api/openapi/v3.yaml", method=method.upper())

        for response in (missing, other_method, versioned):
            assert response.status_code == hidden.status_code == 404
            assert response.headers["Content-Type"] == hidden.headers["Content-Type"]
            assert response.data == hidden.data == b""

    def test_development_serves_swagger_json(self, development_app):
        response = development_app.test_client().get("/api/swagger.json")

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "application/json"
        document = json.loads(response.data)
        assert document["swagger"] == "2.0"
        assert document["info"]["title"].endswith("(Injected)")
        assert document["paths"]["/Function1"]["get"]["operationId"] == "updatePet"

    def test_development_includes_requesting_host(self, development_app):
        response = development_app.test_client().get("/api/openapi/v3.json", base_url="http://localhost:7071")

        document = json.loads(response.data)
        assert document["openapi"] == "3.0.1"
        assert document["servers"] == [{"url": "http://localhost:7071/api"}]

    def test_development_serves_yaml(self, development_app):
        response = development_app.test_client().get("/api/openapi/v3.yaml")

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "text/vnd.yaml"
        assert yaml.safe_load(response.data)["paths"]["/Function1"]["post"]["operationId"] == "updatePet_post"

    def test_documents_are_stable_across_requests(self, development_app):
        client = development_app.test_client()

        first = client.get("/api/openapi/v3.json").data
        second = client.get("/api/openapi/v3.json").data

        assert first == second

    def test_unknown_version_is_404(self, development_app):
        assert development_app.test_client().get("/api/openapi/v4.json").status_code == 404


class TestStartup:
    """Test startup validation."""

    def test_conflicting_protocol_flags_prevent_startup(self, make_settings):
        settings = make_settings(force_https=True, force_http=True)

        with pytest.raises(ConfigurationConflictError):
            create_app(settings)

    def test_registry_frozen_after_startup(self, production_app):
        gateway = production_app.extensions["funcgate"]

        assert gateway.registry.frozen is True

    def test_custom_route_prefix(self, make_settings):
        settings = make_settings("Development").model_copy(update={"route_prefix": "functions"})
        client = create_app(settings).test_client()

        assert client.get("/functions/Function1").status_code == 500
        assert client.get("/functions/swagger.json").status_code == 200

    def test_invalid_settings_exit_non_zero(self, monkeypatch, tmp_path, caplog):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FUNCGATE_PORT", "0")

        with caplog.at_level(logging.CRITICAL, logger="funcgate.server"):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert any(r.levelno == logging.CRITICAL for r in caplog.records if r.name == "funcgate.server")

    def test_startup_conflict_exits_non_zero(self, monkeypatch, tmp_path, caplog):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OPENAPI_FORCE_HTTPS", "true")
        monkeypatch.setenv("OPENAPI_FORCE_HTTP", "true")
        monkeypatch.setattr(server, "setup_logging", lambda **kwargs: None)

        with caplog.at_level(logging.CRITICAL, logger="funcgate.server"):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        record = [r for r in caplog.records if r.name == "funcgate.server"][-1]
        assert record.error_type == "ConfigurationConflictError"
