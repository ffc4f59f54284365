"""
Unit tests for response relay and login interception.
"""

import json

import pytest

from service_gateway.app.adapters.scenario_client import BackendResponse
from service_gateway.app.auth.tokens import TokenService
from service_gateway.app.domain.permissions import Role
from service_gateway.app.domain.relay import ResponseRelay
from shared.metrics import MetricsCollector
from shared.test_helpers import TEST_SECRET, TestDataFactory


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET)


@pytest.fixture
def metrics():
    return MetricsCollector("gateway")


@pytest.fixture
def relay(token_service, metrics):
    return ResponseRelay(token_service, metrics)


def login_backend(payload, status_code=200):
    return BackendResponse(status_code=status_code, content=json.dumps(payload).encode(),
                           content_type="application/json")


class TestRawRelay:
    """Non-login actions are relayed byte for byte."""

    def test_pdf_passthrough(self, relay):
        pdf = b"%PDF-1.4\n\x00\x01\xff binary"
        backend = BackendResponse(200, pdf, "application/pdf", 'inline; filename="contract.pdf"')

        response = relay.relay("contract-gen", backend)

        assert response.status_code == 200
        assert response.body == pdf
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'inline; filename="contract.pdf"'

    def test_text_content_type_not_rewritten(self, relay):
        backend = BackendResponse(200, b"Accepted", "text/plain")

        response = relay.relay("log", backend)

        assert response.headers["content-type"] == "text/plain"
        assert response.body == b"Accepted"

    def test_error_status_relayed(self, relay):
        backend = BackendResponse(409, b'{"error":"already clocked in"}', "application/json")

        response = relay.relay("clock", backend)

        assert response.status_code == 409
        assert response.body == b'{"error":"already clocked in"}'

    def test_success_shaped_body_on_other_action_gets_no_token(self, relay):
        content = json.dumps(TestDataFactory.create_login_response()).encode()
        response = relay.relay("read", BackendResponse(200, content, "application/json"))

        assert response.body == content


class TestLoginInterception:
    """Token injection on the login action."""

    def test_successful_login_gets_token(self, relay, token_service, metrics):
        response = relay.relay("login", login_backend(TestDataFactory.create_login_response()))

        body = json.loads(response.body)
        assert response.status_code == 200
        assert body["status"] == "success"
        assert body["role"] == "MANAGER"
        assert body["nom"] == "Alice"
        identity = token_service.verify(body["token"])
        assert identity.subject == "u1"
        assert identity.role is Role.MANAGER
        assert identity.display_name == "Alice"
        assert metrics.registry.get_sample_value("tokens_issued_total", {"role": "MANAGER"}) == 1

    def test_login_without_role_defaults_to_employee(self, relay, token_service):
        response = relay.relay("login", login_backend(TestDataFactory.create_login_response(role=None)))

        body = json.loads(response.body)
        assert body["role"] == "EMPLOYEE"
        assert token_service.verify(body["token"]).role is Role.EMPLOYEE

    def test_name_field_preferred_over_nom(self, relay, token_service):
        payload = {"status": "success", "id": 7, "role": "hr", "name": "Hugo", "nom": "Hugues"}
        body = json.loads(relay.relay("login", login_backend(payload)).body)

        identity = token_service.verify(body["token"])
        assert identity.subject == "7"
        assert identity.display_name == "Hugo"

    def test_failed_login_is_passthrough(self, relay):
        backend = login_backend({"status": "error", "message": "bad password"})

        decision = relay.intercept_login(backend)
        response = relay.relay("login", backend)

        assert not decision.structured
        assert decision.reason == "login_rejected"
        assert response.body == backend.content
        assert "token" not in json.loads(response.body)

    def test_unparseable_login_response_is_passthrough(self, relay):
        backend = BackendResponse(200, b"<html>Scenario paused</html>", "text/html")

        decision = relay.intercept_login(backend)
        response = relay.relay("login", backend)

        assert decision.reason == "unparseable"
        assert response.body == b"<html>Scenario paused</html>"
        assert response.headers["content-type"] == "text/html"

    def test_non_object_json_is_passthrough(self, relay):
        backend = login_backend([{"status": "success", "id": "u1"}])
        assert relay.intercept_login(backend).reason == "not_an_object"

    def test_success_without_id_is_passthrough(self, relay):
        backend = login_backend({"status": "success", "role": "HR"})
        assert relay.intercept_login(backend).reason == "missing_identity"

    def test_error_status_login_is_passthrough(self, relay):
        backend = login_backend({"status": "success", "id": "u1"}, status_code=500)

        response = relay.relay("login", backend)

        assert response.status_code == 500
        assert response.body == backend.content
