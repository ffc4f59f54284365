"""
Unit tests for the scenario endpoint client.
"""

import httpx
import pytest

from service_gateway.app.adapters.scenario_client import ScenarioClient
from service_gateway.app.domain.request_transformer import OutboundRequest
from shared.errors import UpstreamUnavailableError
from shared.metrics import MetricsCollector
from shared.test_helpers import RecordingBackend


class TestScenarioClient:
    """Test cases for ScenarioClient."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("gateway")

    @pytest.fixture
    def outbound(self):
        return OutboundRequest(
            method="POST",
            url="https://hooks.test/read",
            params=[("id", "42")],
            headers={"Content-Type": "application/json"},
            content=b'{"a": 1}',
        )

    @pytest.mark.asyncio
    async def test_send_success(self, outbound, metrics):
        backend = RecordingBackend(lambda request: httpx.Response(
            200, content=b'{"rows": []}', headers={"content-type": "application/json"}))
        client = ScenarioClient(metrics=metrics, transport=backend.transport)

        result = await client.send(outbound, "read")
        await client.close()

        assert result.status_code == 200
        assert result.is_success
        assert result.content == b'{"rows": []}'
        assert result.content_type == "application/json"
        assert backend.calls == 1
        assert backend.last.method == "POST"
        assert str(backend.last.url) == "https://hooks.test/read?id=42"
        assert backend.last.content == b'{"a": 1}'
        assert metrics.registry.get_sample_value(
            "scenario_calls_total", {"action": "read", "outcome": "success"}) == 1
        assert metrics.registry.get_sample_value(
            "scenario_call_duration_seconds_count", {"action": "read"}) == 1

    @pytest.mark.asyncio
    async def test_binary_response_kept_as_bytes(self, outbound):
        pdf = b"%PDF-1.7\n\x00\xff\xfe binary \x89PNG"
        backend = RecordingBackend(lambda request: httpx.Response(
            200, content=pdf, headers={
                "content-type": "application/pdf",
                "content-disposition": 'attachment; filename="badge.pdf"',
            }))
        client = ScenarioClient(transport=backend.transport)

        result = await client.send(outbound, "badge")

        assert result.content == pdf
        assert result.content_type == "application/pdf"
        assert result.content_disposition == 'attachment; filename="badge.pdf"'

    @pytest.mark.asyncio
    async def test_error_status_returned_not_raised(self, outbound, metrics):
        backend = RecordingBackend(lambda request: httpx.Response(422, json={"error": "bad date"}))
        client = ScenarioClient(metrics=metrics, transport=backend.transport)

        result = await client.send(outbound, "leave")

        assert result.status_code == 422
        assert not result.is_success
        assert metrics.registry.get_sample_value(
            "scenario_calls_total", {"action": "leave", "outcome": "error_status"}) == 1

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self, outbound, metrics):
        def refuse(request):
            raise httpx.ConnectError("connection refused to hooks.test", request=request)

        backend = RecordingBackend(refuse)
        client = ScenarioClient(metrics=metrics, transport=backend.transport)

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.send(outbound, "read")

        assert exc_info.value.status_code == 502
        assert "hooks.test" not in exc_info.value.message
        assert exc_info.value.details == {}
        assert backend.calls == 1
        assert metrics.registry.get_sample_value(
            "scenario_calls_total", {"action": "read", "outcome": "unreachable"}) == 1
        assert metrics.registry.get_sample_value(
            "scenario_call_duration_seconds_count", {"action": "read"}) == 1

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self, outbound):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        backend = RecordingBackend(slow)
        client = ScenarioClient(transport=backend.transport)

        with pytest.raises(UpstreamUnavailableError):
            await client.send(outbound, "read")
        assert backend.calls == 1
