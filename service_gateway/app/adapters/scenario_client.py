"""
Scenario endpoint client for Gateway.
"""

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Optional

import httpx

from shared.logging import get_logger
from shared.errors import UpstreamUnavailableError
from shared.metrics import MetricsCollector
from ..domain.request_transformer import OutboundRequest


@dataclass(frozen=True)
class BackendResponse:
    """Raw scenario endpoint response."""

    status_code: int
    content: bytes
    content_type: Optional[str] = None
    content_disposition: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class ScenarioClient:
    """Calls scenario endpoints. One attempt per request, no retries."""

    def __init__(
        self,
        timeout: float = 30.0,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.logger = get_logger("gateway.scenario_client")
        self.metrics = metrics
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def send(self, outbound: OutboundRequest, action: str) -> BackendResponse:
        """Call the scenario endpoint and return its response as raw bytes."""
        self.logger.info("Proxying action", action=action, method=outbound.method)

        with self._timed(action):
            try:
                response = await self._client.request(**outbound.httpx_kwargs())
            except httpx.TransportError as e:
                # Endpoint URLs embed secrets: only the action and error class are logged.
                self.logger.error(
                    "Scenario endpoint unreachable",
                    action=action,
                    error_type=type(e).__name__,
                )
                self._count(action, "unreachable")
                raise UpstreamUnavailableError() from e

        self._count(action, "success" if response.is_success else "error_status")
        if not response.is_success:
            self.logger.warning(
                "Scenario endpoint returned error status",
                action=action,
                status_code=response.status_code,
            )

        return BackendResponse(
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type"),
            content_disposition=response.headers.get("content-disposition"),
        )

    def _timed(self, action: str):
        if self.metrics is None:
            return nullcontext()
        return self.metrics.time_operation("scenario_call_duration_seconds", action=action)

    def _count(self, action: str, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("scenario_calls_total", action=action, outcome=outcome)
