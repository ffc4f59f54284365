"""
API Gateway service for the HR Scenario Gateway.
"""

from typing import Optional

import httpx
from fastapi import Request, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ActionNotFoundError
from .adapters.scenario_client import ScenarioClient
from .auth.tokens import TokenService
from .domain.auth_middleware import AuthMiddleware
from .domain.permissions import PermissionMatrix
from .domain.relay import ResponseRelay
from .domain.request_transformer import RequestTransformer
from .routing.action_router import ActionRouter


PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


class GatewayService(BaseService):
    """API Gateway service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("gateway", config)

        # Read-only after startup
        self.router = ActionRouter.from_config(self.config)
        self.permissions = PermissionMatrix.from_config(
            self.config.role_permissions,
            self.config.public_actions,
        )
        self.token_service = TokenService.from_config(self.config)

        self.auth_middleware = AuthMiddleware(self.token_service, self.permissions, self.metrics)
        self.transformer = RequestTransformer(self.config.routing_hint_param)
        self.scenario_client = ScenarioClient(
            timeout=self.config.upstream_timeout_seconds,
            metrics=self.metrics,
            transport=transport,
        )
        self.relay = ResponseRelay(self.token_service, self.metrics)

        self._setup_gateway_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _setup_gateway_routes(self):
        """Set up gateway-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "gateway",
                "message": "HR Scenario Gateway",
                "version": "1.0.0"
            }

        @self.app.api_route("/api/{action}", methods=PROXY_METHODS)
        async def proxy_action(action: str, request: Request) -> Response:
            """Route one action call to its scenario endpoint."""
            return await self.handle_action(action, request)

    async def handle_action(self, action: str, request: Request) -> Response:
        """Resolve, authenticate, authorize, forward and relay."""
        try:
            route = self.router.resolve(action)
        except ActionNotFoundError:
            self.logger.warning("Unknown action requested", action=action, method=request.method)
            raise

        self.auth_middleware.process_request(request, action)

        outbound = await self.transformer.build(request, route)
        backend = await self.scenario_client.send(outbound, action)
        return self.relay.relay(action, backend)

    async def _shutdown(self):
        await self.scenario_client.close()

    async def _check_dependencies(self):
        """Report the routing table size; scenario endpoints are not probed."""
        return {
            "routable_actions": str(len(self.router)),
            "public_actions": ",".join(sorted(self.permissions.public_actions)),
        }


def create_app(config: Optional[ServiceConfig] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None):
    """Create FastAPI application."""
    service = GatewayService(config, transport)
    return service.app


if __name__ == "__main__":
    service = GatewayService()
    service.logger.info("HR gateway starting", port=service.config.port)
    service.run()
