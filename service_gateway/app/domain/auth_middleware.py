"""
Authentication middleware for Gateway.
"""

from fastapi import Request
from typing import Optional

from shared.logging import get_logger, set_user_context
from shared.errors import AuthenticationError, AuthorizationError, SessionExpiredError
from shared.metrics import MetricsCollector
from ..auth.tokens import Identity, TokenService, extract_token
from .permissions import PermissionMatrix


class AuthMiddleware:
    """Authentication middleware for Gateway."""

    def __init__(self, token_service: TokenService, permissions: PermissionMatrix,
                 metrics: Optional[MetricsCollector] = None):
        self.token_service = token_service
        self.permissions = permissions
        self.metrics = metrics
        self.logger = get_logger("gateway.auth_middleware")

    def authenticate_request(self, request: Request) -> Identity:
        """Authenticate incoming request with its bearer token."""
        token = extract_token(request)

        try:
            identity = self.token_service.verify(token)
        except SessionExpiredError as e:
            self._count_failure("session_expired")
            self.logger.warning("Token rejected", reason="session_expired", error=e.message)
            raise
        except AuthenticationError as e:
            self._count_failure("missing_token" if token is None else "invalid_token")
            self.logger.warning("Token rejected", reason=e.message)
            raise

        set_user_context(identity.subject, identity.role.value)
        try:
            request.state.identity = identity
        except AttributeError:
            pass

        return identity

    def authorize_request(self, identity: Identity, action: str) -> bool:
        """Authorize request against the permission matrix."""
        if not self.permissions.permits(identity.role, action):
            self._count_failure("forbidden")
            self.logger.warning(
                "Authorization denied",
                user_id=identity.subject,
                role=identity.role.value,
                action=action,
            )
            raise AuthorizationError(
                "Your role is not allowed to perform this action",
                details={"action": action, "role": identity.role.value},
            )

        self.logger.debug(
            "Request authorized",
            user_id=identity.subject,
            role=identity.role.value,
            action=action,
        )
        return True

    def process_request(self, request: Request, action: str) -> Optional[Identity]:
        """Process request with authentication and authorization.

        Public actions skip both steps and return None.
        """
        if self.permissions.is_public(action):
            return None

        identity = self.authenticate_request(request)
        self.authorize_request(identity, action)
        return identity

    def _count_failure(self, reason: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("auth_failures_total", reason=reason)
