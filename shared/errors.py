"""
Shared error handling for the HR Scenario Gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for gateway errors."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(AccessLayerException):
    """Invalid process configuration, raised at startup."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ActionNotFoundError(AccessLayerException):
    """Requested action has no scenario endpoint."""

    status_code = 404

    def __init__(self, action: str):
        # The action name is kept off the response body; it is logged instead.
        self.action = action
        super().__init__("ACTION_NOT_FOUND", "Unknown action or scenario endpoint not configured")


class AuthenticationError(AccessLayerException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None,
                 code: str = "AUTHENTICATION_ERROR"):
        super().__init__(code, message, details)


class SessionExpiredError(AuthenticationError):
    """Token expired or its signature does not verify."""

    def __init__(self, message: str = "Session expired, please log in again",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="SESSION_EXPIRED")


class AuthorizationError(AccessLayerException):
    """Authorization-related errors."""

    status_code = 403

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class UpstreamUnavailableError(AccessLayerException):
    """Scenario endpoint could not be reached."""

    status_code = 502

    def __init__(self, message: str = "Upstream service unavailable"):
        super().__init__("UPSTREAM_UNAVAILABLE", message)
