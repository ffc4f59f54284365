"""
Response relay and login interception.

Scenario responses are relayed byte-for-byte. The login action is the one
exception: a successful login body is parsed, a gateway token is minted and
merged into it, and the result is sent back as JSON. Anything that cannot be
read that way falls back to the raw relay.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Response
from fastapi.responses import JSONResponse

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..adapters.scenario_client import BackendResponse
from ..auth.tokens import TokenService, normalize_role


LOGIN_ACTION = "login"
LOGIN_SUCCESS_STATUS = "success"


def relay_raw(backend: BackendResponse) -> Response:
    """Mirror status, content type and body bytes."""
    headers: Dict[str, str] = {}
    if backend.content_type:
        headers["content-type"] = backend.content_type
    if backend.content_disposition:
        headers["content-disposition"] = backend.content_disposition
    return Response(content=backend.content, status_code=backend.status_code, headers=headers)


@dataclass(frozen=True)
class LoginInterception:
    """Outcome of reading a login response.

    ``payload`` is set for the structured outcome (token injected); it is None
    for the passthrough outcome.
    """

    payload: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @property
    def structured(self) -> bool:
        return self.payload is not None


class ResponseRelay:
    """Turns scenario responses into client responses."""

    def __init__(self, token_service: TokenService, metrics: Optional[MetricsCollector] = None,
                 login_action: str = LOGIN_ACTION):
        self.token_service = token_service
        self.metrics = metrics
        self.login_action = login_action
        self.logger = get_logger("gateway.relay")

    def relay(self, action: str, backend: BackendResponse) -> Response:
        if action != self.login_action:
            return relay_raw(backend)

        decision = self.intercept_login(backend)
        if decision.structured:
            return JSONResponse(content=decision.payload, status_code=backend.status_code)

        self.logger.info("Login response relayed unchanged", reason=decision.reason)
        return relay_raw(backend)

    def intercept_login(self, backend: BackendResponse) -> LoginInterception:
        """Decide between token injection and raw passthrough."""
        if not backend.is_success:
            return LoginInterception(reason="error_status")

        try:
            body = json.loads(backend.content)
        except ValueError:
            self.logger.warning("Login response is not valid JSON")
            return LoginInterception(reason="unparseable")

        if not isinstance(body, dict):
            return LoginInterception(reason="not_an_object")

        status = body.get("status")
        if not isinstance(status, str) or status.strip().lower() != LOGIN_SUCCESS_STATUS:
            return LoginInterception(reason="login_rejected")

        subject = body.get("id")
        if subject is None or str(subject) == "":
            self.logger.warning("Successful login response carries no id")
            return LoginInterception(reason="missing_identity")

        role = normalize_role(body.get("role"))
        display_name = body.get("name", body.get("nom"))
        token = self.token_service.issue(
            str(subject),
            role,
            display_name if isinstance(display_name, str) else None,
        )

        if self.metrics is not None:
            self.metrics.increment_counter("tokens_issued_total", role=role.value)
            self.metrics.record_business_event("login")
        self.logger.info("Token issued", user_id=str(subject), role=role.value)

        payload = dict(body)
        payload["role"] = role.value
        payload["token"] = token
        return LoginInterception(payload=payload)
