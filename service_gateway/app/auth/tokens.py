"""
Bearer token issuing and verification for the Gateway.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from jose import JWTError, jwt

from shared.config import INSECURE_DEV_SECRET, ServiceConfig
from shared.errors import AuthenticationError, ConfigurationError, SessionExpiredError
from shared.logging import get_logger

from ..domain.permissions import LOWEST_AUTHENTICATED_ROLE, Role


TOKEN_QUERY_PARAM = "token"
DEFAULT_TOKEN_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class Identity:
    """Caller identity recovered from a verified token."""

    subject: str
    role: Role
    display_name: Optional[str]
    expires_at: datetime


def normalize_role(value: Any) -> Role:
    """Map a backend-supplied role onto the enumeration.

    Missing or unrecognised values fall back to the lowest authenticated role.
    """
    role = Role.parse(value)
    if role is None or role is Role.GUEST:
        return LOWEST_AUTHENTICATED_ROLE
    return role


def extract_token(request: Request) -> Optional[str]:
    """Read the bearer token from the Authorization header, then the query string."""
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

    # Direct-navigation downloads cannot attach headers.
    token = request.query_params.get(TOKEN_QUERY_PARAM)
    if token and token.strip():
        return token.strip()
    return None


class TokenService:
    """Mints and validates HS256-signed gateway tokens."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not secret:
            raise ConfigurationError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = get_logger("gateway.auth.tokens")

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "TokenService":
        """Build from config, refusing the placeholder secret outside local runs."""
        if config.jwt_secret == INSECURE_DEV_SECRET:
            if not config.is_local:
                raise ConfigurationError(
                    "JWT_SECRET must be set outside local development",
                    details={"env": config.env},
                )
            get_logger("gateway.auth.tokens").warning(
                "Using insecure development signing secret", env=config.env
            )
        return cls(
            config.jwt_secret,
            algorithm=config.jwt_algorithm,
            ttl=timedelta(seconds=config.token_ttl_seconds),
        )

    def issue(self, identity: str, role: Any, display_name: Optional[str] = None) -> str:
        """Mint a token for a caller the login endpoint has accepted."""
        issued_at = self._clock()
        expires_at = issued_at + self.ttl
        claims: Dict[str, Any] = {
            "sub": str(identity),
            "name": display_name,
            "role": normalize_role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """Validate a token and return the identity it carries."""
        if not token:
            raise AuthenticationError("Authentication required")

        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise AuthenticationError("Malformed token") from exc

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except JWTError as exc:
            # Covers expiry and signature mismatch alike.
            raise SessionExpiredError() from exc

        # python-jose compares exp to the wall clock; enforce against ours too.
        now = self._clock()
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or exp <= now.timestamp():
            raise SessionExpiredError()

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise AuthenticationError("Token missing subject")

        role = Role.parse(claims.get("role"))
        if role is None or role is Role.GUEST:
            raise AuthenticationError("Token carries an unknown role")

        name = claims.get("name")
        return Identity(
            subject=subject,
            role=role,
            display_name=name if isinstance(name, str) else None,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
