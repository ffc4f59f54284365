"""
Shared configuration management for the HR Scenario Gateway.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


INSECURE_DEV_SECRET = "dev-only-insecure-secret-change-me"


class ClusterConfig(BaseModel):
    """Several actions served by one scenario endpoint."""

    url: str
    actions: List[str] = Field(default_factory=list)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Security
    jwt_secret: str = Field(default=INSECURE_DEV_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_seconds: int = Field(default=24 * 60 * 60)

    # Upstream calls
    upstream_timeout_seconds: float = Field(default=30.0)


class ServiceConfig(BaseConfig):
    """Gateway configuration: routing table inputs and access policy."""

    service_name: str = "gateway"

    # Scenario endpoints, one per action
    url_login: Optional[str] = None
    url_read: Optional[str] = None
    url_write_post: Optional[str] = None
    url_update: Optional[str] = None
    url_log: Optional[str] = None
    url_read_logs: Optional[str] = None
    url_gatekeeper: Optional[str] = None
    url_badge_gen: Optional[str] = None
    url_employee_update: Optional[str] = None
    url_contract_generate: Optional[str] = None
    url_upload_signed_contract: Optional[str] = None
    url_leave_request: Optional[str] = None
    url_clock_action: Optional[str] = None

    # Shared scenario endpoints keyed by cluster name
    scenario_clusters: Dict[str, ClusterConfig] = Field(default_factory=dict)
    routing_hint_param: str = Field(default="action")

    # Access policy
    public_actions: List[str] = Field(default_factory=lambda: ["login"])
    role_permissions: Optional[Dict[str, List[str]]] = None

    @property
    def is_local(self) -> bool:
        return self.env.lower() in ("local", "dev", "development", "test")


def get_config(service_name: str = "gateway", **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
