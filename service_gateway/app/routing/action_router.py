"""
Action routing table for the Gateway.

Maps the symbolic action a client calls (``/api/<action>``) to the scenario
endpoint that executes it. Several actions may share one endpoint (a
cluster); those routes carry a routing hint so the shared endpoint can tell
which action triggered the call.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from shared.config import ClusterConfig, ServiceConfig
from shared.errors import ActionNotFoundError, ConfigurationError
from shared.logging import get_logger


# Action name -> config field holding its dedicated scenario endpoint URL.
ACTION_URL_SETTINGS: Mapping[str, str] = MappingProxyType({
    "login": "url_login",
    "read": "url_read",
    "write": "url_write_post",
    "update": "url_update",
    "log": "url_log",
    "read-logs": "url_read_logs",
    "gatekeeper": "url_gatekeeper",
    "badge": "url_badge_gen",
    "emp-update": "url_employee_update",
    "contract-gen": "url_contract_generate",
    "contract-upload": "url_upload_signed_contract",
    "leave": "url_leave_request",
    "clock": "url_clock_action",
})


@dataclass(frozen=True)
class Route:
    """Resolved destination for one action."""

    action: str
    url: str
    routing_hint: Optional[str] = None
    cluster: Optional[str] = None

    @property
    def clustered(self) -> bool:
        return self.cluster is not None


class ActionRouter:
    """Read-only action -> scenario endpoint table."""

    def __init__(self, direct: Dict[str, str], clusters: Optional[Dict[str, ClusterConfig]] = None):
        self.logger = get_logger("gateway.router")
        table: Dict[str, Route] = {}

        for action, url in direct.items():
            if url:
                table[action] = Route(action=action, url=url)

        for name, cluster in (clusters or {}).items():
            if not cluster.url:
                raise ConfigurationError(
                    f"Cluster '{name}' has no endpoint URL",
                    details={"cluster": name},
                )
            for action in cluster.actions:
                if action in table:
                    raise ConfigurationError(
                        f"Action '{action}' is mapped to more than one scenario endpoint",
                        details={"action": action, "cluster": name},
                    )
                table[action] = Route(action=action, url=cluster.url, routing_hint=action, cluster=name)

        self._routes: Mapping[str, Route] = MappingProxyType(table)

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "ActionRouter":
        """Build the table from per-action URLs and cluster definitions."""
        direct = {
            action: getattr(config, setting) or ""
            for action, setting in ACTION_URL_SETTINGS.items()
        }
        clusters = config.scenario_clusters
        router = cls(direct, clusters)
        router.logger.info(
            "Routing table loaded",
            actions=router.actions(),
            clusters=sorted(clusters),
        )
        return router

    def resolve(self, action: str) -> Route:
        """Return the route for ``action`` or raise ActionNotFoundError."""
        route = self._routes.get(action)
        if route is None:
            raise ActionNotFoundError(action)
        return route

    def is_routable(self, action: str) -> bool:
        return action in self._routes

    def actions(self) -> List[str]:
        return sorted(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

