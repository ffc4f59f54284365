"""
Role-based permission matrix for Gateway actions.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Union

from shared.errors import ConfigurationError
from shared.logging import get_logger


class Role(str, Enum):
    """Closed set of caller roles."""
    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"
    GUEST = "GUEST"

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        """Case-insensitive lookup; None for anything outside the enumeration."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


LOWEST_AUTHENTICATED_ROLE = Role.EMPLOYEE

_EMPLOYEE_ACTIONS = frozenset({"read", "log", "badge", "contract-upload", "leave", "clock"})
_MANAGER_ACTIONS = _EMPLOYEE_ACTIONS - {"contract-upload"} | {"update", "read-logs", "gatekeeper"}
_HR_ACTIONS = _EMPLOYEE_ACTIONS | _MANAGER_ACTIONS | {"write", "emp-update", "contract-gen"}

DEFAULT_ROLE_PERMISSIONS: Mapping[Role, FrozenSet[str]] = MappingProxyType({
    Role.ADMIN: _HR_ACTIONS,
    Role.HR: _HR_ACTIONS,
    Role.MANAGER: _MANAGER_ACTIONS,
    Role.EMPLOYEE: _EMPLOYEE_ACTIONS,
    Role.GUEST: frozenset(),
})


class PermissionMatrix:
    """Static role -> allowed actions lookup.

    Public actions bypass the matrix. Every other (role, action) pair is
    denied unless the role's set names the action explicitly.
    """

    def __init__(
        self,
        role_permissions: Mapping[Role, Iterable[str]] = DEFAULT_ROLE_PERMISSIONS,
        public_actions: Iterable[str] = ("login",),
    ):
        self.logger = get_logger("gateway.permissions")
        self._matrix: Mapping[Role, FrozenSet[str]] = MappingProxyType({
            role: frozenset(actions) for role, actions in role_permissions.items()
        })
        self._public: FrozenSet[str] = frozenset(public_actions)

    @classmethod
    def from_config(
        cls,
        role_permissions: Optional[Dict[str, Iterable[str]]],
        public_actions: Iterable[str],
    ) -> "PermissionMatrix":
        """Build from an optional override keyed by role name."""
        if role_permissions is None:
            return cls(DEFAULT_ROLE_PERMISSIONS, public_actions)

        matrix: Dict[Role, FrozenSet[str]] = {}
        for name, actions in role_permissions.items():
            role = Role.parse(name)
            if role is None:
                raise ConfigurationError(
                    f"Unknown role '{name}' in permission matrix",
                    details={"role": name, "allowed": [r.value for r in Role]},
                )
            matrix[role] = frozenset(actions)
        return cls(matrix, public_actions)

    def is_public(self, action: str) -> bool:
        return action in self._public

    @property
    def public_actions(self) -> FrozenSet[str]:
        return self._public

    def permits(self, role: Union[Role, str, None], action: str) -> bool:
        """Return True only when the role's set explicitly names the action."""
        parsed = Role.parse(role)
        if parsed is None:
            return False
        return action in self._matrix.get(parsed, frozenset())

    def allowed_actions(self, role: Union[Role, str, None]) -> FrozenSet[str]:
        parsed = Role.parse(role)
        if parsed is None:
            return frozenset()
        return self._matrix.get(parsed, frozenset())
