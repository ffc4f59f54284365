"""
Unit tests for the permission matrix.
"""

import pytest

from service_gateway.app.domain.permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    PermissionMatrix,
    Role,
)
from service_gateway.app.routing.action_router import ACTION_URL_SETTINGS
from shared.errors import ConfigurationError


@pytest.fixture
def matrix():
    return PermissionMatrix()


@pytest.mark.parametrize("value, expected", [
    ("manager", Role.MANAGER),
    ("Hr", Role.HR),
    (" ADMIN ", Role.ADMIN),
    (Role.EMPLOYEE, Role.EMPLOYEE),
    ("intern", None),
    ("", None),
    (None, None),
    (3, None),
])
def test_role_parse(value, expected):
    assert Role.parse(value) is expected


def test_login_is_public_and_outside_matrix(matrix):
    assert matrix.is_public("login")
    for role in Role:
        assert not matrix.permits(role, "login")


def test_admin_has_every_non_public_action(matrix):
    for action in ACTION_URL_SETTINGS:
        if action == "login":
            continue
        assert matrix.permits(Role.ADMIN, action), action


@pytest.mark.parametrize("role, action, allowed", [
    (Role.HR, "contract-gen", True),
    (Role.HR, "emp-update", True),
    (Role.MANAGER, "read-logs", True),
    (Role.MANAGER, "contract-gen", False),
    (Role.MANAGER, "write", False),
    (Role.EMPLOYEE, "clock", True),
    (Role.EMPLOYEE, "contract-upload", True),
    (Role.EMPLOYEE, "read-logs", False),
    (Role.EMPLOYEE, "emp-update", False),
    (Role.GUEST, "read", False),
])
def test_default_matrix(matrix, role, action, allowed):
    assert matrix.permits(role, action) is allowed


def test_unknown_role_is_denied(matrix):
    assert matrix.permits("superuser", "read") is False
    assert matrix.permits(None, "read") is False
    assert matrix.allowed_actions("superuser") == frozenset()


def test_role_names_are_case_insensitive(matrix):
    assert matrix.permits("employee", "clock")


def test_unlisted_action_is_denied(matrix):
    assert matrix.permits(Role.ADMIN, "drop-database") is False


def test_permission_checks_are_deterministic(matrix):
    results = {matrix.permits(Role.MANAGER, "update") for _ in range(100)}
    assert results == {True}


def test_from_config_defaults():
    matrix = PermissionMatrix.from_config(None, ["login", "gatekeeper"])
    assert matrix.is_public("gatekeeper")
    assert matrix.allowed_actions(Role.HR) == DEFAULT_ROLE_PERMISSIONS[Role.HR]


def test_from_config_override():
    matrix = PermissionMatrix.from_config({"employee": ["read"], "ADMIN": ["read", "write"]}, ["login"])
    assert matrix.permits(Role.EMPLOYEE, "read")
    assert not matrix.permits(Role.EMPLOYEE, "clock")
    # Roles left out of an override have no actions.
    assert not matrix.permits(Role.HR, "read")


def test_from_config_rejects_unknown_role():
    with pytest.raises(ConfigurationError):
        PermissionMatrix.from_config({"intern": ["read"]}, ["login"])
