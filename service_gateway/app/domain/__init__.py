"""
Domain utilities for the Gateway Service.

Includes the permission matrix, auth middleware, outbound request building
and response relay: the request-processing steps that do not belong to
adapters or transport-specific layers.
"""

from .permissions import PermissionMatrix, Role

__all__ = [
    "PermissionMatrix",
    "Role",
]
