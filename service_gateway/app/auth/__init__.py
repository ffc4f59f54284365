"""
Authentication helpers for the Gateway service.
"""

from .tokens import Identity, TokenService, extract_token, normalize_role

__all__ = [
    "Identity",
    "TokenService",
    "extract_token",
    "normalize_role",
]
