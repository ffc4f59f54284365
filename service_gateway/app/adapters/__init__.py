"""
Adapters package for the Gateway Service.

Contains the HTTP client wrapper for scenario endpoints. The adapter
encapsulates:

- The shared httpx client and its timeout policy
- Translation of transport failures into shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .scenario_client import BackendResponse, ScenarioClient

__all__ = [
    "BackendResponse",
    "ScenarioClient",
]
