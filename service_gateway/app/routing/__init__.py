from .action_router import ActionRouter, Route

__all__ = ["ActionRouter", "Route"]
