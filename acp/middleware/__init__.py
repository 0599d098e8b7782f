"""ASGI middleware for hosts that authorize per request."""

from acp.middleware.evaluation_scope import EvaluationScopeMiddleware

__all__ = ["EvaluationScopeMiddleware"]
