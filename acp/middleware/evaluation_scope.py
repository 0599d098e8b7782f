"""Evaluation scope middleware.

Opens a fresh evaluation scope for every HTTP or WebSocket connection so
memoized policy instances never outlive the request that built them. The
scope is cleared on every exit path, including errors and disconnects.
Uses raw ASGI (no BaseHTTPMiddleware) so the scope's context variable is
visible to the route handler running in the same task.
"""

from typing import Callable

from acp.shared.scope import ScopeManager, ScopeOptions, scope_manager


def EvaluationScopeMiddleware(
    app: Callable,
    options: ScopeOptions | None = None,
    manager: ScopeManager | None = None,
) -> Callable:
    """Wrap each request in ScopeManager.new_scope(). Raw ASGI.

    Args:
        app: Downstream ASGI application.
        options: Scope toggles; defaults to ScopeOptions.from_settings() per request.
        manager: Scope manager (default: process-wide scope_manager).
    """
    manager = manager or scope_manager

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] not in ("http", "websocket"):
            await app(scope, receive, send)
            return
        with manager.new_scope(options) as evaluation_scope:
            scope.setdefault("state", {})["evaluation_scope"] = evaluation_scope
            await app(scope, receive, send)

    return asgi_app
