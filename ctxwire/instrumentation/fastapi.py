"""
FastAPI middleware helpers for propagating context values with the SDK.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from opentelemetry import context as context_api
from opentelemetry.context import Context

from ctxwire.context.context import use_context
from ctxwire.context.registry import PropagatorRegistry, get_registry
from ctxwire.errors import ExtractError, InjectError

logger = logging.getLogger(__name__)

_STATE_ATTR = "ctxwire_context"


def request_context(request: Any) -> Context:
    """Return the context of the request being handled."""
    context = getattr(request.state, _STATE_ATTR, None)
    if context is None:
        return context_api.get_current()
    return context


def update_request_context(request: Any, context: Context) -> None:
    """Replace the request context; its values are sent back with the response."""
    setattr(request.state, _STATE_ATTR, context)


def install_http_middleware(app: Any, *, registry: Optional[PropagatorRegistry] = None) -> None:
    """
    Attach an HTTP middleware propagating context values through each request.

    - Extracts incoming values from request headers and makes them current
    - Injects the handler's request context into the response headers
    """

    @app.middleware("http")
    async def ctxwire_middleware(request, call_next: Callable[[Any], Awaitable[Any]]):  # type: ignore
        reg = registry if registry is not None else get_registry()
        base = context_api.get_current()
        try:
            context = reg.extract(request.headers, base)
        except ExtractError as exc:
            # No caller to surface this to; serve the request without the values.
            logger.warning("Ignoring propagated context values on %s: %s", request.url.path, exc)
            context = base
        update_request_context(request, context)
        with use_context(context):
            response = await call_next(request)
        try:
            reg.inject(response.headers, request_context(request))
        except InjectError as exc:
            logger.warning("Failed to send context values back on %s: %s", request.url.path, exc)
        return response

    return None
