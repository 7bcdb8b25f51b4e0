"""
Transport decorators wiring the registry into a request/response exchange.

An exchange primitive is any callable taking a request and returning a
response, both exposing a mutable ``headers`` mapping. The context of a
request is bound to the request object itself so callers can read the
back-propagated values once the exchange returns.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import MutableMapping
from typing import Any, Awaitable, Callable, Optional, TypeVar

from opentelemetry import context as context_api
from opentelemetry.context import Context

from ctxwire.context.registry import PropagatorRegistry, get_registry
from ctxwire.errors import ExtractError

logger = logging.getLogger(__name__)

# Key of the request context in httpx request extensions.
CONTEXT_EXTENSION = "ctxwire.context"
_CONTEXT_ATTR = "_ctxwire_context"

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")
Send = Callable[[RequestT], ResponseT]
AsyncSend = Callable[[RequestT], Awaitable[ResponseT]]


class _ContextHook:
    """
    No-op response hook holding a request context.

    requests' ``PreparedRequest.copy()`` drops unknown attributes but shares
    the ``hooks`` dict, so a context held here follows the request through
    every redirect hop.
    """

    def __init__(self, context: Context) -> None:
        self.context = context

    def __call__(self, response, **kwargs):
        return None


def _context_hook(request: Any) -> Optional[_ContextHook]:
    hooks = getattr(request, "hooks", None)
    if not isinstance(hooks, MutableMapping):
        return None
    for hook in hooks.get("response") or ():
        if isinstance(hook, _ContextHook):
            return hook
    return None


def bind_request_context(request: Any, context: Context) -> None:
    """Associate a context with a request object."""
    extensions = getattr(request, "extensions", None)
    if isinstance(extensions, MutableMapping):
        extensions[CONTEXT_EXTENSION] = context
        return
    hooks = getattr(request, "hooks", None)
    if not isinstance(hooks, MutableMapping):
        setattr(request, _CONTEXT_ATTR, context)
        return
    hook = _context_hook(request)
    if hook is None:
        hooks.setdefault("response", []).append(_ContextHook(context))
    else:
        hook.context = context


def get_request_context(request: Any) -> Context:
    """Return the context bound to a request, or the current context."""
    extensions = getattr(request, "extensions", None)
    if isinstance(extensions, MutableMapping):
        context = extensions.get(CONTEXT_EXTENSION)
    else:
        hook = _context_hook(request)
        context = hook.context if hook is not None else getattr(request, _CONTEXT_ATTR, None)
    if context is None:
        return context_api.get_current()
    return context


def _resolve(registry: Optional[PropagatorRegistry]) -> PropagatorRegistry:
    # Looked up per call so set_registry() applies to already built transports.
    return registry if registry is not None else get_registry()


def _inject_request(request: Any, registry: Optional[PropagatorRegistry]) -> None:
    context = get_request_context(request)
    _resolve(registry).inject(request.headers, context)
    # Pin the context so extraction folds into the one that was sent.
    bind_request_context(request, context)


def _extract_response(request: Any, response: Any, registry: Optional[PropagatorRegistry]) -> None:
    try:
        context = _resolve(registry).extract(response.headers, get_request_context(request))
    except ExtractError as exc:
        logger.debug("Back-propagation failed: %s", exc)
        exc.response = response
        raise
    bind_request_context(request, context)


def inject_transport(send: Send, registry: Optional[PropagatorRegistry] = None) -> Send:
    """
    Decorate `send` to inject the request's context values into its headers.

    An injection failure raises InjectError and `send` is never called.
    """

    @functools.wraps(send)
    def wrapper(request):
        _inject_request(request, registry)
        return send(request)

    return wrapper


def extract_transport(send: Send, registry: Optional[PropagatorRegistry] = None) -> Send:
    """
    Decorate `send` to extract context values from the response headers.

    The extracted context is rebound on the request. On failure the
    ExtractError carries the response; exceptions from `send` pass through.
    """

    @functools.wraps(send)
    def wrapper(request):
        response = send(request)
        _extract_response(request, response, registry)
        return response

    return wrapper


def transport(send: Send, registry: Optional[PropagatorRegistry] = None) -> Send:
    """Decorate `send` to propagate context values both ways."""
    return inject_transport(extract_transport(send, registry), registry)


def async_inject_transport(send: AsyncSend, registry: Optional[PropagatorRegistry] = None) -> AsyncSend:
    """Coroutine version of inject_transport."""

    @functools.wraps(send)
    async def wrapper(request):
        _inject_request(request, registry)
        return await send(request)

    return wrapper


def async_extract_transport(send: AsyncSend, registry: Optional[PropagatorRegistry] = None) -> AsyncSend:
    """Coroutine version of extract_transport."""

    @functools.wraps(send)
    async def wrapper(request):
        response = await send(request)
        _extract_response(request, response, registry)
        return response

    return wrapper


def async_transport(send: AsyncSend, registry: Optional[PropagatorRegistry] = None) -> AsyncSend:
    """Coroutine version of transport."""
    return async_inject_transport(async_extract_transport(send, registry), registry)
