"""HTTP server helpers for extracting incoming and injecting outgoing context."""

from __future__ import annotations

from typing import Any, Optional

from opentelemetry.context import Context

from ctxwire.context.registry import PropagatorRegistry, get_registry


def extract_request_context(
    headers: Any,
    context: Optional[Context] = None,
    registry: Optional[PropagatorRegistry] = None,
) -> Context:
    """Parse the propagated values from request headers into a copy of `context`."""
    return (registry if registry is not None else get_registry()).extract(headers, context)


def inject_response_headers(
    headers: Any,
    context: Optional[Context] = None,
    registry: Optional[PropagatorRegistry] = None,
) -> Any:
    """
    Write the handler's context values into the response headers, sending
    them back to the caller. Returns the same headers mapping.
    """
    (registry if registry is not None else get_registry()).inject(headers, context)
    return headers
