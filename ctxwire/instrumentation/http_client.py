"""HTTP client helpers for context propagation."""

from __future__ import annotations

from typing import Any, Optional

from opentelemetry.context import Context

from ctxwire.context.registry import PropagatorRegistry, get_registry


def inject_headers(
    headers: Any,
    context: Optional[Context] = None,
    registry: Optional[PropagatorRegistry] = None,
) -> Any:
    """
    Inject the context values into the outgoing request headers.

    Returns the same headers mapping for convenience.
    """
    (registry if registry is not None else get_registry()).inject(headers, context)
    return headers


def extract_response_context(
    headers: Any,
    context: Optional[Context] = None,
    registry: Optional[PropagatorRegistry] = None,
) -> Context:
    """Fold the values sent back in response headers into a copy of `context`."""
    return (registry if registry is not None else get_registry()).extract(headers, context)
