"""Context helpers - using OpenTelemetry's context API directly."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from opentelemetry import context as context_api
from opentelemetry.context import Context


def create_key(name: str) -> str:
    """
    Create a unique context key.

    Two keys created with the same display name never collide.
    """
    return context_api.create_key(name)


def get_value(key: str, context: Optional[Context] = None) -> Any:
    """Return the value stored under key, or None when absent."""
    return context_api.get_value(key, context=context)


def set_value(key: str, value: Any, context: Optional[Context] = None) -> Context:
    """Return a new context extending `context` with key=value."""
    return context_api.set_value(key, value, context=context)


def get_current() -> Context:
    return context_api.get_current()


@contextmanager
def use_context(context: Context) -> Iterator[Context]:
    """
    Make `context` the current context for the duration of the block.

    Uses OpenTelemetry's attach/detach internally.
    """
    token = context_api.attach(context)
    try:
        yield context
    finally:
        context_api.detach(token)
