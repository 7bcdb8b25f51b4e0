"""Ordered registry applying every configured propagator as a unit."""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Set, Tuple

from opentelemetry import context as context_api
from opentelemetry.context import Context
from opentelemetry.propagators.textmap import Getter, Setter

from ctxwire import runtime_config
from ctxwire.context.propagators import Propagator, header_getter, header_setter
from ctxwire.errors import ConfigError, ExtractError, InjectError

logger = logging.getLogger(__name__)


class PropagatorRegistry(Propagator):
    """
    Ordered, append-only list of propagators.

    Inject and extract always run the propagators in registration order and
    stop at the first failure. Injection keeps the fields written before the
    failure; extraction returns no context at all.

    All operations are serialized behind one lock. Configure once at
    startup, before traffic begins.
    """

    def __init__(self, *propagators: Propagator) -> None:
        self._propagators: List[Propagator] = []
        self._lock = threading.Lock()
        if propagators:
            self.configure(*propagators)

    def __len__(self) -> int:
        with self._lock:
            return len(self._propagators)

    def __repr__(self) -> str:
        return f"PropagatorRegistry({self.propagators!r})"

    @property
    def propagators(self) -> Tuple[Propagator, ...]:
        """Snapshot of the registered propagators, in order."""
        with self._lock:
            return tuple(self._propagators)

    @property
    def fields(self) -> Set[str]:
        with self._lock:
            fields: Set[str] = set()
            for propagator in self._propagators:
                fields.update(propagator.fields)
            return fields

    def configure(self, *propagators: Propagator) -> None:
        """
        Append propagators after the ones already registered.

        Raises ConfigError, appending nothing, when two propagators would
        share a header field (see runtime_config.set_reject_duplicate_names).
        """
        with self._lock:
            if runtime_config.get_reject_duplicate_names():
                self._check_duplicates(propagators)
            self._propagators.extend(propagators)
            logger.debug(
                "Configured %d propagator(s), %d registered",
                len(propagators),
                len(self._propagators),
            )

    def _check_duplicates(self, propagators: Tuple[Propagator, ...]) -> None:
        seen = {field.lower() for p in self._propagators for field in p.fields}
        for propagator in propagators:
            for field in propagator.fields:
                if field.lower() in seen:
                    raise ConfigError("duplicate propagator header", details={"header": field})
                seen.add(field.lower())

    def inject(self, carrier: Any, context: Optional[Context] = None, setter: Setter = header_setter) -> None:
        """Inject every registered value into the carrier."""
        if context is None:
            context = context_api.get_current()
        with self._lock:
            for propagator in self._propagators:
                try:
                    propagator.inject(carrier, context, setter)
                except Exception as exc:
                    logger.debug("Injection stopped at %r: %s", propagator, exc)
                    raise InjectError("inject context values", cause=exc) from exc

    def extract(self, carrier: Any, context: Optional[Context] = None, getter: Getter = header_getter) -> Context:
        """Return a copy of the context extended with every registered value."""
        if context is None:
            context = context_api.get_current()
        with self._lock:
            for propagator in self._propagators:
                try:
                    context = propagator.extract(carrier, context, getter)
                except Exception as exc:
                    logger.debug("Extraction stopped at %r: %s", propagator, exc)
                    raise ExtractError("extract context values", cause=exc) from exc
        return context


_registry = PropagatorRegistry()


def get_registry() -> PropagatorRegistry:
    """Return the process-wide registry."""
    return _registry


def set_registry(registry: PropagatorRegistry) -> PropagatorRegistry:
    """Replace the process-wide registry and return the previous one."""
    global _registry
    previous = _registry
    _registry = registry
    return previous


def configure(*propagators: Propagator) -> None:
    """
    Configure the propagators used to propagate context values between
    requests and responses. Cumulative across calls.
    """
    _registry.configure(*propagators)


def inject(carrier: Any, context: Optional[Context] = None) -> None:
    """Inject the context values into the given headers."""
    _registry.inject(carrier, context)


def extract(carrier: Any, context: Optional[Context] = None) -> Context:
    """Extract the context values from the given headers into a copy of the context."""
    return _registry.extract(carrier, context)
