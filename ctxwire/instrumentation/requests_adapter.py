"""requests transport adapter propagating context values."""

from __future__ import annotations

from typing import Iterable, Optional

import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from ctxwire.context.registry import PropagatorRegistry
from ctxwire.errors import ExtractError
from ctxwire.instrumentation.decorators import transport


class PropagatingAdapter(BaseAdapter):
    """
    Wrap another adapter so every request carries its context values and
    every response folds the peer's values back into the request context.

    Bind a context before sending with ``bind_request_context(prepared, ctx)``
    and read it back afterwards with ``get_request_context(response.request)``.
    The context follows the request through redirects, so the final response
    reports the values of every hop.
    """

    def __init__(self, adapter: Optional[BaseAdapter] = None, registry: Optional[PropagatorRegistry] = None) -> None:
        super().__init__()
        self.adapter = adapter if adapter is not None else HTTPAdapter()
        self.registry = registry

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        send = transport(lambda req: self.adapter.send(req, **kwargs), self.registry)
        try:
            return send(request)
        except ExtractError as exc:
            # The session never sees this response; consume it to return the
            # connection to the pool.
            exc.response.content
            exc.response.close()
            raise

    def close(self) -> None:
        self.adapter.close()


def mount_propagation(
    session: requests.Session,
    prefixes: Iterable[str] = ("https://", "http://"),
    registry: Optional[PropagatorRegistry] = None,
) -> requests.Session:
    """
    Wrap the adapters mounted on `session` for the given prefixes.

    Returns the same session for convenience.
    """
    for prefix in prefixes:
        current = session.adapters.get(prefix)
        if isinstance(current, PropagatingAdapter):
            continue
        session.mount(prefix, PropagatingAdapter(current, registry=registry))
    return session
