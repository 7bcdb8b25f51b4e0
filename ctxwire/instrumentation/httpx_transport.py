"""httpx transports propagating context values."""

from __future__ import annotations

from typing import Optional

import httpx

from ctxwire.context.registry import PropagatorRegistry
from ctxwire.errors import ExtractError
from ctxwire.instrumentation.decorators import async_transport, transport as sync_transport


class PropagatingTransport(httpx.BaseTransport):
    """
    httpx transport wrapper propagating the request context both ways.

    The context travels in ``request.extensions["ctxwire.context"]``; see
    ``bind_request_context`` / ``get_request_context``.

    When back-propagation fails the response never reaches the client, so it
    is read and closed here before ExtractError is raised. Its body stays
    available on ``exc.response``.
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None, registry: Optional[PropagatorRegistry] = None) -> None:
        self._transport = transport if transport is not None else httpx.HTTPTransport()
        self._send = sync_transport(self._transport.handle_request, registry)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        try:
            return self._send(request)
        except ExtractError as exc:
            # Release the pooled connection.
            try:
                exc.response.read()
            finally:
                exc.response.close()
            raise

    def close(self) -> None:
        self._transport.close()


class AsyncPropagatingTransport(httpx.AsyncBaseTransport):
    """Async counterpart of PropagatingTransport."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        registry: Optional[PropagatorRegistry] = None,
    ) -> None:
        self._transport = transport if transport is not None else httpx.AsyncHTTPTransport()
        self._send = async_transport(self._transport.handle_async_request, registry)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._send(request)
        except ExtractError as exc:
            try:
                await exc.response.aread()
            finally:
                await exc.response.aclose()
            raise

    async def aclose(self) -> None:
        await self._transport.aclose()
