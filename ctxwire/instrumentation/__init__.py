"""Transport decorators and HTTP client/server integrations."""

from ctxwire.instrumentation.decorators import (
    CONTEXT_EXTENSION,
    async_extract_transport,
    async_inject_transport,
    async_transport,
    bind_request_context,
    extract_transport,
    get_request_context,
    inject_transport,
    transport,
)
from ctxwire.instrumentation.http_client import inject_headers as inject_http_headers
from ctxwire.instrumentation.http_client import extract_response_context
from ctxwire.instrumentation.http_server import extract_request_context, inject_response_headers
from ctxwire.instrumentation.requests_adapter import PropagatingAdapter, mount_propagation
from ctxwire.instrumentation.httpx_transport import AsyncPropagatingTransport, PropagatingTransport
from ctxwire.instrumentation.fastapi import install_http_middleware, request_context, update_request_context

__all__ = [
    "CONTEXT_EXTENSION",
    "bind_request_context",
    "get_request_context",
    "inject_transport",
    "extract_transport",
    "transport",
    "async_inject_transport",
    "async_extract_transport",
    "async_transport",
    "inject_http_headers",
    "extract_response_context",
    "extract_request_context",
    "inject_response_headers",
    "PropagatingAdapter",
    "mount_propagation",
    "PropagatingTransport",
    "AsyncPropagatingTransport",
    "install_http_middleware",
    "request_context",
    "update_request_context",
]
