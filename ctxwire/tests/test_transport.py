"""Tests for the direction-aware transport decorators."""

import asyncio

import pytest
from opentelemetry.context import Context

import ctxwire
from ctxwire.context.codec import json_decode
from ctxwire.errors import ExtractError, InjectError
from ctxwire.instrumentation.decorators import (
    async_transport,
    bind_request_context,
    extract_transport,
    get_request_context,
    inject_transport,
    transport,
)


class FakeRequest:
    def __init__(self):
        self.headers = {}


class FakeResponse:
    def __init__(self, headers=None):
        self.headers = headers or {}


@pytest.fixture
def configured(registry, keys):
    registry.configure(
        ctxwire.json_propagator("str", keys.text),
        ctxwire.json_propagator("int", keys.number),
    )
    return registry


def _reply(keys, value):
    headers = {}
    ctxwire.inject(headers, ctxwire.set_value(keys.text, value, Context()))
    return FakeResponse(headers)


def test_request_context_slot():
    request = FakeRequest()
    ctx = Context({"k": 1})
    bind_request_context(request, ctx)
    assert get_request_context(request) is ctx


def test_unbound_request_uses_current_context(keys):
    ctx = ctxwire.set_value(keys.text, "current", Context())
    with ctxwire.use_context(ctx):
        assert ctxwire.get_value(keys.text, get_request_context(FakeRequest())) == "current"


def test_inject_on_send(configured, keys):
    sent = []
    send = inject_transport(lambda req: sent.append(dict(req.headers)) or FakeResponse())
    request = FakeRequest()
    bind_request_context(request, ctxwire.set_value(keys.text, "foo", Context()))

    send(request)

    assert list(sent[0]) == ["x-ctxwire-str"]


def test_inject_failure_aborts_before_send(registry, keys):
    def failing(ctx, key):
        raise RuntimeError("failed!")

    registry.configure(ctxwire.ValuePropagator("str", keys.text, failing, json_decode))
    calls = []
    send = inject_transport(lambda req: calls.append(req))

    with pytest.raises(InjectError):
        send(FakeRequest())

    assert calls == []


def test_extract_on_receive_rebinds_request_context(configured, keys):
    request = FakeRequest()
    before = ctxwire.set_value(keys.number, 42, Context())
    bind_request_context(request, before)
    response = _reply(keys, "bar")

    result = extract_transport(lambda req: response)(request)

    assert result is response
    after = get_request_context(request)
    assert ctxwire.get_value(keys.text, after) == "bar"
    assert ctxwire.get_value(keys.number, after) == 42
    assert ctxwire.get_value(keys.text, before) is None


def test_extract_failure_returns_response_with_error(configured, keys):
    request = FakeRequest()
    before = Context()
    bind_request_context(request, before)
    response = FakeResponse({"x-ctxwire-str": "***"})

    with pytest.raises(ExtractError) as excinfo:
        extract_transport(lambda req: response)(request)

    assert excinfo.value.response is response
    assert get_request_context(request) is before


def test_transport_errors_pass_through(configured):
    def broken(req):
        raise ConnectionError("refused")

    with pytest.raises(ConnectionError, match="refused"):
        transport(broken)(FakeRequest())


def test_composed_transport(configured, keys):
    def server(req):
        incoming = ctxwire.extract(req.headers, Context())
        assert ctxwire.get_value(keys.text, incoming) == "foo"
        return _reply(keys, "bar")

    request = FakeRequest()
    bind_request_context(request, ctxwire.set_value(keys.text, "foo", Context()))

    transport(server)(request)

    assert ctxwire.get_value(keys.text, get_request_context(request)) == "bar"


def test_explicit_registry_handle(keys):
    own = ctxwire.PropagatorRegistry(ctxwire.json_propagator("own", keys.user))
    request = FakeRequest()
    bind_request_context(request, ctxwire.set_value(keys.user, "alice", Context()))

    inject_transport(lambda req: FakeResponse(), registry=own)(request)

    assert "x-ctxwire-own" in request.headers


def test_async_transport(configured, keys):
    async def server(req):
        await asyncio.sleep(0)
        return _reply(keys, "bar")

    request = FakeRequest()
    bind_request_context(request, ctxwire.set_value(keys.text, "foo", Context()))

    asyncio.run(async_transport(server)(request))

    assert request.headers["x-ctxwire-str"]
    assert ctxwire.get_value(keys.text, get_request_context(request)) == "bar"
