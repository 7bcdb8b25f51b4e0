"""Tests for encoders, decoders and the JSON codecs."""

import json

import pytest
from opentelemetry.context import Context

import ctxwire
from ctxwire.context.codec import (
    DecoderFunc,
    EncoderFunc,
    as_decoder,
    as_encoder,
    json_decode,
    json_encode,
    json_merge_decode,
)


def test_json_encode_absent_value_is_empty(keys):
    assert json_encode(Context(), keys.text) == b""


def test_json_encode_present_value(keys):
    ctx = ctxwire.set_value(keys.log, {"service": "search", "latency_ms": 42}, Context())
    assert json.loads(json_encode(ctx, keys.log)) == {"service": "search", "latency_ms": 42}


def test_json_encode_falsy_value_is_carried(keys):
    ctx = ctxwire.set_value(keys.number, 0, Context())
    assert json_encode(ctx, keys.number) == b"0"


def test_json_encode_unserializable_value_raises(keys):
    ctx = ctxwire.set_value(keys.text, object(), Context())
    with pytest.raises(TypeError):
        json_encode(ctx, keys.text)


def test_json_decode_replaces_and_preserves_other_keys(keys):
    original = ctxwire.set_value(keys.text, "foo", Context())
    original = ctxwire.set_value(keys.number, 42, original)

    decoded = json_decode(original, keys.text, b'"bar"')

    assert ctxwire.get_value(keys.text, decoded) == "bar"
    assert ctxwire.get_value(keys.number, decoded) == 42
    # Copy-on-write: the input context is untouched.
    assert ctxwire.get_value(keys.text, original) == "foo"


def test_json_decode_invalid_payload_raises(keys):
    with pytest.raises(ValueError):
        json_decode(Context(), keys.text, b"{not json")


def test_json_merge_decode_merges_objects(keys):
    before = {"service": "search", "index": "products"}
    ctx = ctxwire.set_value(keys.log, before, Context())

    ctx = json_merge_decode(ctx, keys.log, b'{"index":"new_products","user_token":"123"}')

    assert ctxwire.get_value(keys.log, ctx) == {
        "service": "search",
        "index": "new_products",
        "user_token": "123",
    }
    assert before == {"service": "search", "index": "products"}


def test_json_merge_decode_without_current_value(keys):
    ctx = json_merge_decode(Context(), keys.log, b'{"index":"products"}')
    assert ctxwire.get_value(keys.log, ctx) == {"index": "products"}


def test_json_merge_decode_non_object_replaces(keys):
    ctx = ctxwire.set_value(keys.log, {"index": "products"}, Context())
    ctx = json_merge_decode(ctx, keys.log, b'["a", "b"]')
    assert ctxwire.get_value(keys.log, ctx) == ["a", "b"]


def test_plain_functions_qualify_as_codecs(keys):
    def encode(ctx, key):
        return b"x"

    def decode(ctx, key, data):
        return ctxwire.set_value(key, data.decode(), ctx)

    encoder = as_encoder(encode)
    decoder = as_decoder(decode)

    assert isinstance(encoder, EncoderFunc)
    assert isinstance(decoder, DecoderFunc)
    assert encoder.encode(Context(), keys.text) == b"x"
    assert ctxwire.get_value(keys.text, decoder.decode(Context(), keys.text, b"y")) == "y"


def test_stateful_objects_qualify_as_codecs(keys):
    class Counter:
        def __init__(self):
            self.calls = 0

        def encode(self, ctx, key):
            self.calls += 1
            return str(self.calls).encode()

    counter = Counter()
    encoder = as_encoder(counter)
    encoder.encode(Context(), keys.number)
    assert encoder.encode(Context(), keys.number) == b"2"


def test_encoder_instances_are_returned_unchanged():
    encoder = EncoderFunc(json_encode)
    assert as_encoder(encoder) is encoder


def test_non_callable_is_rejected():
    with pytest.raises(TypeError):
        as_decoder(42)
