"""Codecs converting one context value to and from a byte payload."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Callable, Union

from opentelemetry import context as context_api
from opentelemetry.context import Context

EncodeCallable = Callable[[Context, str], bytes]
DecodeCallable = Callable[[Context, str, bytes], Context]


class Encoder:
    """
    Encodes the context value associated with a key into bytes.

    Return b"" when the value is absent: the propagator then writes no
    header at all. Raise when the value is present but cannot be encoded.
    """

    def encode(self, context: Context, key: str) -> bytes:
        raise NotImplementedError


class Decoder:
    """
    Decodes bytes into a context value associated with a key.

    Must return a new context extending the given one. Raise on any parse
    failure; a partially built context must never be returned.
    """

    def decode(self, context: Context, key: str, data: bytes) -> Context:
        raise NotImplementedError


class EncoderFunc(Encoder):
    """Adapter allowing an ordinary function to be used as an Encoder."""

    def __init__(self, func: EncodeCallable) -> None:
        self.func = func

    def encode(self, context: Context, key: str) -> bytes:
        return self.func(context, key)

    def __repr__(self) -> str:
        return f"EncoderFunc({getattr(self.func, '__name__', self.func)!r})"


class DecoderFunc(Decoder):
    """Adapter allowing an ordinary function to be used as a Decoder."""

    def __init__(self, func: DecodeCallable) -> None:
        self.func = func

    def decode(self, context: Context, key: str, data: bytes) -> Context:
        return self.func(context, key, data)

    def __repr__(self) -> str:
        return f"DecoderFunc({getattr(self.func, '__name__', self.func)!r})"


def as_encoder(obj: Union[Encoder, EncodeCallable, Any]) -> Encoder:
    """Accept an Encoder, any object with an encode() method, or a plain callable."""
    if isinstance(obj, Encoder):
        return obj
    if callable(getattr(obj, "encode", None)):
        return EncoderFunc(obj.encode)
    if callable(obj):
        return EncoderFunc(obj)
    raise TypeError(f"not an encoder: {obj!r}")


def as_decoder(obj: Union[Decoder, DecodeCallable, Any]) -> Decoder:
    """Accept a Decoder, any object with a decode() method, or a plain callable."""
    if isinstance(obj, Decoder):
        return obj
    if callable(getattr(obj, "decode", None)):
        return DecoderFunc(obj.decode)
    if callable(obj):
        return DecoderFunc(obj)
    raise TypeError(f"not a decoder: {obj!r}")


def json_encode(context: Context, key: str) -> bytes:
    value = context_api.get_value(key, context=context)
    if value is None:
        return b""
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def json_decode(context: Context, key: str, data: bytes) -> Context:
    value = json.loads(data.decode("utf-8"))
    return context_api.set_value(key, value, context=context)


def json_merge_decode(context: Context, key: str, data: bytes) -> Context:
    """
    Merge a decoded JSON object over the mapping already stored under key.

    Keys from the payload win. The stored mapping is copied, never mutated.
    Non-object payloads, or a non-mapping current value, replace the value.
    """
    value = json.loads(data.decode("utf-8"))
    current = context_api.get_value(key, context=context)
    if isinstance(value, dict) and isinstance(current, Mapping):
        merged = dict(current)
        merged.update(value)
        value = merged
    return context_api.set_value(key, value, context=context)


JSON_ENCODER = EncoderFunc(json_encode)
JSON_DECODER = DecoderFunc(json_decode)
JSON_MERGE_DECODER = DecoderFunc(json_merge_decode)
