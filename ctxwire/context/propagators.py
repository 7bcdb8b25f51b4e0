"""Header propagation of single context values using OpenTelemetry's propagator API."""

from __future__ import annotations

import base64
import re
from typing import Any, List, Optional, Set

from opentelemetry import context as context_api
from opentelemetry.context import Context
from opentelemetry.propagators.textmap import Getter, Setter, TextMapPropagator

from ctxwire import runtime_config
from ctxwire.context.codec import (
    JSON_DECODER,
    JSON_ENCODER,
    JSON_MERGE_DECODER,
    Decoder,
    Encoder,
    as_decoder,
    as_encoder,
)
from ctxwire.errors import (
    ConfigError,
    CtxwireError,
    DecodeError,
    EncodeError,
    WireFormatError,
)

# RFC 9110 field-name token characters.
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def header_name(name: str) -> str:
    """Return the header field carrying the propagator called `name`."""
    return runtime_config.get_header_prefix() + name


class HeaderGetter(Getter):
    """
    Case-insensitive header reads.

    Mappings with their own case-insensitive lookup (requests, httpx,
    Starlette headers) are queried directly; plain dicts are scanned.
    Repeated fields are returned one value per line where the carrier keeps
    them apart (``get_list`` on httpx, ``getlist`` on urllib3 and Starlette).
    """

    def get(self, carrier: Any, key: str) -> Optional[List[str]]:
        for method in ("get_list", "getlist"):
            get_list = getattr(carrier, method, None)
            if callable(get_list):
                values = [str(v) for v in get_list(key)]
                return values or None
        value = carrier.get(key)
        if value is None and isinstance(carrier, dict):
            lowered = key.lower()
            for k, v in carrier.items():
                if isinstance(k, str) and k.lower() == lowered:
                    value = v
                    break
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [value]

    def keys(self, carrier: Any) -> List[str]:
        return list(carrier.keys())


class HeaderSetter(Setter):
    """Header writes replacing every case variant of the field."""

    def set(self, carrier: Any, key: str, value: str) -> None:
        if isinstance(carrier, dict):
            lowered = key.lower()
            for existing in [k for k in carrier if isinstance(k, str) and k.lower() == lowered]:
                del carrier[existing]
        carrier[key] = value


header_getter = HeaderGetter()
header_setter = HeaderSetter()


class Propagator(TextMapPropagator):
    """
    Propagates context values between requests and responses.

    Unlike plain OpenTelemetry propagators, failures are raised as
    ctxwire errors rather than ignored.
    """

    def inject(self, carrier: Any, context: Optional[Context] = None, setter: Setter = header_setter) -> None:
        raise NotImplementedError

    def extract(self, carrier: Any, context: Optional[Context] = None, getter: Getter = header_getter) -> Context:
        raise NotImplementedError

    @property
    def fields(self) -> Set[str]:
        return set()


class ValuePropagator(Propagator):
    """Propagates a single context value through one header field."""

    def __init__(self, name: str, context_key: str, encoder: Encoder, decoder: Decoder) -> None:
        if not name or not _TOKEN_RE.fullmatch(name):
            raise ConfigError("invalid propagator name", details={"name": name})
        field = header_name(name)
        if not _TOKEN_RE.fullmatch(field):
            raise ConfigError("invalid header field name", details={"header": field})
        self.name = name
        self.context_key = context_key
        self.header = field
        self.encoder = as_encoder(encoder)
        self.decoder = as_decoder(decoder)

    def __repr__(self) -> str:
        return f"ValuePropagator(name={self.name!r}, header={self.header!r})"

    @property
    def fields(self) -> Set[str]:
        return {self.header}

    def inject(self, carrier: Any, context: Optional[Context] = None, setter: Setter = header_setter) -> None:
        if context is None:
            context = context_api.get_current()
        try:
            data = self.encoder.encode(context, self.context_key)
        except CtxwireError:
            raise
        except Exception as exc:
            raise EncodeError("encode context value", cause=exc, details={"propagator": self.name}) from exc
        if data is None:
            return
        if not isinstance(data, (bytes, bytearray)):
            exc = TypeError(f"encoder returned {type(data).__name__}, expected bytes")
            raise EncodeError("encode context value", cause=exc, details={"propagator": self.name}) from exc
        if not data:
            return
        setter.set(carrier, self.header, base64.b64encode(data).decode("ascii"))

    def extract(self, carrier: Any, context: Optional[Context] = None, getter: Getter = header_getter) -> Context:
        if context is None:
            context = context_api.get_current()
        values = getter.get(carrier, self.header)
        if not values:
            return context
        # First field line wins; base64 never contains a comma, so a value
        # joined by the HTTP stack ("a, b") is split the same way.
        text = values[0].split(",", 1)[0].strip()
        if not text:
            return context
        try:
            data = base64.b64decode(text, validate=True)
        except ValueError as exc:
            raise WireFormatError(
                "base64 decode context value", cause=exc, details={"propagator": self.name}
            ) from exc
        try:
            result = self.decoder.decode(context, self.context_key, data)
        except CtxwireError:
            raise
        except Exception as exc:
            raise DecodeError("decode context value", cause=exc, details={"propagator": self.name}) from exc
        if not isinstance(result, Context):
            exc = TypeError(f"decoder returned {type(result).__name__}, expected Context")
            raise DecodeError("decode context value", cause=exc, details={"propagator": self.name}) from exc
        return result


def json_propagator(name: str, context_key: str) -> ValuePropagator:
    """Return a ValuePropagator carrying its value as a JSON document."""
    return ValuePropagator(name, context_key, JSON_ENCODER, JSON_DECODER)


def json_merge_propagator(name: str, context_key: str) -> ValuePropagator:
    """
    Return a ValuePropagator for record-like values.

    Extraction merges the received JSON object over the mapping already in
    the context instead of replacing it.
    """
    return ValuePropagator(name, context_key, JSON_ENCODER, JSON_MERGE_DECODER)
