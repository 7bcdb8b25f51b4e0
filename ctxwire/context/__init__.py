"""Context utilities, codecs, propagators and the propagator registry."""

from ctxwire.context.codec import (
    Decoder,
    DecoderFunc,
    Encoder,
    EncoderFunc,
    as_decoder,
    as_encoder,
    json_decode,
    json_encode,
    json_merge_decode,
)
from ctxwire.context.context import create_key, get_current, get_value, set_value, use_context
from ctxwire.context.propagators import (
    HeaderGetter,
    HeaderSetter,
    Propagator,
    ValuePropagator,
    header_getter,
    header_name,
    header_setter,
    json_merge_propagator,
    json_propagator,
)
from ctxwire.context.registry import (
    PropagatorRegistry,
    configure,
    extract,
    get_registry,
    inject,
    set_registry,
)

__all__ = [
    "Encoder",
    "Decoder",
    "EncoderFunc",
    "DecoderFunc",
    "as_encoder",
    "as_decoder",
    "json_encode",
    "json_decode",
    "json_merge_decode",
    "create_key",
    "get_value",
    "set_value",
    "get_current",
    "use_context",
    "HeaderGetter",
    "HeaderSetter",
    "header_getter",
    "header_setter",
    "header_name",
    "Propagator",
    "ValuePropagator",
    "json_propagator",
    "json_merge_propagator",
    "PropagatorRegistry",
    "get_registry",
    "set_registry",
    "configure",
    "inject",
    "extract",
]
