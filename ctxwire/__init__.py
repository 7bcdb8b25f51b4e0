"""
ctxwire: propagate context values between HTTP requests and responses.

Values travel forward (client to server) and backward (server to client)
inside base64 encoded ``x-ctxwire-<name>`` header fields.
"""

from ctxwire.context import (
    Decoder,
    DecoderFunc,
    Encoder,
    EncoderFunc,
    Propagator,
    PropagatorRegistry,
    ValuePropagator,
    configure,
    create_key,
    extract,
    get_registry,
    get_value,
    header_name,
    inject,
    json_merge_propagator,
    json_propagator,
    set_registry,
    set_value,
    use_context,
)
from ctxwire.errors import (
    ConfigError,
    CtxwireError,
    DecodeError,
    EncodeError,
    ExtractError,
    InjectError,
    PropagationError,
    WireFormatError,
)
from ctxwire.instrumentation.decorators import (
    async_transport,
    bind_request_context,
    extract_transport,
    get_request_context,
    inject_transport,
    transport,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Encoder",
    "Decoder",
    "EncoderFunc",
    "DecoderFunc",
    "Propagator",
    "ValuePropagator",
    "PropagatorRegistry",
    "json_propagator",
    "json_merge_propagator",
    "header_name",
    "configure",
    "inject",
    "extract",
    "get_registry",
    "set_registry",
    "create_key",
    "get_value",
    "set_value",
    "use_context",
    "inject_transport",
    "extract_transport",
    "transport",
    "async_transport",
    "bind_request_context",
    "get_request_context",
    "CtxwireError",
    "ConfigError",
    "PropagationError",
    "EncodeError",
    "DecodeError",
    "WireFormatError",
    "InjectError",
    "ExtractError",
]
