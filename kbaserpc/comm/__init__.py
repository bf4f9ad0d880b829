"""JSON-RPC client protocol layer and dynamic service resolution."""

from .cache import CacheSettings, ResolutionCache
from .client import JSONRPCClient
from .codec import Codec, get_codec
from .errors import (
    CacheFetchError,
    CacheTimeoutError,
    EnvelopeCondition,
    EnvelopeValidationError,
    ProtocolError,
    RequestParamsError,
    ResponseParseError,
    RPCError,
    TransportError,
)
from .protocol import Dialect, ErrorEnvelope, RequestEnvelope, ResultEnvelope
from .service_client import ServiceClient
from .transport import HttpInvoker, HttpResponse
from .dynamic_service_client import DynamicServiceClient, get_module_cache, reset_module_cache

__all__ = [
    "CacheFetchError",
    "CacheSettings",
    "CacheTimeoutError",
    "Codec",
    "Dialect",
    "DynamicServiceClient",
    "EnvelopeCondition",
    "EnvelopeValidationError",
    "ErrorEnvelope",
    "HttpInvoker",
    "HttpResponse",
    "JSONRPCClient",
    "ProtocolError",
    "RPCError",
    "RequestEnvelope",
    "RequestParamsError",
    "ResolutionCache",
    "ResponseParseError",
    "ResultEnvelope",
    "ServiceClient",
    "TransportError",
    "get_codec",
    "get_module_cache",
    "reset_module_cache",
]
