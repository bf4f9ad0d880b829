"""Error taxonomy for the JSON-RPC client and resolution cache."""

from __future__ import annotations

from enum import Enum
from typing import Any

from kbaserpc.comm.protocol import (
    INVALID_ENVELOPE_CODE,
    LEGACY_PARSE_ERROR_CODE,
    PARSE_ERROR_CODE,
    Dialect,
)
from kbaserpc.utils.exceptions import ErrorCategory, KBaseRpcError


class EnvelopeCondition(str, Enum):
    """Named reasons a response envelope is rejected."""

    PARSE_ERROR = "parse_error"
    NOT_AN_OBJECT = "not_an_object"
    MISSING_VERSION = "missing_version"
    WRONG_VERSION = "wrong_version"
    MISSING_ID = "missing_id"
    INVALID_ID_TYPE = "invalid_id_type"
    MISSING_RESULT_OR_ERROR = "missing_result_or_error"
    BOTH_RESULT_AND_ERROR = "both_result_and_error"
    ERROR_NOT_AN_OBJECT = "error_not_an_object"
    ERROR_MISSING_CODE = "error_missing_code"
    ERROR_CODE_NOT_NUMBER = "error_code_not_number"
    ERROR_MISSING_MESSAGE = "error_missing_message"
    ERROR_MESSAGE_NOT_STRING = "error_message_not_string"
    RESULT_NOT_WRAPPED = "result_not_wrapped"


_RETRYABLE_STATUS = {408, 425, 429}


def is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in _RETRYABLE_STATUS


class TransportError(KBaseRpcError):
    """Network failure or an HTTP response that carries no usable envelope."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        code: str = "TRANSPORT_NETWORK_ERROR",
        status_code: int | None = None,
        retryable: bool = False,
    ):
        super().__init__(
            message,
            code=code,
            category=ErrorCategory.TRANSPORT,
            details={"url": url, "status_code": status_code},
            retryable=retryable,
        )
        self.url = url
        self.status_code = status_code


class ProtocolError(KBaseRpcError):
    """Response violates the dialect grammar."""

    def __init__(
        self,
        message: str,
        *,
        condition: EnvelopeCondition,
        dialect: Dialect,
        rpc_code: int = INVALID_ENVELOPE_CODE,
        details: dict[str, Any] | None = None,
    ):
        merged = {"condition": condition.value, "dialect": dialect.value, "rpc_code": rpc_code}
        merged.update(details or {})
        super().__init__(
            message,
            code=f"PROTOCOL_{condition.name}",
            category=ErrorCategory.PROTOCOL,
            details=merged,
        )
        self.condition = condition
        self.dialect = dialect
        self.rpc_code = rpc_code


class ResponseParseError(ProtocolError):
    """Response body is not valid JSON."""

    def __init__(self, *, dialect: Dialect, original_message: str, response_text: str):
        rpc_code = LEGACY_PARSE_ERROR_CODE if dialect is Dialect.V11 else PARSE_ERROR_CODE
        super().__init__(
            "The response from the service could not be parsed",
            condition=EnvelopeCondition.PARSE_ERROR,
            dialect=dialect,
            rpc_code=rpc_code,
            details={"original_message": original_message, "response_text": response_text},
        )
        self.original_message = original_message
        self.response_text = response_text


class EnvelopeValidationError(ProtocolError):
    """Well-formed JSON that is not a valid response envelope."""


class RequestParamsError(KBaseRpcError):
    """Caller supplied params the dialect cannot encode."""

    def __init__(self, message: str, *, dialect: Dialect, index: int | None = None):
        details: dict[str, Any] = {"dialect": dialect.value}
        if index is not None:
            details["index"] = index
        super().__init__(message, code="INVALID_PARAMS", category=ErrorCategory.VALIDATION, details=details)
        self.dialect = dialect
        self.index = index


class RPCError(KBaseRpcError):
    """Error envelope returned by the remote method."""

    def __init__(
        self,
        message: str,
        *,
        rpc_code: Any,
        dialect: Dialect,
        data: Any = None,
        name: str | None = None,
        detail: Any = None,
    ):
        super().__init__(
            message,
            code="RPC_ERROR",
            category=ErrorCategory.APPLICATION,
            details={"rpc_code": rpc_code, "dialect": dialect.value, "name": name},
        )
        self.rpc_code = rpc_code
        self.dialect = dialect
        self.data = data
        self.name = name
        self.detail = detail

    def __str__(self) -> str:
        return f"[{self.code} {self.rpc_code}] {self.message}"


class CacheTimeoutError(KBaseRpcError):
    """Waiter gave up on an in-flight fetch."""

    def __init__(self, key: str, timeout: float):
        super().__init__(
            f"Timed out after {timeout}s waiting for '{key}' to resolve",
            code="CACHE_TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"key": key, "timeout_seconds": timeout},
            retryable=True,
        )
        self.key = key
        self.timeout = timeout


class CacheFetchError(KBaseRpcError):
    """The fetch backing a cache key failed."""

    def __init__(self, key: str, cause: BaseException):
        super().__init__(
            f"Fetching '{key}' failed: {cause}",
            code="CACHE_FETCH_ERROR",
            category=ErrorCategory.FATAL,
            details={"key": key, "cause": type(cause).__name__},
            retryable=getattr(cause, "retryable", False),
        )
        self.key = key
        self.cause = cause
