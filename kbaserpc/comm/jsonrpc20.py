"""Codec for the JSON-RPC 2.0 dialect."""

from __future__ import annotations

import json
import uuid
from typing import Any

from kbaserpc.comm.errors import (
    EnvelopeCondition,
    EnvelopeValidationError,
    RequestParamsError,
    ResponseParseError,
)
from kbaserpc.comm.protocol import (
    Dialect,
    ErrorEnvelope,
    RequestEnvelope,
    ResponseEnvelope,
    ResultEnvelope,
)

DIALECT = Dialect.V20


def _invalid(condition: EnvelopeCondition, message: str) -> EnvelopeValidationError:
    return EnvelopeValidationError(message, condition=condition, dialect=DIALECT)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class JSONRPC20Codec:
    """Build and validate dialect "2.0" envelopes."""

    dialect = DIALECT

    def build_request(self, method: str, params: Any = None) -> RequestEnvelope:
        if not method:
            raise RequestParamsError("method must be a non-empty string", dialect=DIALECT)
        return RequestEnvelope(
            dialect=DIALECT,
            method=method,
            id=str(uuid.uuid4()),
            params=params,
            has_params=params is not None,
        )

    def parse_response(self, raw_text: str) -> ResponseEnvelope:
        try:
            payload = json.loads(raw_text)
        except (TypeError, ValueError) as exc:
            raise ResponseParseError(
                dialect=DIALECT,
                original_message=str(exc),
                response_text=raw_text if isinstance(raw_text, str) else repr(raw_text),
            ) from exc

        if not isinstance(payload, dict):
            raise _invalid(EnvelopeCondition.NOT_AN_OBJECT, "The response JSON is not an object")
        if "jsonrpc" not in payload:
            raise _invalid(
                EnvelopeCondition.MISSING_VERSION,
                'The response object does not include the "jsonrpc" property',
            )
        if payload["jsonrpc"] != "2.0":
            raise _invalid(
                EnvelopeCondition.WRONG_VERSION,
                f'The response object "jsonrpc" must be "2.0", but is {payload["jsonrpc"]!r}',
            )
        if "id" not in payload:
            raise _invalid(EnvelopeCondition.MISSING_ID, 'The response object does not include the "id" property')
        req_id = payload["id"]
        if req_id is not None and not isinstance(req_id, str) and not _is_number(req_id):
            raise _invalid(
                EnvelopeCondition.INVALID_ID_TYPE,
                f'The response id must be a string, number or null, but is {type(req_id).__name__}',
            )

        has_result = "result" in payload
        has_error = "error" in payload
        if not has_result and not has_error:
            raise _invalid(
                EnvelopeCondition.MISSING_RESULT_OR_ERROR,
                'The response object must include either a "result" or "error" property',
            )
        if has_result and has_error:
            raise _invalid(
                EnvelopeCondition.BOTH_RESULT_AND_ERROR,
                'The response object must not include both the "result" and "error" property',
            )
        if has_result:
            return ResultEnvelope(dialect=DIALECT, id=req_id, result=payload["result"])

        error = payload["error"]
        if not isinstance(error, dict):
            raise _invalid(EnvelopeCondition.ERROR_NOT_AN_OBJECT, 'The response "error" is not an object')
        if "code" not in error:
            raise _invalid(
                EnvelopeCondition.ERROR_MISSING_CODE,
                'The response "error" must include a numeric "code" property',
            )
        if not _is_number(error["code"]):
            raise _invalid(
                EnvelopeCondition.ERROR_CODE_NOT_NUMBER,
                f'The response "error" "code" property must be a number (is {type(error["code"]).__name__})',
            )
        if "message" not in error:
            raise _invalid(
                EnvelopeCondition.ERROR_MISSING_MESSAGE,
                'The response "error" must include a "message" property',
            )
        if not isinstance(error["message"], str):
            raise _invalid(
                EnvelopeCondition.ERROR_MESSAGE_NOT_STRING,
                f'The response "error" "message" property must be a string (is {type(error["message"]).__name__})',
            )
        return ErrorEnvelope(
            dialect=DIALECT,
            id=req_id,
            code=error["code"],
            message=error["message"],
            data=error.get("data"),
            raw=error,
        )
