"""Codec for the JSON-RPC 1.1 dialect used by KBase SDK services.

Requests carry ``"version": "1.1"`` and positional params: an array of JSON
objects. Responses carry both ``result`` and ``error`` keys in practice, with
the unused one set to ``null``, so a ``null`` error counts as absent, and a
``null`` result counts as absent whenever an error is present.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
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

DIALECT = Dialect.V11


def _invalid(condition: EnvelopeCondition, message: str) -> EnvelopeValidationError:
    return EnvelopeValidationError(message, condition=condition, dialect=DIALECT)


def _is_valid_id(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _present(payload: Mapping[str, Any], key: str) -> bool:
    return payload.get(key) is not None


class JSONRPC11Codec:
    """Build and validate dialect "1.1" envelopes."""

    dialect = DIALECT

    @staticmethod
    def coerce_params(params: Any) -> list[dict[str, Any]]:
        """Coerce params into the ordered list of objects the dialect requires."""
        if params is None:
            return []
        if isinstance(params, Mapping):
            return [dict(params)]
        if isinstance(params, (list, tuple)):
            out: list[dict[str, Any]] = []
            for index, item in enumerate(params):
                if not isinstance(item, Mapping):
                    raise RequestParamsError(
                        f"params[{index}] must be a JSON object, got {type(item).__name__}",
                        dialect=DIALECT,
                        index=index,
                    )
                out.append(dict(item))
            return out
        raise RequestParamsError(
            f"params must be a JSON object or an array of objects, got {type(params).__name__}",
            dialect=DIALECT,
        )

    def build_request(self, method: str, params: Any = None) -> RequestEnvelope:
        if not method:
            raise RequestParamsError("method must be a non-empty string", dialect=DIALECT)
        return RequestEnvelope(
            dialect=DIALECT,
            method=method,
            id=str(uuid.uuid4()),
            params=self.coerce_params(params),
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
        if "version" not in payload:
            raise _invalid(
                EnvelopeCondition.MISSING_VERSION,
                'The response object does not include the "version" property',
            )
        if payload["version"] != "1.1":
            raise _invalid(
                EnvelopeCondition.WRONG_VERSION,
                f'The response object version must be "1.1", but is {payload["version"]!r}',
            )
        if "id" not in payload:
            raise _invalid(EnvelopeCondition.MISSING_ID, 'The response object does not include the "id" property')
        if not _is_valid_id(payload["id"]):
            raise _invalid(
                EnvelopeCondition.INVALID_ID_TYPE,
                f'The response id must be a string or number, but is {type(payload["id"]).__name__}',
            )

        has_error = _present(payload, "error")
        # A void method may answer "result": null, so only a null error is dropped
        # when deciding whether a result was sent.
        has_result = _present(payload, "result") or ("result" in payload and not has_error)
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
            return ResultEnvelope(dialect=DIALECT, id=payload["id"], result=payload["result"])
        return self._error_envelope(payload["id"], payload["error"])

    @staticmethod
    def _error_envelope(req_id: Any, error: Any) -> ErrorEnvelope:
        row = error if isinstance(error, dict) else {"message": str(error)}
        message = row.get("message")
        name = row.get("name")
        return ErrorEnvelope(
            dialect=DIALECT,
            id=req_id,
            code=row.get("code"),
            message=message if isinstance(message, str) and message else "rpc failed",
            data=row.get("data", row.get("error")),
            name=name if isinstance(name, str) else None,
            detail=row.get("detail"),
            raw=row,
        )
