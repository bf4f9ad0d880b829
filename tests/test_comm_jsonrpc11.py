import json

import pytest

from kbaserpc.comm.errors import (
    EnvelopeCondition,
    EnvelopeValidationError,
    RequestParamsError,
    ResponseParseError,
)
from kbaserpc.comm.jsonrpc11 import JSONRPC11Codec
from kbaserpc.comm.protocol import Dialect, ErrorEnvelope, ResultEnvelope


@pytest.fixture
def codec():
    return JSONRPC11Codec()


def _raw(**fields) -> str:
    return json.dumps(fields)


def test_build_request_wraps_single_object_in_list(codec) -> None:
    req = codec.build_request("ServiceWizard.get_service_status", {"module_name": "M"})
    wire = req.to_wire()
    assert wire["version"] == "1.1"
    assert wire["method"] == "ServiceWizard.get_service_status"
    assert wire["params"] == [{"module_name": "M"}]
    assert isinstance(wire["id"], str) and wire["id"]
    assert "jsonrpc" not in wire


def test_build_request_keeps_positional_objects_in_order(codec) -> None:
    wire = codec.build_request("M.f", [{"a": 1}, {"b": 2}]).to_wire()
    assert wire["params"] == [{"a": 1}, {"b": 2}]


def test_build_request_without_params_sends_empty_list(codec) -> None:
    assert codec.build_request("M.f").to_wire()["params"] == []


def test_build_request_ids_are_unique(codec) -> None:
    ids = {codec.build_request("M.f").id for _ in range(50)}
    assert len(ids) == 50


def test_build_request_rejects_non_object_elements(codec) -> None:
    with pytest.raises(RequestParamsError) as err:
        codec.build_request("M.f", [{"a": 1}, "nope"])
    assert err.value.index == 1
    assert err.value.code == "INVALID_PARAMS"


def test_build_request_rejects_scalar_params(codec) -> None:
    with pytest.raises(RequestParamsError):
        codec.build_request("M.f", 42)


def test_result_round_trips_unchanged(codec) -> None:
    req = codec.build_request("M.f", {"q": "x"})
    payload = [{"objects": [1, 2, 3], "nested": {"k": None}}]
    envelope = codec.parse_response(_raw(version="1.1", id=req.id, result=payload, error=None))
    assert isinstance(envelope, ResultEnvelope)
    assert envelope.result == payload
    assert envelope.id == req.id
    assert envelope.dialect is Dialect.V11


def test_error_envelope_keeps_diagnostics(codec) -> None:
    raw = _raw(
        version="1.1",
        id="abc",
        result=None,
        error={"name": "JSONRPCError", "code": -32500, "message": "boom", "error": "trace..."},
    )
    envelope = codec.parse_response(raw)
    assert isinstance(envelope, ErrorEnvelope)
    assert envelope.code == -32500
    assert envelope.message == "boom"
    assert envelope.name == "JSONRPCError"
    assert envelope.data == "trace..."


def test_error_envelope_accepts_string_code(codec) -> None:
    envelope = codec.parse_response(
        _raw(version="1.1", id=1, error={"code": "E_BUSINESS", "message": "nope", "detail": "why"})
    )
    assert isinstance(envelope, ErrorEnvelope)
    assert envelope.code == "E_BUSINESS"
    assert envelope.detail == "why"


def test_void_result_is_a_result(codec) -> None:
    envelope = codec.parse_response(_raw(version="1.1", id="x", result=None, error=None))
    assert isinstance(envelope, ResultEnvelope)
    assert envelope.result is None


def test_parse_error_carries_raw_body(codec) -> None:
    with pytest.raises(ResponseParseError) as err:
        codec.parse_response("<html>502 Bad Gateway</html>")
    assert err.value.condition is EnvelopeCondition.PARSE_ERROR
    assert err.value.rpc_code == 100
    assert err.value.response_text == "<html>502 Bad Gateway</html>"
    assert err.value.original_message


@pytest.mark.parametrize(
    "raw, condition",
    [
        ("[1, 2]", EnvelopeCondition.NOT_AN_OBJECT),
        ('"text"', EnvelopeCondition.NOT_AN_OBJECT),
        (_raw(id="x", result=[]), EnvelopeCondition.MISSING_VERSION),
        (_raw(version="2.0", id="x", result=[]), EnvelopeCondition.WRONG_VERSION),
        (_raw(version=1.1, id="x", result=[]), EnvelopeCondition.WRONG_VERSION),
        (_raw(version="1.1", result=[]), EnvelopeCondition.MISSING_ID),
        (_raw(version="1.1", id=None, result=[]), EnvelopeCondition.INVALID_ID_TYPE),
        (_raw(version="1.1", id=True, result=[]), EnvelopeCondition.INVALID_ID_TYPE),
        (_raw(version="1.1", id=["x"], result=[]), EnvelopeCondition.INVALID_ID_TYPE),
        (_raw(version="1.1", id="x"), EnvelopeCondition.MISSING_RESULT_OR_ERROR),
        (_raw(version="1.1", id="x", error=None), EnvelopeCondition.MISSING_RESULT_OR_ERROR),
        (
            _raw(version="1.1", id="x", result=[1], error={"code": 1, "message": "m"}),
            EnvelopeCondition.BOTH_RESULT_AND_ERROR,
        ),
    ],
)
def test_invalid_envelopes_report_specific_condition(codec, raw, condition) -> None:
    with pytest.raises(EnvelopeValidationError) as err:
        codec.parse_response(raw)
    assert err.value.condition is condition
    assert err.value.dialect is Dialect.V11
    assert err.value.rpc_code == -32600


def test_checks_are_ordered(codec) -> None:
    # Wrong version and missing id: the version check runs first.
    with pytest.raises(EnvelopeValidationError) as err:
        codec.parse_response(_raw(version="2.0"))
    assert err.value.condition is EnvelopeCondition.WRONG_VERSION
