import json

import pytest

from kbaserpc.comm.codec import get_codec
from kbaserpc.comm.errors import EnvelopeCondition, EnvelopeValidationError, ResponseParseError
from kbaserpc.comm.jsonrpc11 import JSONRPC11Codec
from kbaserpc.comm.jsonrpc20 import JSONRPC20Codec
from kbaserpc.comm.protocol import Dialect, ErrorEnvelope, ResultEnvelope


@pytest.fixture
def codec():
    return JSONRPC20Codec()


def _raw(**fields) -> str:
    return json.dumps(fields)


def test_get_codec_dispatches_by_dialect() -> None:
    assert isinstance(get_codec("1.1"), JSONRPC11Codec)
    assert isinstance(get_codec(Dialect.V20), JSONRPC20Codec)
    with pytest.raises(ValueError):
        get_codec("3.0")


def test_build_request_passes_params_through(codec) -> None:
    wire = codec.build_request("M.f", {"a": 1}).to_wire()
    assert wire["jsonrpc"] == "2.0"
    assert wire["method"] == "M.f"
    assert wire["params"] == {"a": 1}
    assert "version" not in wire


@pytest.mark.parametrize("params", [[1, "two"], "scalar", 3, [{"wrapped": True}]])
def test_build_request_accepts_any_json_params(codec, params) -> None:
    assert codec.build_request("M.f", params).to_wire()["params"] == params


def test_build_request_omits_missing_params(codec) -> None:
    assert "params" not in codec.build_request("M.f").to_wire()


def test_result_may_be_any_json_value(codec) -> None:
    for value in ({"ok": True}, [1, 2], "s", 0, None):
        envelope = codec.parse_response(_raw(jsonrpc="2.0", id="x", result=value))
        assert isinstance(envelope, ResultEnvelope)
        assert envelope.result == value


def test_null_id_is_allowed(codec) -> None:
    envelope = codec.parse_response(_raw(jsonrpc="2.0", id=None, result=1))
    assert envelope.id is None


def test_error_envelope(codec) -> None:
    envelope = codec.parse_response(
        _raw(jsonrpc="2.0", id="x", error={"code": -32601, "message": "Method not found", "data": {"m": "f"}})
    )
    assert isinstance(envelope, ErrorEnvelope)
    assert envelope.code == -32601
    assert envelope.message == "Method not found"
    assert envelope.data == {"m": "f"}


def test_parse_error_uses_jsonrpc_code(codec) -> None:
    with pytest.raises(ResponseParseError) as err:
        codec.parse_response("{not json")
    assert err.value.rpc_code == -32700
    assert err.value.response_text == "{not json"


@pytest.mark.parametrize(
    "raw, condition",
    [
        ("null", EnvelopeCondition.NOT_AN_OBJECT),
        (_raw(id="x", result=1), EnvelopeCondition.MISSING_VERSION),
        (_raw(jsonrpc="1.1", id="x", result=1), EnvelopeCondition.WRONG_VERSION),
        (_raw(version="1.1", id="x", result=[1]), EnvelopeCondition.MISSING_VERSION),
        (_raw(jsonrpc="2.0", result=1), EnvelopeCondition.MISSING_ID),
        (_raw(jsonrpc="2.0", id={"a": 1}, result=1), EnvelopeCondition.INVALID_ID_TYPE),
        (_raw(jsonrpc="2.0", id=False, result=1), EnvelopeCondition.INVALID_ID_TYPE),
        (_raw(jsonrpc="2.0", id="x"), EnvelopeCondition.MISSING_RESULT_OR_ERROR),
        (_raw(jsonrpc="2.0", id="x", result=1, error=None), EnvelopeCondition.BOTH_RESULT_AND_ERROR),
        (_raw(jsonrpc="2.0", id="x", error="boom"), EnvelopeCondition.ERROR_NOT_AN_OBJECT),
        (_raw(jsonrpc="2.0", id="x", error={"message": "m"}), EnvelopeCondition.ERROR_MISSING_CODE),
        (_raw(jsonrpc="2.0", id="x", error={"code": "E1", "message": "m"}), EnvelopeCondition.ERROR_CODE_NOT_NUMBER),
        (_raw(jsonrpc="2.0", id="x", error={"code": True, "message": "m"}), EnvelopeCondition.ERROR_CODE_NOT_NUMBER),
        (_raw(jsonrpc="2.0", id="x", error={"code": 1}), EnvelopeCondition.ERROR_MISSING_MESSAGE),
        (_raw(jsonrpc="2.0", id="x", error={"code": 1, "message": 7}), EnvelopeCondition.ERROR_MESSAGE_NOT_STRING),
    ],
)
def test_invalid_envelopes_report_specific_condition(codec, raw, condition) -> None:
    with pytest.raises(EnvelopeValidationError) as err:
        codec.parse_response(raw)
    assert err.value.condition is condition
    assert err.value.dialect is Dialect.V20
    assert err.value.code == f"PROTOCOL_{condition.name}"


def test_code_is_checked_before_message(codec) -> None:
    with pytest.raises(EnvelopeValidationError) as err:
        codec.parse_response(_raw(jsonrpc="2.0", id="x", error={}))
    assert err.value.condition is EnvelopeCondition.ERROR_MISSING_CODE


@pytest.mark.parametrize("codec_cls", [JSONRPC11Codec, JSONRPC20Codec])
def test_missing_result_and_error_for_both_dialects(codec_cls) -> None:
    c = codec_cls()
    version = {"version": "1.1"} if c.dialect is Dialect.V11 else {"jsonrpc": "2.0"}
    with pytest.raises(EnvelopeValidationError) as err:
        c.parse_response(json.dumps({**version, "id": "x"}))
    assert err.value.condition is EnvelopeCondition.MISSING_RESULT_OR_ERROR


@pytest.mark.parametrize("codec_cls", [JSONRPC11Codec, JSONRPC20Codec])
def test_both_result_and_error_for_both_dialects(codec_cls) -> None:
    c = codec_cls()
    version = {"version": "1.1"} if c.dialect is Dialect.V11 else {"jsonrpc": "2.0"}
    raw = json.dumps({**version, "id": "x", "result": [1], "error": {"code": 1, "message": "m"}})
    with pytest.raises(EnvelopeValidationError) as err:
        c.parse_response(raw)
    assert err.value.condition is EnvelopeCondition.BOTH_RESULT_AND_ERROR
