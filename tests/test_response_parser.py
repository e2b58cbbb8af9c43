from __future__ import annotations

import pytest

from qbjs_chat.llm.errors import BackendContractError, BackendError
from qbjs_chat.llm.response_parser import parse_code_response, try_parse_json


def test_strict_json() -> None:
    assert parse_code_response('{"code": "PRINT \\"hi\\""}') == 'PRINT "hi"'


def test_code_fences_are_repaired() -> None:
    raw = '```json\n{"code": "SCREEN 12"}\n```'
    assert parse_code_response(raw) == "SCREEN 12"
    _, meta = try_parse_json(raw)
    assert meta == {"repaired": True, "method": "stripped_fences"}


def test_chatter_around_object_is_repaired() -> None:
    assert parse_code_response('Here you go: {"code": "CLS"} enjoy') == "CLS"


def test_empty_code_string_is_valid() -> None:
    assert parse_code_response('{"code": ""}') == ""


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "PRINT 1",
        '{"program": "PRINT 1"}',
        '{"code": 42}',
        '{"code": null}',
        '["code"]',
        '{"code": "unterminated',
    ],
)
def test_contract_violations_raise(raw: str) -> None:
    with pytest.raises(BackendContractError) as exc:
        parse_code_response(raw)
    assert exc.value.raw_text == raw
    assert isinstance(exc.value, BackendError)
