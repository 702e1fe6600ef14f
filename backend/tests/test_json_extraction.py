import pytest

from esg_ddq.core.llm.json_extraction import (
    PREVIEW_CHARS,
    extract_object_span,
    parse_json_response,
    strip_code_fences,
)
from esg_ddq.exceptions import EmptyResponseError, MalformedJSONError


def test_strip_code_fences_is_identity_on_clean_json():
    clean = '{"riskManagement": [], "note": "no fences here"}'
    assert strip_code_fences(clean) == clean


def test_strip_code_fences_removes_json_and_bare_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```').strip() == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```').strip() == '{"a": 1}'


def test_brace_extraction_ignores_surrounding_prose():
    assert parse_json_response('Here is the result: {"a":1} Thanks!') == {"a": 1}


def test_extract_object_span_without_braces_returns_text():
    assert extract_object_span("no object") == "no object"


def test_fenced_response_parsing_is_idempotent():
    raw = 'Sure!\n```json\n{"area": "ESG Policy", "levels": ["Level 0", "Level 1"]}\n```\nLet me know.'
    first = parse_json_response(raw)
    second = parse_json_response(raw)
    assert first == second == {"area": "ESG Policy", "levels": ["Level 0", "Level 1"]}


@pytest.mark.parametrize("raw", ["", "   \n\t"])
def test_blank_response_raises_empty_response(raw):
    with pytest.raises(EmptyResponseError):
        parse_json_response(raw)


def test_malformed_response_carries_preview():
    raw = "{not json at all" + "x" * 1000 + "}"
    with pytest.raises(MalformedJSONError) as exc_info:
        parse_json_response(raw)

    err = exc_info.value
    assert err.response_preview == raw[:PREVIEW_CHARS]
    assert "Response preview" in err.message


def test_non_object_json_is_rejected():
    with pytest.raises(MalformedJSONError):
        parse_json_response("[1, 2, 3]")


def test_two_objects_hit_known_greedy_limitation():
    with pytest.raises(MalformedJSONError):
        parse_json_response('{"a": 1} and also {"b": 2}')
