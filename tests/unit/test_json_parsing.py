import pytest

from resumatch.errors import ParseError, UpstreamError
from resumatch.llm.providers import parse_json


def test_parse_json_accepts_plain_object() -> None:
    assert parse_json('{"skills": ["Go"]}') == {"skills": ["Go"]}


def test_parse_json_unwraps_fenced_array() -> None:
    content = 'Here you go:\n```json\n[{"jobId": "j1", "matchScore": 80}]\n```\n'
    assert parse_json(content) == [{"jobId": "j1", "matchScore": 80}]


def test_parse_json_unwraps_unlabelled_fence() -> None:
    assert parse_json('```\n{"ok": true}\n```') == {"ok": True}


def test_parse_json_rejects_prose() -> None:
    with pytest.raises(ParseError):
        parse_json("I could not score these jobs.")


def test_parse_json_rejects_empty_content() -> None:
    with pytest.raises(ParseError, match="empty"):
        parse_json("   ")


def test_parse_error_is_an_upstream_error() -> None:
    with pytest.raises(UpstreamError) as exc_info:
        parse_json("{broken")
    assert exc_info.value.status_code == 502
