"""Tests for defensive response parsing."""

import httpx
import pytest

from common.exceptions import MalformedResponseError
from common.response_parser import (
    extract_error_message,
    graph_error_message,
    parse_json_text,
    parse_response
)


def test_parse_plain_json():
    """Valid JSON parses unchanged."""
    assert parse_json_text('{"files": [{"id": "1"}]}') == {'files': [{'id': '1'}]}


def test_parse_trims_trailing_markup():
    """Injected markup after the document is discarded."""
    body = '{"files":[{"id":"a"},{"id":"b"}]}<script src="//ads.example/x.js"></script><!-- hosting -->'
    assert parse_json_text(body) == {'files': [{'id': 'a'}, {'id': 'b'}]}


def test_parse_keeps_leading_document_when_markup_has_braces():
    """Braces inside the injected markup do not spoil the leading document."""
    assert parse_json_text('{"a": {"b": 1}}\n<div>}</div>') == {'a': {'b': 1}}
    body = '{"files":[{"id":"a"}]}<script>window.x = {};</script>'
    assert parse_json_text(body) == {'files': [{'id': 'a'}]}


def test_parse_leading_whitespace_before_document():
    assert parse_json_text('\n  {"ok": true}<!-- injected -->') == {'ok': True}


def test_parse_without_json_raises_with_bounded_excerpt():
    """A body without a JSON prefix fails with a truncated excerpt."""
    body = '<html>' + 'x' * 500 + '</html>'
    with pytest.raises(MalformedResponseError) as exc_info:
        parse_json_text(body)

    assert exc_info.value.excerpt == body[:100]
    assert len(exc_info.value.excerpt) == 100
    assert 'Invalid JSON response' in str(exc_info.value)


def test_parse_response_empty_body():
    """An empty body decodes to an empty dict."""
    assert parse_response(httpx.Response(200, content=b'')) == {}


def test_extract_error_message_prefers_envelope():
    """The {message} envelope is surfaced verbatim."""
    response = httpx.Response(404, json={'message': 'Graph API Error: Item not found'})
    assert extract_error_message(response, 'fallback') == 'Graph API Error: Item not found'


def test_extract_error_message_fallback():
    """Unreadable or envelope-less bodies use the fallback."""
    assert extract_error_message(httpx.Response(500, text='<h1>Oops</h1>'), 'fallback') == 'fallback'
    assert extract_error_message(httpx.Response(500, json={'detail': 'x'}), 'fallback') == 'fallback'


def test_graph_error_message():
    """Graph's nested error.message is read when present."""
    assert graph_error_message({'error': {'message': 'Access denied'}}, 'fb') == 'Access denied'
    assert graph_error_message({'error': 'flat'}, 'fb') == 'fb'
    assert graph_error_message(None, 'fb') == 'fb'
