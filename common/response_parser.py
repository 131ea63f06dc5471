"""
Single entry point for decoding JSON response bodies.

Some hosting environments append markup after the JSON document. When the
whole body does not decode, the leading JSON document is kept and the rest
is dropped. Every other module goes through this file so the trimming can be
removed in one place.
"""

import json
from typing import Any, Optional

import httpx

from common.constants import MALFORMED_EXCERPT_LENGTH
from common.exceptions import MalformedResponseError
from common.logging_config import get_logger

logger = get_logger(__name__)


def parse_json_text(text: str) -> Any:
    """
    Decode a JSON document, tolerating trailing garbage after it.

    Args:
        text: Raw response body

    Returns:
        Decoded JSON value

    Raises:
        MalformedResponseError: If no valid JSON prefix can be found
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    stripped = text.lstrip()
    try:
        data, end = json.JSONDecoder().raw_decode(stripped)
    except json.JSONDecodeError as e:
        logger.warning(f"No JSON document at the start of the response body: {e}")
    else:
        logger.debug(f"Trimmed {len(stripped) - end} trailing byte(s) from response body")
        return data

    excerpt = text[:MALFORMED_EXCERPT_LENGTH]
    raise MalformedResponseError(f"Invalid JSON response: {excerpt}...", excerpt=excerpt)


def parse_response(response: httpx.Response) -> Any:
    """
    Decode the body of an HTTP response.

    Args:
        response: Response whose body has been read

    Returns:
        Decoded JSON value, or an empty dict for an empty body
    """
    text = response.text
    if not text.strip():
        return {}
    return parse_json_text(text)


def extract_error_message(response: httpx.Response, fallback: str) -> str:
    """
    Read the {message} error envelope of a non-success response.

    Args:
        response: Non-success response
        fallback: Message to use when the envelope is missing or unreadable

    Returns:
        The upstream message when present, else the fallback
    """
    try:
        data = parse_response(response)
    except MalformedResponseError:
        return fallback
    if isinstance(data, dict):
        message = data.get('message')
        if isinstance(message, str) and message:
            return message
    return fallback


def graph_error_message(body: Any, fallback: str) -> str:
    """Return error.message from a Graph error body, or the fallback."""
    if isinstance(body, dict):
        error = body.get('error')
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
    return fallback


def safe_parse_response(response: httpx.Response) -> Optional[Any]:
    """Decode a response body, returning None instead of raising."""
    try:
        return parse_response(response)
    except MalformedResponseError:
        return None
