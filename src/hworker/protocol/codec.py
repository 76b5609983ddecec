"""Envelope body codec.

Maps Python values to (bytes, content type) pairs and back. Strings travel
as UTF-8 text; dicts, lists and tuples travel as UTF-8 JSON; anything else,
numbers, booleans and None included, is sent as its textual representation.
"""

from __future__ import annotations

from typing import Any, Tuple

from .. import errors
from .. import json
from .fields import JSON, TEXT


_JSON_TYPES = (dict, list, tuple)


def encode(value: Any) -> Tuple[bytes, str]:
    """Return (body, content_type) for *value*.

    Raises TypeError if a dict, list or tuple contains something that cannot
    be represented in JSON.
    """

    if isinstance(value, str):
        return value.encode("utf-8"), TEXT

    if isinstance(value, (bytes, bytearray)):
        return bytes(value), TEXT

    if isinstance(value, _JSON_TYPES):
        return json.dumps(value), JSON

    return str(value).encode("utf-8"), TEXT


def decode(body: bytes, content_type: str) -> Any:
    """Return the value carried by *body*.

    JSON bodies are parsed, raising MalformedMessage on failure. Any other
    content type yields text, or the raw bytes if they are not valid UTF-8.
    """

    if body is None:
        body = b""

    if content_type == JSON:
        try:
            return json.loads(body)
        except json.DecodeError as e:
            raise errors.MalformedMessage(str(e))

    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        return bytes(body)
