"""
Transport envelope codec.

Request bodies go out as plain JSON. Response bodies always come back
zlib-compressed (zlib header + deflate, not gzip), whatever the
``Content-Encoding`` header claims, so decoding is inflate, then UTF-8,
then JSON. Each stage failure raises ``CodecError`` naming the stage.

These functions are pure; they neither log nor retry.
"""

from __future__ import annotations

import json
import zlib
from typing import Any

from tarkov_api.api.errors import CodecError

# The backend rejects a literal ``null`` body.
EMPTY_BODY = b"{}"


def encode(body: Any) -> bytes:
    """
    Serialize a request body to JSON bytes.

    Args:
        body: Any JSON-serializable value. ``None`` means "no fields".

    Returns:
        bytes: UTF-8 JSON, ``b"{}"`` when there is nothing to send.

    Raises:
        CodecError: If ``body`` cannot be serialized.
    """
    if body is None:
        return EMPTY_BODY

    try:
        text = json.dumps(body, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise CodecError(stage="encode", detail=str(e)) from e

    if text == "null":
        return EMPTY_BODY
    return text.encode("utf-8")


def compress(data: bytes) -> bytes:
    """zlib-compress ``data`` the way the backend does."""
    return zlib.compress(data)


def inflate(raw: bytes) -> bytes:
    """Inflate a zlib stream, raising ``CodecError`` on corrupt or truncated input."""
    try:
        return zlib.decompress(raw)
    except zlib.error as e:
        raise CodecError(stage="inflate", detail=str(e)) from e


def parse(data: bytes) -> Any:
    """Decode already-inflated UTF-8 JSON bytes."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CodecError(stage="utf-8", detail=str(e)) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CodecError(stage="json", detail=str(e)) from e


def decode(raw: bytes) -> Any:
    """
    Decode a compressed response body.

    Args:
        raw: The full response body as received.

    Returns:
        The parsed JSON value.

    Raises:
        CodecError: If inflating, UTF-8 decoding or JSON parsing fails.
    """
    return parse(inflate(raw))
