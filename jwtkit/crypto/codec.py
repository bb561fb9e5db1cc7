"""Compact JWT encoding and decoding without signature handling."""

import base64
import binascii
import json
from typing import Any

from jwtkit.crypto.types import (
    DecodedToken,
    DecodeError,
    DecodeErrorKind,
    EncodedSegments,
)

TOKEN_SEGMENTS = 3


def base64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(segment: str) -> bytes:
    """Decode a base64url segment, restoring any stripped padding.

    Raises ``binascii.Error`` when the segment is not valid base64url.
    """
    standard = segment.replace("-", "+").replace("_", "/")
    padding = "=" * (-len(standard) % 4)
    return base64.b64decode(standard + padding, validate=True)


def _decode_json_segment(segment: str, part: str) -> dict[str, Any] | DecodeError:
    try:
        raw = base64url_decode(segment)
    except (binascii.Error, ValueError):
        return DecodeError(
            kind=DecodeErrorKind.INVALID_BASE64,
            message=f"Invalid JWT format: {part} is not valid base64url",
        )
    try:
        value = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return DecodeError(
            kind=DecodeErrorKind.INVALID_JSON,
            message=f"Invalid JWT format: {part} is not valid JSON",
        )
    if not isinstance(value, dict):
        return DecodeError(
            kind=DecodeErrorKind.INVALID_JSON,
            message=f"Invalid JWT format: {part} is not a JSON object",
        )
    return value


def decode(token: str) -> DecodedToken | DecodeError:
    """Split a compact token into header, payload and raw signature."""
    parts = token.strip().split(".")
    if len(parts) != TOKEN_SEGMENTS:
        return DecodeError(
            kind=DecodeErrorKind.MALFORMED_TOKEN,
            message=f"Invalid JWT format: expected 3 segments, got {len(parts)}",
        )

    header = _decode_json_segment(parts[0], "header")
    if isinstance(header, DecodeError):
        return header
    payload = _decode_json_segment(parts[1], "payload")
    if isinstance(payload, DecodeError):
        return payload
    return DecodedToken(header=header, payload=payload, signature=parts[2])


def _encode_json(obj: dict[str, Any]) -> str:
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    return base64url_encode(text.encode("utf-8"))


def encode_header_payload(
    header: dict[str, Any], payload: dict[str, Any]
) -> EncodedSegments:
    """Build the signing input segments, preserving key order."""
    return EncodedSegments(
        header_segment=_encode_json(header),
        payload_segment=_encode_json(payload),
    )
