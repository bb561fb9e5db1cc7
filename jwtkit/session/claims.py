"""Claim helpers: common claim defaults, expiry and the claims table."""

import json
import time
from datetime import UTC, datetime
from typing import Any

import uuid_utils
from pydantic import BaseModel

from jwtkit.session.errors import ClaimsJsonInvalidError

STANDARD_CLAIMS = ("iss", "sub", "aud", "exp", "iat", "nbf", "jti")
TIMESTAMP_CLAIMS = ("exp", "iat", "nbf")
COMMON_CLAIM_TTL = 3600


class ClaimRow(BaseModel):
    """One payload entry as shown in the claims table."""

    name: str
    value: Any
    is_standard: bool
    is_timestamp: bool
    timestamp_iso: str | None = None
    expired: bool = False


def current_unix_time() -> int:
    return int(time.time())


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_expired(payload: dict[str, Any], now: int | float) -> bool:
    """True iff ``exp`` is numeric and already in the past."""
    exp = payload.get("exp")
    return _is_number(exp) and exp < now


def format_json(obj: dict[str, Any]) -> str:
    """Render claims the way the text buffers display them."""
    return json.dumps(obj, indent=2, ensure_ascii=False)


def parse_claims(text: str, part: str) -> dict[str, Any]:
    """Parse a claims text buffer, requiring a JSON object."""
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ClaimsJsonInvalidError(part, exc.msg) from exc
    if not isinstance(value, dict):
        raise ClaimsJsonInvalidError(part, "expected a JSON object")
    return value


def add_common_claims(
    payload: dict[str, Any], *, now: int | None = None
) -> dict[str, Any]:
    """Return a copy of ``payload`` with absent standard claims filled in."""
    issued_at = current_unix_time() if now is None else now
    defaults: dict[str, Any] = {
        "iss": "your-app",
        "sub": "user-id",
        "aud": "your-audience",
        "iat": issued_at,
        "exp": issued_at + COMMON_CLAIM_TTL,
        "nbf": issued_at,
    }
    updated = dict(payload)
    for name, value in defaults.items():
        if updated.get(name) is None:
            updated[name] = value
    if updated.get("jti") is None:
        updated["jti"] = str(uuid_utils.uuid7())
    return updated


def _timestamp_iso(value: int | float) -> str | None:
    try:
        return datetime.fromtimestamp(value, UTC).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def describe_claims(payload: dict[str, Any], *, now: int | float) -> list[ClaimRow]:
    """Build the claims table rows for a decoded payload."""
    rows = []
    for name, value in payload.items():
        is_timestamp = name in TIMESTAMP_CLAIMS and _is_number(value)
        rows.append(
            ClaimRow(
                name=name,
                value=value,
                is_standard=name in STANDARD_CLAIMS,
                is_timestamp=is_timestamp,
                timestamp_iso=_timestamp_iso(value) if is_timestamp else None,
                expired=name == "exp" and is_expired(payload, now),
            )
        )
    return rows
