"""Callback signature verification (HMAC-SHA256, hex digest)."""

import hashlib
import hmac
from collections.abc import Mapping
from typing import Any

import orjson


def _payload_bytes(payload: bytes | str | Mapping[str, Any]) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    # Compact JSON in insertion order, byte-identical to JSON.stringify for plain objects
    return orjson.dumps(dict(payload))


def compute_signature(payload: bytes | str | Mapping[str, Any], secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        _payload_bytes(payload),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    payload: bytes | str | Mapping[str, Any],
    signature: str | None,
    secret: str | None,
) -> bool:
    """
    True only if `signature` is the HMAC-SHA256 of `payload` under `secret`.
    An unset secret or a missing signature always fails.
    """
    if not secret or not signature:
        return False
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
