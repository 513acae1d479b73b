"""HMAC signing for outbound webhook requests."""

import hashlib
import hmac
import json
from typing import Any

SIGNATURE_HEADER = "X-Webhook-Signature"
SIGNATURE_PREFIX = "sha256="


def serialize_payload(payload: Any) -> bytes:
    """Serialize a payload to the exact bytes that are signed and sent.

    Compact separators and unescaped unicode keep the body identical to what
    a JavaScript producer would emit with ``JSON.stringify``.
    """
    return json.dumps(
        payload,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def generate_signature(payload_bytes: bytes, secret: str) -> str:
    """Generate the ``X-Webhook-Signature`` value for a payload.

    Args:
        payload_bytes: The raw request body.
        secret: The configuration's secret key.

    Returns:
        ``sha256=`` followed by the hex-encoded HMAC-SHA256 digest.
    """
    digest = hmac.new(
        secret.encode("utf-8"),
        payload_bytes,
        hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload_bytes: bytes, secret: str, signature: str | None) -> bool:
    """Check a received signature header against the raw request body."""
    if not signature:
        return False
    expected = generate_signature(payload_bytes, secret)
    return hmac.compare_digest(expected, signature)
