"""GitHub webhook signature validation (X-Hub-Signature-256)."""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def sign_payload(raw_payload: bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` header value GitHub sends for ``raw_payload``."""
    digest = hmac.new(secret.encode(), raw_payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def validate_signature(
    raw_payload: bytes,
    signature_header: str | None,
    secret: str | None,
) -> bool:
    """Verify a delivery signature against the configured shared secret.

    Signature checking is opt-in: with no secret configured every delivery is
    accepted. With a secret, a missing or empty header is rejected. The
    comparison uses ``hmac.compare_digest`` so a mismatch takes the same time
    regardless of where it occurs.
    """
    if not secret:
        return True
    if not signature_header:
        return False

    expected = sign_payload(raw_payload, secret)
    return hmac.compare_digest(signature_header.encode(), expected.encode())
