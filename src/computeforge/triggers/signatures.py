"""Webhook signature verification (HMAC-SHA256)."""

from __future__ import annotations

import hashlib
import hmac

GITHUB_SIGNATURE_HEADER = "X-Hub-Signature-256"
PAGERDUTY_SIGNATURE_HEADER = "X-PagerDuty-Signature"


def _digest(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def sign_github(secret: str, body: bytes) -> str:
    return f"sha256={_digest(secret, body)}"


def sign_pagerduty(secret: str, body: bytes) -> str:
    return f"v1={_digest(secret, body)}"


def verify_github_signature(secret: str | None, body: bytes, header: str | None) -> bool:
    """Check ``X-Hub-Signature-256``. Always true when no secret is configured."""
    if not secret:
        return True
    if not header:
        return False
    return hmac.compare_digest(header.strip(), sign_github(secret, body))


def verify_pagerduty_signature(secret: str | None, body: bytes, header: str | None) -> bool:
    """Check ``X-PagerDuty-Signature``.

    The header may carry several comma-separated ``v1=`` signatures while
    secrets are being rotated; any match is accepted.
    """
    if not secret:
        return True
    if not header:
        return False
    expected = sign_pagerduty(secret, body)
    return any(
        hmac.compare_digest(candidate.strip(), expected)
        for candidate in header.split(",")
        if candidate.strip().startswith("v1=")
    )
