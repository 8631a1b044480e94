"""Webhook signature verification — constant-time HMAC.

Security contract:
- Signature is computed over the exact raw body bytes, never a re-serialized form
- Comparison uses hmac.compare_digest() (constant-time, no timing attacks)
- Missing signature header -> verification fails, never raises
- Missing secret -> verification always fails (fail-closed)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

# Shopify sends a base64-encoded HMAC-SHA256 of the body in this header
SHOPIFY_HMAC_HEADER = "x-shopify-hmac-sha256"


def compute_signature(body: bytes, secret: bytes) -> str:
    """Return the base64-encoded HMAC-SHA256 of body under secret."""
    digest = hmac.new(secret, body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_shopify(body: bytes, signature_header: str | None, secret: bytes) -> bool:
    """Verify Shopify webhook HMAC-SHA256 signature.

    Args:
        body: Raw request body bytes
        signature_header: Value of X-Shopify-Hmac-SHA256 header
        secret: Shared webhook secret

    Returns:
        True if signature is valid
    """
    if not secret:
        logger.warning("Webhook secret not configured — rejecting webhook")
        return False
    if not signature_header:
        return False

    computed = compute_signature(body, secret).encode("ascii")
    # Bytes comparison: differing lengths or non-ASCII input return False
    return hmac.compare_digest(computed, signature_header.encode("utf-8"))
