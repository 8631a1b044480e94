"""Tests for Shopify webhook signature verification.

Tests:
- Valid / invalid / tampered / missing signatures
- Length mismatch and non-ASCII headers fail without raising
- Sign-then-verify property over arbitrary bodies
"""

from __future__ import annotations

import inspect

from hypothesis import given, settings
from hypothesis import strategies as st

from giftback.webhooks import verification
from giftback.webhooks.verification import compute_signature, verify_shopify

SECRET = b"shopify-test-secret"


class TestShopifyVerification:
    """Shopify HMAC-SHA256 verification (base64-encoded)."""

    def test_valid_signature(self):
        body = b'{"id": 123, "total_price": "29.99"}'
        sig = compute_signature(body, SECRET)
        assert verify_shopify(body, sig, SECRET) is True

    def test_known_vector(self):
        """Matches an independently computed HMAC-SHA256/base64 value."""
        body = b"The quick brown fox jumps over the lazy dog"
        assert (
            compute_signature(body, b"key")
            == "97yD9DBThCSxMpjmqm+xQ+9NWaFJRhdZl0edvC0aPNg="
        )

    def test_invalid_signature(self):
        body = b'{"id": 123}'
        assert verify_shopify(body, "invalid-signature", SECRET) is False

    def test_tampered_body(self):
        sig = compute_signature(b'{"id": 123}', SECRET)
        assert verify_shopify(b'{"id": 456}', sig, SECRET) is False

    def test_reserialized_body_fails(self):
        """Whitespace changes from re-serialization break the signature."""
        original = b'{"id":123,"total_price":"10.00"}'
        sig = compute_signature(original, SECRET)
        reformatted = b'{"id": 123, "total_price": "10.00"}'
        assert verify_shopify(reformatted, sig, SECRET) is False

    def test_wrong_secret(self):
        body = b'{"id": 123}'
        sig = compute_signature(body, b"other-secret")
        assert verify_shopify(body, sig, SECRET) is False

    def test_missing_signature(self):
        assert verify_shopify(b"body", None, SECRET) is False

    def test_empty_signature(self):
        assert verify_shopify(b"body", "", SECRET) is False

    def test_missing_secret_rejects(self):
        """No secret configured -> always reject (fail-closed)."""
        body = b'{"id": 123}'
        assert verify_shopify(body, compute_signature(body, b""), b"") is False

    def test_length_mismatch_returns_false(self):
        body = b'{"id": 123}'
        sig = compute_signature(body, SECRET)
        assert verify_shopify(body, sig[:-4], SECRET) is False
        assert verify_shopify(body, sig + "AAAA", SECRET) is False

    def test_non_ascii_signature_returns_false(self):
        assert verify_shopify(b"body", "sïgnätüre✓", SECRET) is False


class TestConstantTimeComparison:
    """The comparison must go through hmac.compare_digest."""

    def test_uses_compare_digest(self):
        source = inspect.getsource(verification.verify_shopify)
        assert "hmac.compare_digest" in source
        assert "==" not in source


class TestSignatureProperties:
    """sign/verify properties over arbitrary inputs."""

    @given(st.binary(max_size=2048), st.binary(min_size=1, max_size=64))
    @settings(max_examples=100)
    def test_sign_then_verify(self, body: bytes, secret: bytes) -> None:
        assert verify_shopify(body, compute_signature(body, secret), secret) is True

    @given(st.binary(max_size=512), st.binary(max_size=512))
    @settings(max_examples=100)
    def test_signature_does_not_transfer(self, body1: bytes, body2: bytes) -> None:
        if body1 == body2:
            return
        sig = compute_signature(body2, SECRET)
        assert verify_shopify(body1, sig, SECRET) is False
