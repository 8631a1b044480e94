"""Shared fixtures for the giftback test suite."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from unittest.mock import AsyncMock

import pytest

from giftback.config import Settings
from giftback.models import RewardInstrument
from giftback.webhooks.orchestrator import SecondOrderRewardHandler

WEBHOOK_SECRET = "test-secret"
SHOP_DOMAIN = "test-shop.myshopify.com"


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Compute a valid Shopify signature for body."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def order_body(total_price: str = "100.00", customer: dict | None = None, **extra) -> bytes:
    """Serialize an orders/create payload the way Shopify would send it."""
    payload = {"id": 820982911946154508, "total_price": total_price, "currency": "EUR"}
    if customer is not None:
        payload["customer"] = customer
    payload.update(extra)
    return json.dumps(payload).encode()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        shopify_webhook_secret=WEBHOOK_SECRET,
        shopify_access_token="shpat_test_token",
        shop_domain=SHOP_DOMAIN,
        _env_file=None,
    )


@pytest.fixture
def order_history() -> AsyncMock:
    """OrderHistory spy; defaults to the qualifying second order."""
    history = AsyncMock()
    history.count_orders.return_value = 2
    return history


@pytest.fixture
def reward_issuer() -> AsyncMock:
    issuer = AsyncMock()

    async def _issue(customer_id, amount, note):
        return RewardInstrument(
            amount=amount, customer_id=customer_id, note=note, code="GIFT1234ABCD", id=1
        )

    issuer.issue.side_effect = _issue
    return issuer


@pytest.fixture
def notifier() -> AsyncMock:
    sink = AsyncMock()
    sink.channel_type = "mock"
    return sink


@pytest.fixture
def handler(settings, order_history, reward_issuer, notifier) -> SecondOrderRewardHandler:
    return SecondOrderRewardHandler(
        settings=settings,
        order_history=order_history,
        reward_issuer=reward_issuer,
        notifier=notifier,
    )


@pytest.fixture
def make_signature():
    """Factory for valid X-Shopify-Hmac-SHA256 values."""
    return sign


@pytest.fixture
def make_order_body():
    """Factory for raw orders/create bodies."""
    return order_body
