"""Shopify Admin REST API access for order history and gift cards.

Two narrow capabilities share one client:
- ShopifyOrderHistory.count_orders fails soft: any error degrades to 0
- ShopifyGiftCardIssuer.issue fails hard: any error raises GiftCardIssueError

Each call opens its own httpx.AsyncClient with a bounded timeout, so
concurrent webhook deliveries share no mutable state.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from giftback.config import Settings
from giftback.models import RewardInstrument
from giftback.webhooks.rewards import format_amount

logger = logging.getLogger(__name__)


class ShopifyAPIError(Exception):
    """A Shopify Admin API call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GiftCardIssueError(ShopifyAPIError):
    """Gift card creation failed; no gift card was issued."""


class ShopifyAdminClient:
    """Thin async wrapper over the Shopify Admin REST API."""

    def __init__(
        self,
        domain: str,
        access_token: str,
        api_version: str = "2023-10",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = f"https://{domain}/admin/api/{api_version}"
        self._access_token = access_token
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> ShopifyAdminClient:
        return cls(
            domain=settings.shop_domain,
            access_token=settings.shopify_access_token.get_secret_value(),
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "X-Shopify-Access-Token": self._access_token,
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    async def get(self, path: str) -> httpx.Response:
        async with self._client() as client:
            return await client.get(path)

    async def post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        async with self._client() as client:
            return await client.post(path, json=payload)


class ShopifyOrderHistory:
    """Counts a customer's orders. Never raises to its caller."""

    def __init__(self, client: ShopifyAdminClient):
        self._client = client

    async def count_orders(self, customer_id: int | str) -> int:
        """Return the customer's total order count, or 0 on any failure."""
        path = f"/customers/{customer_id}/orders/count.json"
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            count = response.json().get("count")
        except Exception:
            # Fail soft: a lookup error means "not the second order"
            logger.warning(
                "Order count lookup failed for customer %s — defaulting to 0",
                customer_id,
                exc_info=True,
            )
            return 0

        if isinstance(count, bool) or not isinstance(count, int):
            logger.warning(
                "Order count response for customer %s has no integer count: %r",
                customer_id,
                count,
            )
            return 0
        return count


class ShopifyGiftCardIssuer:
    """Creates gift cards. Failures propagate as GiftCardIssueError."""

    def __init__(self, client: ShopifyAdminClient):
        self._client = client

    async def issue(
        self, customer_id: int | str, amount: str, note: str
    ) -> RewardInstrument:
        """Create a gift card worth `amount` owned by `customer_id`.

        Raises:
            GiftCardIssueError: on network error, timeout, non-2xx status, or
                an unreadable success body.
        """
        initial_value = format_amount(amount)
        payload = {
            "gift_card": {
                "initial_value": initial_value,
                "customer_id": customer_id,
                "note": note,
            }
        }

        try:
            response = await self._client.post("/gift_cards.json", payload)
        except httpx.HTTPError as e:
            raise GiftCardIssueError(
                f"Gift card request failed: {type(e).__name__}"
            ) from e

        if not response.is_success:
            raise GiftCardIssueError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            gift_card = response.json()["gift_card"]
        except (ValueError, KeyError, TypeError) as e:
            raise GiftCardIssueError(
                "Gift card response missing gift_card object",
                status_code=response.status_code,
            ) from e
        if not isinstance(gift_card, dict):
            raise GiftCardIssueError(
                "Gift card response missing gift_card object",
                status_code=response.status_code,
            )

        logger.info(
            "Gift card created: %s for customer %s", initial_value, customer_id
        )
        return RewardInstrument(
            amount=initial_value,
            customer_id=customer_id,
            note=note,
            code=gift_card.get("code"),
            id=gift_card.get("id"),
        )
