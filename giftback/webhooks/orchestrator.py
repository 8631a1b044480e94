"""Second-order reward orchestrator — sequences one webhook delivery.

Flow per delivery (strictly sequential, no state kept between deliveries):
1. Reject non-POST with 405
2. Verify signature over the raw body -> 401 on failure, nothing else runs
3. Guest order (no customer) -> 200, no action
4. Count the customer's orders (fails soft to 0)
5. Exactly 2 -> issue gift card (fails hard), notify best-effort, 200
6. Otherwise -> 200 with the observed count

Security contract:
- Signature failures never reach the platform API
- Unexpected errors return a generic 500 body; detail stays in the logs
- Redelivery of the same order is NOT deduplicated: a replayed second-order
  webhook issues another gift card
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from giftback.channels.protocol import NotificationSink
from giftback.config import Settings
from giftback.models import Order, RewardInstrument
from giftback.tools.shopify_tool import GiftCardIssueError
from giftback.webhooks.rewards import compute_reward_amount, is_qualifying_order
from giftback.webhooks.verification import SHOPIFY_HMAC_HEADER, verify_shopify

logger = logging.getLogger(__name__)

ALLOWED_METHOD = "POST"

MSG_METHOD_NOT_ALLOWED = "Method not allowed"
MSG_UNAUTHORIZED = "Unauthorized webhook"
MSG_NO_CUSTOMER = "No customer associated"
MSG_GIFT_CARD_CREATED = "Gift card created successfully"
MSG_NO_ACTION = "Webhook processed, no action needed"
MSG_INTERNAL_ERROR = "Internal server error"
MSG_PROCESSING_FAILED = "Webhook processing failed"


class OrderHistory(Protocol):
    """Capability: count a customer's orders (errors count as 0)."""

    async def count_orders(self, customer_id: int | str) -> int: ...


class RewardIssuer(Protocol):
    """Capability: create a gift card (raises on failure)."""

    async def issue(
        self, customer_id: int | str, amount: str, note: str
    ) -> RewardInstrument: ...


@dataclass
class WebhookResponse:
    """Status code and JSON body returned to the sending platform."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def _audit(outcome: str, order_id: Any = None, **details: Any) -> None:
    """Audit log for webhook activity."""
    extra = " ".join(f"{k}={v}" for k, v in details.items())
    logger.info(
        "WEBHOOK_AUDIT outcome=%s order=%s %s", outcome, order_id or "unknown", extra
    )


class SecondOrderRewardHandler:
    """Entry point for orders/create deliveries."""

    def __init__(
        self,
        settings: Settings,
        order_history: OrderHistory,
        reward_issuer: RewardIssuer,
        notifier: NotificationSink,
    ):
        self._secret = settings.webhook_secret_bytes
        self._reward_rate = settings.reward_rate
        self._note = settings.gift_card_note
        self._order_history = order_history
        self._reward_issuer = reward_issuer
        self._notifier = notifier

    async def handle(
        self, method: str, body: bytes, headers: Mapping[str, str]
    ) -> WebhookResponse:
        """Process one delivery and return the response to send back."""
        if method.upper() != ALLOWED_METHOD:
            _audit("method_not_allowed", method=method)
            return WebhookResponse(405, {"error": MSG_METHOD_NOT_ALLOWED})

        try:
            return await self._process(body, headers)
        except GiftCardIssueError as e:
            logger.error("Gift card creation failed: %s (status=%s)", e, e.status_code)
            _audit("gift_card_failed", status=e.status_code)
            return WebhookResponse(500, {"error": MSG_INTERNAL_ERROR, "message": str(e)})
        except Exception:
            logger.exception("Webhook processing error")
            _audit("error")
            return WebhookResponse(
                500, {"error": MSG_INTERNAL_ERROR, "message": MSG_PROCESSING_FAILED}
            )

    async def _process(self, body: bytes, headers: Mapping[str, str]) -> WebhookResponse:
        signature = _get_header(headers, SHOPIFY_HMAC_HEADER)
        if not verify_shopify(body, signature, self._secret):
            _audit("signature_failed")
            return WebhookResponse(401, {"error": MSG_UNAUTHORIZED})

        order = Order.model_validate(json.loads(body))

        customer_id = order.customer_id
        if customer_id is None:
            logger.info("Order %s has no customer associated, ignoring", order.id)
            _audit("no_customer", order.id)
            return WebhookResponse(200, {"message": MSG_NO_CUSTOMER})

        email = order.customer.email if order.customer else None
        order_count = await self._count_orders(customer_id)
        logger.info("Customer %s has %d orders", email or customer_id, order_count)

        if not is_qualifying_order(order_count):
            _audit("no_action", order.id, count=order_count)
            return WebhookResponse(200, {"message": MSG_NO_ACTION, "orderCount": order_count})

        total = order.total()
        amount = compute_reward_amount(total, self._reward_rate)
        logger.info(
            "Processing second order for %s: total=%s gift_card=%s",
            email or customer_id,
            total,
            amount,
        )

        instrument = await self._reward_issuer.issue(customer_id, amount, self._note)

        if instrument.code:
            await self._notify(email, instrument.code, instrument.amount)

        _audit("gift_card_created", order.id, amount=amount)
        return WebhookResponse(
            200,
            {"message": MSG_GIFT_CARD_CREATED, "amount": amount, "customer": email},
        )

    async def _count_orders(self, customer_id: int | str) -> int:
        try:
            return await self._order_history.count_orders(customer_id)
        except Exception:
            # Lookup fails soft: treated as "not the second order"
            logger.warning(
                "Order count lookup raised for customer %s, defaulting to 0",
                customer_id,
                exc_info=True,
            )
            return 0

    async def _notify(self, email: str | None, code: str, amount: str) -> None:
        try:
            await self._notifier.notify(email, code, amount)
        except Exception:
            # Best-effort delivery
            logger.warning(
                "Gift card notification via %s failed",
                getattr(self._notifier, "channel_type", "unknown"),
                exc_info=True,
            )


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup."""
    value = headers.get(name)
    if value is not None:
        return value
    for key, val in headers.items():
        if key.lower() == name:
            return val
    return None
