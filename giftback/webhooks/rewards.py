"""Reward rules: which order qualifies and how much the gift card is worth."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

# Only the customer's second order is rewarded, never later ones
QUALIFYING_ORDER_COUNT = 2

DEFAULT_REWARD_RATE = Decimal("0.10")

_CENTS = Decimal("0.01")


def is_qualifying_order(order_count: int) -> bool:
    """True only when this is exactly the customer's second order."""
    return order_count == QUALIFYING_ORDER_COUNT


def format_amount(value: Decimal | str | float) -> str:
    """Render a monetary value with exactly two fractional digits."""
    amount = Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{amount:.2f}"


def compute_reward_amount(
    total: Decimal | str, rate: Decimal = DEFAULT_REWARD_RATE
) -> str:
    """Gift card value for an order total, rounded half-up to cents.

    33.337 -> "3.33", 5.00 -> "0.50", 0.05 -> "0.01", 0.001 -> "0.00".
    """
    total = Decimal(str(total))
    if total < 0:
        raise ValueError(f"Order total must not be negative: {total}")
    return format_amount(total * rate)
