"""Order, customer and gift card models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict


class Customer(BaseModel):
    """Customer attached to a Shopify order (id + email are all we use)."""

    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    email: str | None = None


class Order(BaseModel):
    """Shopify orders/create payload, reduced to the fields the reward needs."""

    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    total_price: str | int | float | None = None
    currency: str | None = None
    customer: Customer | None = None

    @property
    def customer_id(self) -> int | str | None:
        """Customer id, or None for guest orders."""
        if self.customer is None or self.customer.id in (None, ""):
            return None
        return self.customer.id

    def total(self) -> Decimal:
        """Order total as a Decimal; only read when a reward is due."""
        if self.total_price is None or isinstance(self.total_price, bool):
            raise ValueError(f"Order {self.id} has no total_price")
        try:
            total = Decimal(str(self.total_price))
        except InvalidOperation as e:
            raise ValueError(f"Order {self.id} has invalid total_price: {self.total_price!r}") from e
        if not total.is_finite():
            raise ValueError(f"Order {self.id} has invalid total_price: {self.total_price!r}")
        return total


@dataclass(frozen=True)
class RewardInstrument:
    """A gift card as created on the platform (no local copy is kept)."""

    amount: str
    customer_id: int | str
    note: str
    code: str | None = None
    id: int | None = None
