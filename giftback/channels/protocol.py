"""Notification sink protocol.

A sink tells the customer (or an operator) about an issued gift card.
Delivery is best-effort: the orchestrator logs sink failures and never lets
them change the webhook response.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class NotificationSink(Protocol):
    """Protocol for gift card notification channels."""

    @property
    def channel_type(self) -> str:
        """Type of channel (log, email, ...)."""
        ...

    async def notify(self, customer_email: str | None, code: str, amount: str) -> None:
        """Deliver a gift card notification."""
        ...


def mask_code(code: str) -> str:
    """Show only the last four characters of a gift card code."""
    if len(code) <= 4:
        return "*" * len(code)
    return "*" * (len(code) - 4) + code[-4:]
