"""Log-only notification sink: records a pending notification for manual follow-up."""

from __future__ import annotations

import logging

from giftback.channels.protocol import mask_code

logger = logging.getLogger(__name__)


class LogNotifier:
    """Default sink when no delivery channel is configured."""

    @property
    def channel_type(self) -> str:
        return "log"

    async def notify(self, customer_email: str | None, code: str, amount: str) -> None:
        logger.info(
            "NOTIFICATION PENDING email=%s code=%s amount=%s",
            customer_email or "unknown",
            mask_code(code),
            amount,
        )
