"""Application factory and uvicorn entry point.

Configuration is loaded once here; a missing secret, token or shop domain
aborts startup with ConfigurationError.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from giftback import __version__
from giftback.channels.email import build_notifier
from giftback.config import Settings, load_settings
from giftback.logging_setup import configure_logging
from giftback.tools.shopify_tool import (
    ShopifyAdminClient,
    ShopifyGiftCardIssuer,
    ShopifyOrderHistory,
)
from giftback.webhooks.handlers import register_webhook_routes
from giftback.webhooks.orchestrator import SecondOrderRewardHandler

logger = logging.getLogger(__name__)


def build_handler(settings: Settings) -> SecondOrderRewardHandler:
    """Wire the orchestrator with the Shopify-backed components."""
    client = ShopifyAdminClient.from_settings(settings)
    return SecondOrderRewardHandler(
        settings=settings,
        order_history=ShopifyOrderHistory(client),
        reward_issuer=ShopifyGiftCardIssuer(client),
        notifier=build_notifier(settings),
    )


def create_app(
    settings: Settings | None = None,
    handler: SecondOrderRewardHandler | None = None,
) -> FastAPI:
    """Create the FastAPI app for the webhook receiver."""
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="giftback", version=__version__)
    register_webhook_routes(app, handler or build_handler(settings), settings.webhook_path)

    logger.info(
        "giftback %s ready for shop %s (API %s)",
        __version__,
        settings.shop_domain,
        settings.shopify_api_version,
    )
    return app


def main() -> None:
    """Run the receiver under uvicorn."""
    import uvicorn

    uvicorn.run(
        "giftback.serve:create_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
