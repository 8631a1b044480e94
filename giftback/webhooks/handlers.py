"""Webhook HTTP handlers — FastAPI routes for the inbound webhook.

The route accepts every method so that non-POST requests get the JSON 405
body from the orchestrator instead of the framework default. The raw body is
read before any parsing; signature verification needs the exact bytes.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from giftback.webhooks.orchestrator import SecondOrderRewardHandler

logger = logging.getLogger(__name__)

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def register_webhook_routes(
    app: FastAPI, handler: SecondOrderRewardHandler, path: str = "/api/webhook"
) -> None:
    """Register the webhook endpoint and health check on the FastAPI app."""

    @app.api_route(path, methods=_ALL_METHODS)
    async def order_created_webhook(request: Request):
        """Receive Shopify orders/create webhooks (signature-verified)."""
        if request.method == "POST":
            body = await request.body()
        else:
            body = b""
        result = await handler.handle(request.method, body, request.headers)
        return JSONResponse(result.body, status_code=result.status_code)

    @app.get("/health")
    async def health():
        """Liveness check."""
        return {"status": "ok"}

    logger.info("Webhook route registered: %s", path)
