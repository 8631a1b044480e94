"""Webhook inbound system.

Receives Shopify orders/create webhooks. Each webhook is signature-verified,
checked against the customer's order history, and rewarded with a gift card
when it is the customer's second order.
"""
