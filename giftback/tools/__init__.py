"""Outbound Shopify Admin API access."""
