"""giftback — rewards a Shopify customer's second order with a gift card."""

__version__ = "0.1.0"
