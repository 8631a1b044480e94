"""giftback configuration.

All values are read once at process start (environment + optional .env) and
are immutable afterwards. Secrets are held as SecretStr so they never show up
in reprs or log lines.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings

_REQUIRED_ENV = {
    "shopify_webhook_secret": "SHOPIFY_WEBHOOK_SECRET",
    "shopify_access_token": "SHOPIFY_ACCESS_TOKEN",
    "shop_domain": "SHOP_DOMAIN",
}


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class Settings(BaseSettings):
    """Environment-driven settings for the webhook receiver."""

    shopify_webhook_secret: SecretStr
    shopify_access_token: SecretStr
    shop_domain: str
    shopify_api_version: str = "2023-10"
    shopify_timeout_seconds: float = 10.0

    reward_rate: Decimal = Decimal("0.10")
    gift_card_note: str = "Automatic gift card - 10% of second order"
    webhook_path: str = "/api/webhook"
    log_level: str = "INFO"

    # Email notification channel (optional; log-only when smtp_host is unset)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: SecretStr | None = None
    smtp_from: str = ""

    model_config = {"env_file": ".env", "extra": "ignore", "frozen": True}

    @field_validator("shopify_webhook_secret", "shopify_access_token")
    @classmethod
    def _not_blank_secret(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("shop_domain")
    @classmethod
    def _normalize_domain(cls, value: str) -> str:
        domain = value.strip()
        for scheme in ("https://", "http://"):
            if domain.lower().startswith(scheme):
                domain = domain[len(scheme):]
        domain = domain.rstrip("/")
        if not domain:
            raise ValueError("must not be empty")
        return domain

    @field_validator("reward_rate")
    @classmethod
    def _rate_in_range(cls, value: Decimal) -> Decimal:
        if not Decimal("0") < value <= Decimal("1"):
            raise ValueError("must be within (0, 1]")
        return value

    @property
    def admin_base_url(self) -> str:
        """Base URL of the Shopify Admin REST API for this shop."""
        return f"https://{self.shop_domain}/admin/api/{self.shopify_api_version}"

    @property
    def webhook_secret_bytes(self) -> bytes:
        return self.shopify_webhook_secret.get_secret_value().encode("utf-8")


def load_settings(**overrides) -> Settings:
    """Build Settings once at startup.

    Missing or blank required values are a deployment misconfiguration, so
    they surface here as ConfigurationError instead of failing per request.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "?"
            name = _REQUIRED_ENV.get(field, field.upper())
            problems.append(f"{name} ({err['msg']})")
        raise ConfigurationError(
            "Invalid configuration: " + ", ".join(problems)
        ) from e
