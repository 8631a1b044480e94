"""Process-wide logging: stdout handler with secret masking.

Modules log through logging.getLogger(__name__); this only wires the root
handler once at startup.
"""

from __future__ import annotations

import logging
import re
import sys

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_TRACEBACK_FORMATTER = logging.Formatter()

# Shopify admin tokens and shared secrets
_SHOPIFY_TOKEN_PATTERN = re.compile(r"shp(?:at|ss|ca|pa)_[A-Za-z0-9]+")
_KEY_VALUE_PATTERN = re.compile(
    r"((?:secret|token|password|access[_-]?token)[\"']?\s*[:=]\s*[\"']?)([^\s\"',]+)",
    re.IGNORECASE,
)


def _mask(text: str) -> str:
    text = _SHOPIFY_TOKEN_PATTERN.sub("[SECRET]", text)
    return _KEY_VALUE_PATTERN.sub(r"\1[REDACTED]", text)


class SecretFilter(logging.Filter):
    """Mask access tokens and secret=value pairs in messages and tracebacks."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        record.msg = _mask(str(record.msg))
        if record.exc_info and not record.exc_text:
            record.exc_text = _TRACEBACK_FORMATTER.formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = _mask(record.exc_text)
        if record.stack_info:
            record.stack_info = _mask(record.stack_info)
        return True


def configure_logging(level: str = "INFO") -> None:
    """Install the giftback handler on the root logger (idempotent)."""
    root = logging.getLogger()
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)

    for existing in root.handlers:
        if getattr(existing, "_giftback", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, _DATE_FORMAT))
    handler.addFilter(SecretFilter())
    handler._giftback = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # Let uvicorn logs flow through the same formatter
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
