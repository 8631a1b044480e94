"""Email notification sink — sends the customer their gift card via SMTP.

Uses standard SMTP with STARTTLS. Credentials come from Settings
(SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD, SMTP_FROM).

Security: Password stored as SecretStr, never logged.
"""

from __future__ import annotations

import asyncio
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from giftback.channels.log import LogNotifier
from giftback.channels.protocol import NotificationSink, mask_code
from giftback.config import Settings

logger = logging.getLogger(__name__)

_SUBJECT = "Your gift card for your second order"


class EmailNotifier:
    """Gift card notification via SMTP."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: str = "",
        smtp_from: str = "",
        timeout: float = 15.0,
    ):
        self._host = smtp_host
        self._port = smtp_port
        self._user = smtp_user
        self._password = smtp_password
        self._from = smtp_from or smtp_user
        self._timeout = timeout

    @property
    def channel_type(self) -> str:
        return "email"

    @property
    def is_configured(self) -> bool:
        return bool(self._host and self._from)

    def format_message(self, customer_email: str, code: str, amount: str) -> MIMEMultipart:
        """Format as MIME email message."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = _SUBJECT
        msg["From"] = self._from
        msg["To"] = customer_email

        text_body = (
            "Thank you for your second order!\n\n"
            f"Here is a gift card worth {amount}: {code}\n"
            "Use the code at checkout on your next purchase."
        )
        msg.attach(MIMEText(text_body, "plain"))

        safe_code = html.escape(code)
        safe_amount = html.escape(amount)
        html_body = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px;">
            <h2 style="margin: 0 0 8px 0;">Thank you for your second order!</h2>
            <p style="margin: 0; color: #333;">Here is a gift card worth <b>{safe_amount}</b>:</p>
            <p style="font-size: 20px; letter-spacing: 2px;"><code>{safe_code}</code></p>
            <p style="font-size: 11px; color: #999;">Use the code at checkout on your next purchase.</p>
        </div>
        """
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            server.starttls()
            if self._user and self._password:
                server.login(self._user, self._password)
            server.send_message(msg)

    async def notify(self, customer_email: str | None, code: str, amount: str) -> None:
        if not customer_email:
            logger.warning(
                "No customer email for gift card %s — notification skipped",
                mask_code(code),
            )
            return

        msg = self.format_message(customer_email, code, amount)
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send, msg)
        logger.info("Gift card email sent to %s (%s)", customer_email, mask_code(code))


def build_notifier(settings: Settings) -> NotificationSink:
    """Email sink when SMTP is configured, otherwise the log-only sink."""
    if settings.smtp_host:
        password = settings.smtp_password.get_secret_value() if settings.smtp_password else ""
        notifier = EmailNotifier(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=password,
            smtp_from=settings.smtp_from,
        )
        if notifier.is_configured:
            return notifier
        logger.warning("SMTP_HOST set but no sender address — falling back to log notifier")
    return LogNotifier()
