"""
SMTP Email Channel
==================
Delivers OTPs by email through an SMTP relay.
"""

import os
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
import structlog

from ..otp.hashing import mask_identifier
from ..otp.models import Purpose
from .base import DeliveryChannel, DeliveryResult
from .templates import BRAND, email_html, email_subject, email_text

logger = structlog.get_logger(__name__)


@dataclass
class SMTPConfig:
    """SMTP relay settings."""
    host: str = "smtp.gmail.com"
    port: int = 587
    username: str = ""
    password: str = ""
    from_email: str = ""
    use_tls: bool = False
    start_tls: bool = True
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "SMTPConfig":
        secure = os.environ.get("SMTP_SECURE", "").lower() == "true"
        username = os.environ.get("EMAIL_USER", "")
        return cls(
            host=os.environ.get("SMTP_HOST", "smtp.gmail.com"),
            port=int(os.environ.get("SMTP_PORT", "587")),
            username=username,
            password=os.environ.get("EMAIL_PASSWORD", ""),
            from_email=os.environ.get("EMAIL_FROM", username),
            use_tls=secure,
            start_tls=not secure,
        )


class SMTPEmailChannel(DeliveryChannel):
    """Email delivery with HTML and plain-text parts."""

    name = "smtp"

    def __init__(self, config: SMTPConfig):
        self.config = config

    def is_configured(self) -> bool:
        return bool(self.config.username and self.config.password)

    def build_message(self, destination: str, code: str, purpose: Purpose, expires_in: int) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = email_subject(purpose)
        msg["From"] = f"{BRAND} <{self.config.from_email or self.config.username}>"
        msg["To"] = destination
        msg.attach(MIMEText(email_text(code, purpose, expires_in), "plain"))
        msg.attach(MIMEText(email_html(code, purpose, expires_in), "html"))
        return msg

    async def send_code(
        self,
        destination: str,
        code: str,
        purpose: Purpose,
        expires_in: int,
    ) -> DeliveryResult:
        if not self.is_configured():
            logger.warning("email_channel_not_configured")
            return DeliveryResult(delivered=False, error_detail="Email service not configured")

        msg = self.build_message(destination, code, purpose, expires_in)
        try:
            await aiosmtplib.send(
                msg,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.password,
                use_tls=self.config.use_tls,
                start_tls=self.config.start_tls,
                timeout=self.config.timeout,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("email_send_failed", to=mask_identifier(destination), error=str(e))
            return DeliveryResult(delivered=False, error_detail=f"Failed to send email: {e}")

        logger.info("email_sent", to=mask_identifier(destination))
        return DeliveryResult(delivered=True)

    async def check_connection(self) -> bool:
        """Connect and log in to the relay to confirm the credentials work."""
        if not self.is_configured():
            return False
        smtp = aiosmtplib.SMTP(
            hostname=self.config.host,
            port=self.config.port,
            use_tls=self.config.use_tls,
            start_tls=self.config.start_tls,
            timeout=self.config.timeout,
        )
        try:
            async with smtp:
                await smtp.login(self.config.username, self.config.password)
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("smtp_connection_failed", host=self.config.host, error=str(e))
            return False
        logger.info("smtp_connection_verified", host=self.config.host)
        return True
