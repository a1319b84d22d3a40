"""
Twilio SMS Channel
==================
Delivers OTPs over the Twilio Messages REST API.
"""

import os
import re
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from ..otp.hashing import mask_identifier
from ..otp.models import Purpose
from .base import DeliveryChannel, DeliveryResult
from .templates import sms_body

logger = structlog.get_logger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"

# Twilio error codes with a friendlier explanation
TWILIO_ERRORS = {
    21211: "Invalid phone number format",
    21608: "Phone number not verified for trial account",
}


def format_phone_number(phone: str, default_country: str = "91") -> str:
    """
    Format a phone number for the gateway.

    Numbers already carrying ``+`` are kept; otherwise a trunk ``0`` is
    stripped and the default country code is prefixed.

    Args:
        phone: Raw phone number
        default_country: Country code without ``+``

    Returns:
        ``+<country><number>``
    """
    cleaned = re.sub(r"[^\d+]", "", phone)
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith("0"):
        cleaned = cleaned[1:]
    return f"+{default_country}{cleaned}"


@dataclass
class TwilioConfig:
    """Twilio credentials."""
    account_sid: str = ""
    auth_token: str = ""
    from_number: str = ""
    default_country: str = "91"
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "TwilioConfig":
        return cls(
            account_sid=os.environ.get("TWILIO_ACCOUNT_SID", ""),
            auth_token=os.environ.get("TWILIO_AUTH_TOKEN", ""),
            from_number=os.environ.get("TWILIO_PHONE_NUMBER", ""),
            default_country=os.environ.get("SMS_DEFAULT_COUNTRY_CODE", "91"),
        )


class TwilioSMSChannel(DeliveryChannel):
    """
    SMS delivery through Twilio.

    Example:
        channel = TwilioSMSChannel(TwilioConfig.from_env())
        await channel.initialize()
        result = await channel.send_code("9876543210", "123456", Purpose.LOGIN, 120)
    """

    name = "twilio"

    def __init__(
        self,
        config: TwilioConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.base_url = f"{TWILIO_API_BASE}/Accounts/{config.account_sid}"
        self._client = client

    def is_configured(self) -> bool:
        return bool(
            self.config.account_sid
            and self.config.auth_token
            and self.config.from_number
        )

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                auth=(self.config.account_sid, self.config.auth_token),
                timeout=self.config.timeout,
            )
        await super().initialize()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send_code(
        self,
        destination: str,
        code: str,
        purpose: Purpose,
        expires_in: int,
    ) -> DeliveryResult:
        if not self.is_configured():
            logger.warning("sms_channel_not_configured")
            return DeliveryResult(delivered=False, error_detail="SMS service not configured")
        if self._client is None:
            await self.initialize()

        payload = {
            "To": format_phone_number(destination, self.config.default_country),
            "From": self.config.from_number,
            "Body": sms_body(code, purpose, expires_in),
        }

        try:
            response = await self._client.post(
                f"{self.base_url}/Messages.json",
                data=payload,
            )
        except httpx.HTTPError as e:
            logger.error("sms_send_failed", error=str(e))
            return DeliveryResult(delivered=False, error_detail=f"Failed to send SMS: {e}")

        if response.status_code == 201:
            data = response.json()
            logger.info(
                "sms_sent",
                to=mask_identifier(destination),
                sid=data.get("sid"),
            )
            return DeliveryResult(delivered=True, provider_message_id=data.get("sid"))

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        error_code = error_data.get("code")
        detail = TWILIO_ERRORS.get(
            error_code, error_data.get("message", f"HTTP {response.status_code}")
        )
        logger.error(
            "sms_send_rejected",
            status_code=response.status_code,
            error_code=error_code,
        )
        return DeliveryResult(delivered=False, error_detail=detail)

    async def check_connection(self) -> bool:
        """Fetch the account resource to confirm the credentials work."""
        if not self.is_configured():
            return False
        if self._client is None:
            await self.initialize()
        try:
            response = await self._client.get(f"{self.base_url}.json")
        except httpx.HTTPError as e:
            logger.error("twilio_connection_failed", error=str(e))
            return False
        return response.status_code == 200
