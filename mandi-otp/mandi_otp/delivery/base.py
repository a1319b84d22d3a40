"""
Delivery Channel Base
=====================
Contract every OTP delivery channel implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import structlog

from ..otp.models import Purpose

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryResult:
    """Result of handing a code to a channel."""
    delivered: bool
    error_detail: Optional[str] = None
    provider_message_id: Optional[str] = None


class DeliveryChannel(ABC):
    """
    Abstract base class for delivery channels.

    Implementations report failures through ``DeliveryResult`` rather than
    raising; the engine still guards against exceptions and timeouts.
    """

    name: str = "base"

    async def initialize(self) -> None:
        """Create long-lived clients, if any."""
        logger.info("delivery_channel_initialized", channel=self.name)

    async def close(self) -> None:
        """Release clients."""
        logger.info("delivery_channel_closed", channel=self.name)

    def is_configured(self) -> bool:
        """Whether the channel has the credentials it needs."""
        return True

    @abstractmethod
    async def send_code(
        self,
        destination: str,
        code: str,
        purpose: Purpose,
        expires_in: int,
    ) -> DeliveryResult:
        """
        Deliver ``code`` to ``destination``.

        Args:
            destination: Phone number or email address
            code: Raw OTP
            purpose: Registration or login, used for the message text
            expires_in: Seconds the code stays valid, quoted in the message

        Returns:
            DeliveryResult
        """
