"""
Console Channel
===============
Writes codes to the log instead of sending them. Only selected by
``default_channels`` when raw-code echo is enabled.
"""

import structlog

from ..otp.hashing import mask_identifier
from ..otp.models import Purpose
from .base import DeliveryChannel, DeliveryResult

logger = structlog.get_logger(__name__)


class ConsoleChannel(DeliveryChannel):
    """Logs the code so an operator can pass it on out-of-band."""

    name = "console"

    async def send_code(
        self,
        destination: str,
        code: str,
        purpose: Purpose,
        expires_in: int,
    ) -> DeliveryResult:
        logger.warning(
            "otp_console_delivery",
            destination=mask_identifier(destination),
            code=code,
            purpose=purpose.value,
            expires_in=expires_in,
        )
        return DeliveryResult(delivered=True)
