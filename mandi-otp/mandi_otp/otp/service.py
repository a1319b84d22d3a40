"""
OTP Service
===========
Caller-facing contract used by the registration and login flows.
"""

from datetime import datetime
from typing import Optional

import structlog
from pydantic import BaseModel

from ..exceptions import (
    InvalidCode,
    OTPError,
    OTPExpired,
    OTPNotFound,
    RateLimited,
    VerificationLocked,
)
from .engine import OTPEngine
from .models import ChannelType, Purpose

logger = structlog.get_logger(__name__)


class RequestCodeResult(BaseModel):
    accepted: bool
    message: str
    retry_after_seconds: Optional[int] = None
    expires_in: Optional[int] = None
    # Present only when raw-code echo is enabled
    code: Optional[str] = None


class ConfirmCodeResult(BaseModel):
    verified: bool
    message: str
    reason: Optional[str] = None
    attempts_remaining: Optional[int] = None
    locked_until: Optional[datetime] = None


class OTPService:
    """
    Maps engine outcomes to result objects.

    Recoverable ``OTPError`` failures become ``accepted=False`` /
    ``verified=False`` results. ``StorageFailure`` is not caught.
    """

    def __init__(self, engine: OTPEngine):
        self.engine = engine

    async def request_code(
        self,
        identifier: str,
        channel: ChannelType,
        purpose: Purpose = Purpose.REGISTRATION,
    ) -> RequestCodeResult:
        try:
            issued = await self.engine.issue(identifier, channel, purpose)
        except RateLimited as e:
            return RequestCodeResult(
                accepted=False,
                message=e.message,
                retry_after_seconds=e.retry_after,
            )

        where = "phone" if issued.key.channel == ChannelType.PHONE else "email"
        message = f"OTP sent to your {where}"
        if issued.code is not None:
            message = "OTP sent successfully (dev mode)"
        return RequestCodeResult(
            accepted=True,
            message=message,
            expires_in=issued.expires_in,
            code=issued.code,
        )

    async def confirm_code(
        self,
        identifier: str,
        channel: ChannelType,
        code: str,
    ) -> ConfirmCodeResult:
        try:
            await self.engine.verify(identifier, channel, code)
        except VerificationLocked as e:
            return ConfirmCodeResult(
                verified=False,
                message=e.message,
                reason=e.code,
                attempts_remaining=0,
                locked_until=e.locked_until_dt,
            )
        except (InvalidCode, OTPNotFound, OTPExpired) as e:
            return ConfirmCodeResult(
                verified=False,
                message=e.message,
                reason=e.code,
                attempts_remaining=e.attempts_remaining,
            )
        except OTPError as e:
            return ConfirmCodeResult(verified=False, message=e.message, reason=e.code)

        return ConfirmCodeResult(verified=True, message="OTP verified successfully")
