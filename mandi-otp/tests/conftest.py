"""
Shared fixtures for the OTP core tests.
"""

import asyncio
from typing import List, Optional

import pytest

from mandi_otp.config import OTPSettings
from mandi_otp.delivery.base import DeliveryChannel, DeliveryResult
from mandi_otp.factory import create_otp_stack
from mandi_otp.otp.models import ChannelType, Purpose


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingChannel(DeliveryChannel):
    """Captures every code it is asked to deliver."""

    name = "recording"

    def __init__(self, delivered: bool = True):
        self.delivered = delivered
        self.sent: List[dict] = []

    async def send_code(self, destination, code, purpose, expires_in):
        self.sent.append({
            "destination": destination,
            "code": code,
            "purpose": purpose,
            "expires_in": expires_in,
        })
        if self.delivered:
            return DeliveryResult(delivered=True)
        return DeliveryResult(delivered=False, error_detail="gateway down")

    @property
    def last_code(self) -> Optional[str]:
        return self.sent[-1]["code"] if self.sent else None


class RaisingChannel(DeliveryChannel):
    name = "raising"

    async def send_code(self, destination, code, purpose, expires_in):
        raise ConnectionError("connection reset")


class SlowChannel(DeliveryChannel):
    name = "slow"

    async def send_code(self, destination, code, purpose, expires_in):
        await asyncio.sleep(5)
        return DeliveryResult(delivered=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return OTPSettings()


@pytest.fixture
def phone_channel():
    return RecordingChannel()


@pytest.fixture
def email_channel():
    return RecordingChannel()


@pytest.fixture
def stack(settings, clock, phone_channel, email_channel):
    return create_otp_stack(
        settings=settings,
        channels={ChannelType.PHONE: phone_channel, ChannelType.EMAIL: email_channel},
        clock=clock,
    )


@pytest.fixture
def engine(stack):
    return stack.engine


PHONE = "+910000000000"
EMAIL = "farmer@example.com"
