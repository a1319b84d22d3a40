"""
OTP Stack Factory
=================
Wires stores, limiters, channels and the sweeper into one owned unit.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

import structlog

from .attempts import AttemptGuard
from .config import OTPSettings
from .delivery import (
    ConsoleChannel,
    DeliveryChannel,
    SMTPConfig,
    SMTPEmailChannel,
    TwilioConfig,
    TwilioSMSChannel,
)
from .otp.credential_store import CredentialStore, InMemoryCredentialStore, RedisCredentialStore
from .otp.engine import OTPEngine
from .otp.models import ChannelType, Purpose
from .otp.service import OTPService
from .rate_limit import FixedWindowRateLimiter, RateLimiter, RedisFixedWindowRateLimiter
from .registration import AccountStore, RegistrationFlow
from .staging import StagingStore
from .sweeper import ExpirySweeper

logger = structlog.get_logger(__name__)


@dataclass
class OTPStack:
    """Every component of one OTP core instance."""
    settings: OTPSettings
    credentials: CredentialStore
    rate_limiters: Dict[Purpose, RateLimiter]
    attempt_guard: AttemptGuard
    staging: StagingStore
    channels: Dict[ChannelType, DeliveryChannel]
    engine: OTPEngine
    service: OTPService
    sweeper: ExpirySweeper
    registration: Optional[RegistrationFlow] = None

    async def start(self) -> None:
        for channel in self.channels.values():
            await channel.initialize()
        await self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()
        for channel in self.channels.values():
            await channel.close()


def default_channels(expose_code: bool = False) -> Dict[ChannelType, DeliveryChannel]:
    """
    SMS through Twilio and email through SMTP.

    A channel missing its credentials is replaced by the console channel only
    when ``expose_code`` is on. Otherwise it is kept and reports every send as
    undelivered.
    """
    channels: Dict[ChannelType, DeliveryChannel] = {}
    sms = TwilioSMSChannel(TwilioConfig.from_env())
    email = SMTPEmailChannel(SMTPConfig.from_env())
    for channel_type, channel in ((ChannelType.PHONE, sms), (ChannelType.EMAIL, email)):
        if channel.is_configured():
            channels[channel_type] = channel
        elif expose_code:
            logger.warning("delivery_channel_fallback", channel=channel.name, fallback="console")
            channels[channel_type] = ConsoleChannel()
        else:
            logger.error("delivery_channel_not_configured", channel=channel.name)
            channels[channel_type] = channel
    return channels


def create_otp_stack(
    settings: Optional[OTPSettings] = None,
    channels: Optional[Mapping[ChannelType, DeliveryChannel]] = None,
    redis_client=None,
    accounts: Optional[AccountStore] = None,
    clock: Callable[[], float] = time.time,
) -> OTPStack:
    """
    Build an isolated OTP core.

    Args:
        settings: Settings (default: read from the environment)
        channels: Delivery channel per channel type (default: default_channels())
        redis_client: Async Redis client; when given (or settings.redis_url is
            set) OTP records and send limits live in Redis
        accounts: Account store; enables ``stack.registration``
        clock: Time source shared by every component

    Returns:
        OTPStack
    """
    settings = (settings or OTPSettings.from_env()).validate()

    if redis_client is None and settings.redis_url:
        import redis.asyncio as aioredis

        redis_client = aioredis.from_url(settings.redis_url)

    rate_limiters: Dict[Purpose, RateLimiter] = {}
    if redis_client is not None:
        credentials: CredentialStore = RedisCredentialStore(redis_client, clock=clock)
        for purpose in Purpose:
            policy = settings.policy_for(purpose)
            rate_limiters[purpose] = RedisFixedWindowRateLimiter(
                redis_client,
                rate=policy.rate_limit,
                window=policy.rate_window_seconds,
                prefix=purpose.value,
                clock=clock,
            )
    else:
        credentials = InMemoryCredentialStore(clock=clock)
        for purpose in Purpose:
            policy = settings.policy_for(purpose)
            rate_limiters[purpose] = FixedWindowRateLimiter(
                rate=policy.rate_limit,
                window=policy.rate_window_seconds,
                clock=clock,
            )

    attempt_guard = AttemptGuard(
        max_attempts=settings.max_verify_attempts,
        lockout_seconds=settings.lockout_seconds,
        clock=clock,
    )
    staging = StagingStore(clock=clock)
    channels = dict(channels) if channels is not None else default_channels(settings.expose_code)

    engine = OTPEngine(settings, credentials, rate_limiters, attempt_guard, channels, clock=clock)

    sweepables = {
        "credentials": credentials,
        "attempts": attempt_guard,
        "staging": staging,
    }
    for purpose, limiter in rate_limiters.items():
        sweepables[f"rate_limit:{purpose.value}"] = limiter

    registration = None
    if accounts is not None:
        registration = RegistrationFlow(
            engine, staging, accounts, staging_ttl_seconds=settings.staging_ttl_seconds
        )

    return OTPStack(
        settings=settings,
        credentials=credentials,
        rate_limiters=rate_limiters,
        attempt_guard=attempt_guard,
        staging=staging,
        channels=channels,
        engine=engine,
        service=OTPService(engine),
        sweeper=ExpirySweeper(sweepables, interval=settings.sweep_interval_seconds),
        registration=registration,
    )
