"""
OTP Engine
==========
Issues and verifies one-time passcodes.

Per key the code moves ``NoOTP -> Issued -> Verified | Expired | Consumed``.
Wrong guesses leave an issued code valid, but once the attempt guard locks
the key every verification is refused until the lockout lapses.
"""

import asyncio
import time
from typing import Callable, Dict, Mapping, Optional

import structlog

from ..attempts import AttemptGuard
from ..config import OTPSettings
from ..delivery.base import DeliveryChannel, DeliveryResult
from ..exceptions import (
    InvalidCode,
    OTPExpired,
    OTPNotFound,
    RateLimited,
    VerificationLocked,
)
from ..locks import KeyedLock
from ..rate_limit import RateLimiter
from .credential_store import CredentialStore
from .hashing import generate_otp, mask_identifier, verify_otp_hash
from .models import ChannelType, IssueResult, OTPKey, Purpose

logger = structlog.get_logger(__name__)


class OTPEngine:
    """
    Orchestrates generation, storage, delivery and verification.

    Example:
        engine = OTPEngine(settings, store, limiters, guard, channels)
        result = await engine.issue("+910000000000", ChannelType.PHONE, Purpose.REGISTRATION)
        await engine.verify("+910000000000", ChannelType.PHONE, "123456")
    """

    def __init__(
        self,
        settings: OTPSettings,
        credentials: CredentialStore,
        rate_limiters: Mapping[Purpose, RateLimiter],
        attempt_guard: AttemptGuard,
        channels: Mapping[ChannelType, DeliveryChannel],
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.credentials = credentials
        self.rate_limiters: Dict[Purpose, RateLimiter] = dict(rate_limiters)
        self.attempt_guard = attempt_guard
        self.channels: Dict[ChannelType, DeliveryChannel] = dict(channels)
        self._clock = clock
        self._locks = KeyedLock()

    async def issue(
        self,
        identifier: str,
        channel: ChannelType,
        purpose: Purpose = Purpose.REGISTRATION,
    ) -> IssueResult:
        """
        Issue a fresh code for ``(channel, identifier)``.

        Replaces any outstanding code for the key.

        Raises:
            RateLimited: Too many requests in the current window
            StorageFailure: The credential store or limiter is unavailable
        """
        key = OTPKey(ChannelType(channel), identifier)
        purpose = Purpose(purpose)
        policy = self.settings.policy_for(purpose)
        limiter = self.rate_limiters[purpose]

        async with self._locks.hold(key):
            decision = await limiter.check_and_record(key)
            if not decision.allowed:
                logger.warning(
                    "otp_rate_limited",
                    channel=key.channel.value,
                    identifier=mask_identifier(identifier),
                    retry_after=decision.retry_after,
                )
                raise RateLimited(decision.retry_after or 1)

            code = generate_otp(self.settings.otp_length)
            await self.credentials.put(key, code, policy.ttl_seconds)

        logger.info(
            "otp_issued",
            channel=key.channel.value,
            identifier=mask_identifier(identifier),
            purpose=purpose.value,
            expires_in=policy.ttl_seconds,
        )

        delivery = await self._deliver(key, code, purpose, policy.ttl_seconds)

        return IssueResult(
            key=key,
            purpose=purpose,
            expires_in=policy.ttl_seconds,
            delivered=delivery.delivered,
            code=code if self.settings.expose_code else None,
        )

    async def _deliver(
        self,
        key: OTPKey,
        code: str,
        purpose: Purpose,
        expires_in: int,
    ) -> DeliveryResult:
        """
        Hand the code to the channel for its type.

        Failures and timeouts are logged and reported as undelivered, never
        raised: issuance succeeds regardless.
        """
        channel = self.channels.get(key.channel)
        if channel is None:
            logger.error("otp_delivery_failed", channel=key.channel.value, error="no channel")
            return DeliveryResult(delivered=False, error_detail="No delivery channel configured")

        try:
            result = await asyncio.wait_for(
                channel.send_code(key.identifier, code, purpose, expires_in),
                timeout=self.settings.delivery_timeout_seconds,
            )
        except asyncio.TimeoutError:
            result = DeliveryResult(delivered=False, error_detail="Delivery timed out")
        except Exception as e:
            result = DeliveryResult(delivered=False, error_detail=str(e))

        if not result.delivered:
            logger.error(
                "otp_delivery_failed",
                channel=channel.name,
                identifier=mask_identifier(key.identifier),
                error=result.error_detail,
            )
        return result

    async def verify(
        self,
        identifier: str,
        channel: ChannelType,
        provided_code: str,
    ) -> None:
        """
        Verify and consume the code for ``(channel, identifier)``.

        Returns normally on success; the record is deleted so a second
        verification raises OTPNotFound.

        Raises:
            VerificationLocked: The key is locked out, or this attempt locked it
            OTPNotFound: No code is outstanding
            OTPExpired: The code outlived its TTL or was already used
            InvalidCode: Wrong code, with attempts remaining
            StorageFailure: The credential store is unavailable
        """
        key = OTPKey(ChannelType(channel), identifier)
        masked = mask_identifier(identifier)

        async with self._locks.hold(key):
            lock = await self.attempt_guard.check_locked(key)
            if not lock.allowed:
                logger.warning("otp_verify_refused_locked", channel=key.channel.value, identifier=masked)
                raise VerificationLocked(lock.locked_until, self._clock())

            record = await self.credentials.get(key)
            if record is None:
                outcome = await self.attempt_guard.record_failure(key)
                logger.info("otp_verify_not_found", channel=key.channel.value, identifier=masked)
                if outcome.locked:
                    raise VerificationLocked(outcome.locked_until, self._clock())
                raise OTPNotFound(outcome.attempts_remaining)

            # Checked against the loaded record so a concurrent sweep still reads as expiry
            if record.used or record.is_expired(self._clock()):
                await self.credentials.mark_used_and_remove(key)
                outcome = await self.attempt_guard.record_failure(key)
                logger.info("otp_verify_expired", channel=key.channel.value, identifier=masked)
                if outcome.locked:
                    raise VerificationLocked(outcome.locked_until, self._clock())
                raise OTPExpired(outcome.attempts_remaining)

            if not verify_otp_hash(provided_code, record.salt, record.code_hash):
                outcome = await self.attempt_guard.record_failure(key)
                logger.warning(
                    "otp_verify_invalid",
                    channel=key.channel.value,
                    identifier=masked,
                    remaining=outcome.attempts_remaining,
                )
                if outcome.locked:
                    raise VerificationLocked(outcome.locked_until, self._clock())
                raise InvalidCode(outcome.attempts_remaining)

            await self.credentials.mark_used_and_remove(key)
            await self.attempt_guard.clear(key)

        logger.info("otp_verified", channel=key.channel.value, identifier=masked)

    async def describe(self, identifier: str, channel: ChannelType) -> Optional[dict]:
        """
        Report whether a code is outstanding, for test automation.

        Returns None unless ``expose_code`` is enabled.
        """
        if not self.settings.expose_code:
            return None
        record = await self.credentials.get(OTPKey(ChannelType(channel), identifier))
        if record is None:
            return {"exists": False, "expires_in": 0}
        return {
            "exists": True,
            "expires_in": max(0, int(record.expires_at - self._clock())),
        }
