"""
Registration Flow
=================
Stages a registration draft while its OTP is outstanding and hands it to
the account store once the OTP verifies.
"""

from typing import Any, Protocol

import structlog

from .exceptions import RegistrationSessionExpired
from .otp.engine import OTPEngine
from .otp.hashing import mask_identifier
from .otp.models import ChannelType, IssueResult, OTPKey, Purpose
from .staging import RegistrationDraft, StagingStore

logger = structlog.get_logger(__name__)


class AccountStore(Protocol):
    """Persists a verified account. Implemented by the application."""

    async def create_account(self, draft: RegistrationDraft) -> Any:
        ...


class RegistrationFlow:
    """
    Two-step registration: ``start`` issues a code and stages the draft,
    ``complete`` verifies the code and creates the account.

    The OTP and the draft expire independently. A draft that lapses before
    a correct code arrives raises RegistrationSessionExpired.
    """

    def __init__(
        self,
        engine: OTPEngine,
        staging: StagingStore,
        accounts: AccountStore,
        staging_ttl_seconds: int = 600,
    ):
        self.engine = engine
        self.staging = staging
        self.accounts = accounts
        self.staging_ttl_seconds = staging_ttl_seconds

    async def start(self, draft: RegistrationDraft) -> IssueResult:
        """
        Issue a registration code and stage ``draft``.

        Raises:
            RateLimited: Too many codes requested; nothing is staged
        """
        result = await self.engine.issue(draft.destination, draft.channel, Purpose.REGISTRATION)
        await self.staging.put(result.key, draft, self.staging_ttl_seconds)
        logger.info(
            "registration_staged",
            channel=draft.channel.value,
            identifier=mask_identifier(draft.destination),
            expires_in=self.staging_ttl_seconds,
        )
        return result

    async def complete(self, identifier: str, channel: ChannelType, code: str) -> Any:
        """
        Verify ``code`` and create the account from the staged draft.

        Returns:
            Whatever ``AccountStore.create_account`` returns (the account id)

        Raises:
            OTPError: Verification failed (see OTPEngine.verify)
            RegistrationSessionExpired: The code was valid but the draft lapsed
        """
        channel = ChannelType(channel)
        await self.engine.verify(identifier, channel, code)

        key = OTPKey(channel, identifier)
        draft = await self.staging.get(key)
        if draft is None:
            logger.warning(
                "registration_session_expired",
                channel=channel.value,
                identifier=mask_identifier(identifier),
            )
            raise RegistrationSessionExpired()
        await self.staging.remove(key)

        account_id = await self.accounts.create_account(draft)
        logger.info("registration_completed", channel=channel.value, identifier=mask_identifier(identifier))
        return account_id
