"""
Tests for the staged registration flow.
"""

from unittest.mock import AsyncMock

import pytest

from conftest import EMAIL, PHONE, RecordingChannel
from mandi_otp.config import OTPSettings, PurposePolicy
from mandi_otp.exceptions import InvalidCode, RateLimited, RegistrationSessionExpired
from mandi_otp.factory import create_otp_stack
from mandi_otp.otp.models import ChannelType, OTPKey, Purpose
from mandi_otp.staging import RegistrationDraft


@pytest.fixture
def accounts():
    store = AsyncMock()
    store.create_account.return_value = "acct-1"
    return store


@pytest.fixture
def flow_stack(settings, clock, phone_channel, email_channel, accounts):
    return create_otp_stack(
        settings=settings,
        channels={ChannelType.PHONE: phone_channel, ChannelType.EMAIL: email_channel},
        accounts=accounts,
        clock=clock,
    )


def _draft(destination=PHONE, channel=ChannelType.PHONE):
    return RegistrationDraft(
        name="Ramesh Kumar",
        destination=destination,
        channel=channel,
        password="potatoes-2024",
    )


class TestRegistrationFlow:

    def test_flow_only_wired_with_account_store(self, stack, flow_stack):
        assert stack.registration is None
        assert flow_stack.registration is not None

    @pytest.mark.asyncio
    async def test_start_then_complete(self, flow_stack, phone_channel, accounts):
        draft = _draft()

        result = await flow_stack.registration.start(draft)

        assert result.purpose == Purpose.REGISTRATION
        assert phone_channel.sent[0]["purpose"] == Purpose.REGISTRATION
        assert await flow_stack.staging.get(OTPKey(ChannelType.PHONE, PHONE)) is draft

        account_id = await flow_stack.registration.complete(
            PHONE, ChannelType.PHONE, phone_channel.last_code
        )

        assert account_id == "acct-1"
        accounts.create_account.assert_awaited_once_with(draft)
        assert len(flow_stack.staging) == 0

    @pytest.mark.asyncio
    async def test_email_registration(self, flow_stack, email_channel, accounts):
        await flow_stack.registration.start(_draft(EMAIL, ChannelType.EMAIL))

        await flow_stack.registration.complete(EMAIL, ChannelType.EMAIL, email_channel.last_code)

        accounts.create_account.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_draft(self, flow_stack, phone_channel, accounts):
        await flow_stack.registration.start(_draft())
        code = phone_channel.last_code
        wrong = "0" * 6 if code != "0" * 6 else "1" * 6

        with pytest.raises(InvalidCode):
            await flow_stack.registration.complete(PHONE, ChannelType.PHONE, wrong)

        accounts.create_account.assert_not_awaited()
        assert len(flow_stack.staging) == 1

    @pytest.mark.asyncio
    async def test_lapsed_draft_raises_session_expired(self, clock, phone_channel, accounts):
        settings = OTPSettings(
            registration=PurposePolicy(ttl_seconds=900),
            staging_ttl_seconds=300,
        )
        stack = create_otp_stack(
            settings=settings,
            channels={ChannelType.PHONE: phone_channel, ChannelType.EMAIL: RecordingChannel()},
            accounts=accounts,
            clock=clock,
        )
        await stack.registration.start(_draft())

        clock.advance(301)

        with pytest.raises(RegistrationSessionExpired) as exc_info:
            await stack.registration.complete(PHONE, ChannelType.PHONE, phone_channel.last_code)

        assert exc_info.value.code == "registration_session_expired"
        accounts.create_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limited_start_stages_nothing(self, flow_stack):
        for _ in range(5):
            await flow_stack.registration.start(_draft())
        await flow_stack.staging.remove(OTPKey(ChannelType.PHONE, PHONE))

        with pytest.raises(RateLimited):
            await flow_stack.registration.start(_draft())

        assert len(flow_stack.staging) == 0
