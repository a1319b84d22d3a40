"""
Staging Models
==============
"""

from dataclasses import dataclass, field

from ..otp.models import ChannelType


@dataclass
class RegistrationDraft:
    """Profile fields collected before the destination is verified."""
    name: str
    destination: str
    channel: ChannelType
    password: str = field(repr=False)


@dataclass
class PendingRegistration:
    """A staged draft with its own expiry, independent of the OTP's."""
    draft: RegistrationDraft
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
