"""
OTP Models
==========
Data models and enums for OTP issuance and verification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChannelType(str, Enum):
    """Kind of destination an identifier names."""
    PHONE = "phone"
    EMAIL = "email"


class Purpose(str, Enum):
    """Business reason for a code. Only affects the delivered message text."""
    REGISTRATION = "registration"
    LOGIN = "login"


@dataclass(frozen=True)
class OTPKey:
    """Key shared by every store: ``(channel type, identifier)``."""
    channel: ChannelType
    identifier: str

    def __str__(self) -> str:
        return f"{self.channel.value}:{self.identifier}"


@dataclass
class OTPRecord:
    """A stored code digest. The raw code is never kept."""
    code_hash: str
    salt: str
    created_at: float
    expires_at: float
    used: bool = False

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def to_dict(self) -> dict:
        return {
            "code_hash": self.code_hash,
            "salt": self.salt,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "used": self.used,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OTPRecord":
        return cls(
            code_hash=data["code_hash"],
            salt=data["salt"],
            created_at=float(data["created_at"]),
            expires_at=float(data["expires_at"]),
            used=bool(data.get("used", False)),
        )


@dataclass
class IssueResult:
    """Outcome of a successful issuance."""
    key: OTPKey
    purpose: Purpose
    expires_in: int
    delivered: bool
    # Only populated when settings.expose_code is on
    code: Optional[str] = None
