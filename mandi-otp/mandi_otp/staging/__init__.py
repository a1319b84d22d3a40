"""
Staging Store
=============
Unpersisted registration drafts held while their OTP is outstanding.
"""

from .models import RegistrationDraft, PendingRegistration
from .store import StagingStore

__all__ = [
    "RegistrationDraft",
    "PendingRegistration",
    "StagingStore",
]
