"""
Staging Store
=============
In-memory holder for registration drafts.
"""

import time
from typing import Callable, Dict, Hashable, Optional

from .models import PendingRegistration, RegistrationDraft


class StagingStore:
    """
    Holds each draft until its own TTL passes.

    An expired draft is never returned, even before the sweeper removes it.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[Hashable, PendingRegistration] = {}

    async def put(self, key: Hashable, draft: RegistrationDraft, ttl: int) -> PendingRegistration:
        entry = PendingRegistration(draft=draft, expires_at=self._clock() + ttl)
        self._entries[key] = entry
        return entry

    async def get(self, key: Hashable) -> Optional[RegistrationDraft]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.draft

    async def remove(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    async def sweep_expired(self) -> int:
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for k in expired:
            self._entries.pop(k, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
