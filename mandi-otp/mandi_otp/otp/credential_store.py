"""
Credential Store
================
Hashed, expiring OTP records keyed by ``(channel type, identifier)``.
"""

import json
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

import structlog
from redis.exceptions import RedisError

from ..exceptions import StorageFailure
from .hashing import generate_salt, hash_otp
from .models import OTPKey, OTPRecord

logger = structlog.get_logger(__name__)


class CredentialStore(ABC):
    """Storage contract for OTP digests."""

    @abstractmethod
    async def put(self, key: OTPKey, raw_code: str, ttl: int) -> OTPRecord:
        """Hash ``raw_code`` and store it, replacing any record for ``key``."""

    @abstractmethod
    async def get(self, key: OTPKey) -> Optional[OTPRecord]:
        pass

    @abstractmethod
    async def mark_used_and_remove(self, key: OTPKey) -> None:
        pass

    @abstractmethod
    async def sweep_expired(self) -> int:
        """Remove expired records. Returns how many were removed."""


class InMemoryCredentialStore(CredentialStore):
    """
    Process-local credential store.

    Each method mutates the dict without awaiting, so every call is atomic
    on the event loop.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._records: Dict[OTPKey, OTPRecord] = {}

    async def put(self, key: OTPKey, raw_code: str, ttl: int) -> OTPRecord:
        now = self._clock()
        salt = generate_salt()
        record = OTPRecord(
            code_hash=hash_otp(raw_code, salt),
            salt=salt,
            created_at=now,
            expires_at=now + ttl,
        )
        self._records[key] = record
        return record

    async def get(self, key: OTPKey) -> Optional[OTPRecord]:
        return self._records.get(key)

    async def mark_used_and_remove(self, key: OTPKey) -> None:
        self._records.pop(key, None)

    async def sweep_expired(self) -> int:
        now = self._clock()
        expired = [k for k, record in self._records.items() if record.is_expired(now)]
        for k in expired:
            self._records.pop(k, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)


class RedisCredentialStore(CredentialStore):
    """
    Redis-backed credential store.

    Records are JSON values under ``otp:<channel>:<identifier>`` with a native
    key TTL, so Redis does the expiry sweep itself.
    """

    def __init__(
        self,
        redis_client,
        clock: Callable[[], float] = time.time,
        prefix: str = "otp",
    ):
        """
        Args:
            redis_client: Async Redis client (``redis.asyncio.Redis``)
            clock: Time source for record timestamps
            prefix: Key prefix
        """
        self.redis = redis_client
        self._clock = clock
        self.prefix = prefix

    def get_key(self, key: OTPKey) -> str:
        return f"{self.prefix}:{key}"

    async def put(self, key: OTPKey, raw_code: str, ttl: int) -> OTPRecord:
        now = self._clock()
        salt = generate_salt()
        record = OTPRecord(
            code_hash=hash_otp(raw_code, salt),
            salt=salt,
            created_at=now,
            expires_at=now + ttl,
        )
        try:
            await self.redis.set(self.get_key(key), json.dumps(record.to_dict()), ex=ttl)
        except RedisError as e:
            logger.error("otp_store_write_failed", error=str(e))
            raise StorageFailure("Could not store OTP", operation="put") from e
        return record

    async def get(self, key: OTPKey) -> Optional[OTPRecord]:
        try:
            raw = await self.redis.get(self.get_key(key))
        except RedisError as e:
            logger.error("otp_store_read_failed", error=str(e))
            raise StorageFailure("Could not read OTP", operation="get") from e
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return OTPRecord.from_dict(json.loads(raw))

    async def mark_used_and_remove(self, key: OTPKey) -> None:
        try:
            await self.redis.delete(self.get_key(key))
        except RedisError as e:
            logger.error("otp_store_delete_failed", error=str(e))
            raise StorageFailure("Could not remove OTP", operation="delete") from e

    async def sweep_expired(self) -> int:
        # Key TTLs already evict expired records.
        return 0
