"""
Revocation Store Adapters

Redis-backed revocation set for multi-process deployments and an
in-process one for development and tests. Picked by CACHE_BACKEND.
"""

import logging
import time
from typing import Dict

from src.app.services.revocation_store import IRevocationStore

logger = logging.getLogger(__name__)


class RedisRevocationStore(IRevocationStore):
    """Each revoked jti is a Redis key expiring with the token"""

    KEY_PREFIX = "revoked_token:"

    def __init__(self, redis_client):
        """
        Args:
            redis_client: redis.asyncio.Redis client
        """
        self.redis = redis_client

    def _key(self, jti: str) -> str:
        return f"{self.KEY_PREFIX}{jti}"

    async def add(self, jti: str, ttl_seconds: int, reason: str) -> None:
        await self.redis.set(self._key(jti), reason, ex=max(1, int(ttl_seconds)))

    async def contains(self, jti: str) -> bool:
        return bool(await self.redis.exists(self._key(jti)))


class InMemoryRevocationStore(IRevocationStore):
    """
    Process-local revocation set. Cleared on restart, so revoked tokens
    become usable again until they expire.
    """

    def __init__(self, clock=time.monotonic):
        self._entries: Dict[str, float] = {}
        self._clock = clock

    async def add(self, jti: str, ttl_seconds: int, reason: str) -> None:
        self._cleanup()
        expires_at = self._clock() + max(1, int(ttl_seconds))
        # Re-revoking never shortens an existing entry
        self._entries[jti] = max(expires_at, self._entries.get(jti, 0.0))
        logger.debug(f"Token {jti[:8]} revoked ({reason})")

    async def contains(self, jti: str) -> bool:
        expires_at = self._entries.get(jti)
        if expires_at is None:
            return False
        if expires_at <= self._clock():
            del self._entries[jti]
            return False
        return True

    def _cleanup(self) -> None:
        now = self._clock()
        expired = [jti for jti, expires_at in self._entries.items() if expires_at <= now]
        for jti in expired:
            del self._entries[jti]
