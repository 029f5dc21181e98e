from abc import ABC, abstractmethod


class IRevocationStore(ABC):
    """
    Revocation set of token ids (jti), each entry living as long as the
    token it revokes would have. Insert is idempotent.
    """

    @abstractmethod
    async def add(self, jti: str, ttl_seconds: int, reason: str) -> None:
        """Record a revoked token id"""
        pass

    @abstractmethod
    async def contains(self, jti: str) -> bool:
        """Whether the token id is currently revoked"""
        pass
