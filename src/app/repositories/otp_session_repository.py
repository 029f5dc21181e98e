from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from src.domain.entities import OtpSession


class DuplicateSessionTokenError(Exception):
    """Raised by create() when the session token is already taken"""


class IOtpSessionRepository(ABC):
    """OTP session repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, session_token: str) -> Optional[OtpSession]:
        """Get session by its opaque token, whatever its state"""
        pass

    @abstractmethod
    async def create(self, otp_session: OtpSession) -> OtpSession:
        """Insert a new session. Raises DuplicateSessionTokenError on token clash."""
        pass

    @abstractmethod
    async def invalidate_active_for_employee(self, employee_id: UUID, now: datetime) -> int:
        """
        Mark every currently valid session of the employee as used.

        Serialized per employee so that a concurrent create cannot
        interleave. Returns count of invalidated sessions.
        """
        pass

    @abstractmethod
    async def consume(self, session_token: str, now: datetime) -> bool:
        """
        Conditionally mark a still-valid session as used and verified.

        Returns False if the session stopped being valid (lost race).
        """
        pass

    @abstractmethod
    async def increment_attempts(self, session_token: str, now: datetime) -> Optional[OtpSession]:
        """
        Conditionally count a wrong guess on a still-valid session.

        Returns the updated session, or None if it stopped being valid.
        """
        pass

    @abstractmethod
    async def invalidate(self, session_token: str) -> bool:
        """Mark a single session as used without verifying it"""
        pass

    @abstractmethod
    async def update_delivery(
        self, session_token: str, sent_email: bool, sent_sms: bool
    ) -> None:
        """Persist per-channel delivery outcomes"""
        pass

    @abstractmethod
    async def claim_resend(
        self, session_token: str, now: datetime, cooldown: timedelta
    ) -> bool:
        """
        Stamp last_resend_at = now on the session a resend is issued from,
        only if no resend happened within the cooldown. Returns False when
        the cooldown has not elapsed.
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions whose expiry has passed. Returns count deleted."""
        pass
