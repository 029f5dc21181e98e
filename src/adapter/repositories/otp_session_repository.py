from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.otp_session_repository import (
    DuplicateSessionTokenError,
    IOtpSessionRepository,
)
from src.domain.entities import Employee, OtpSession


class OtpSessionRepository(IOtpSessionRepository):
    """OTP session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _still_valid(self, session_token: str, now: datetime):
        return (
            OtpSession.session_token == session_token,
            OtpSession.used == False,
            OtpSession.expires_at > now,
            OtpSession.attempts < OtpSession.max_attempts,
        )

    async def get_by_token(self, session_token: str) -> Optional[OtpSession]:
        """Get session by token"""
        stmt = (
            select(OtpSession)
            .where(OtpSession.session_token == session_token)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, otp_session: OtpSession) -> OtpSession:
        """Insert inside a SAVEPOINT so a token clash leaves the transaction usable"""
        try:
            async with self.session.begin_nested():
                self.session.add(otp_session)
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateSessionTokenError(otp_session.session_token[:8]) from exc
        await self.session.refresh(otp_session)
        return otp_session

    async def invalidate_active_for_employee(self, employee_id: UUID, now: datetime) -> int:
        """Invalidate valid sessions while holding the employee row lock"""
        # Serializes concurrent create_session calls for the same employee
        lock_stmt = select(Employee.id).where(Employee.id == employee_id).with_for_update()
        await self.session.exec(lock_stmt)

        stmt = (
            update(OtpSession)
            .where(
                OtpSession.employee_id == employee_id,
                OtpSession.used == False,
                OtpSession.expires_at > now,
            )
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def consume(self, session_token: str, now: datetime) -> bool:
        """Mark a still-valid session as used and verified"""
        stmt = (
            update(OtpSession)
            .where(*self._still_valid(session_token, now))
            .values(used=True, verified_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def increment_attempts(self, session_token: str, now: datetime) -> Optional[OtpSession]:
        """Count a wrong guess on a still-valid session"""
        stmt = (
            update(OtpSession)
            .where(*self._still_valid(session_token, now))
            .values(attempts=OtpSession.attempts + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount != 1:
            return None
        return await self.get_by_token(session_token)

    async def invalidate(self, session_token: str) -> bool:
        """Mark a single session as used"""
        stmt = (
            update(OtpSession)
            .where(OtpSession.session_token == session_token, OtpSession.used == False)
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def update_delivery(
        self, session_token: str, sent_email: bool, sent_sms: bool
    ) -> None:
        """Persist per-channel delivery outcomes"""
        stmt = (
            update(OtpSession)
            .where(OtpSession.session_token == session_token)
            .values(sent_email=sent_email, sent_sms=sent_sms)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def claim_resend(
        self, session_token: str, now: datetime, cooldown: timedelta
    ) -> bool:
        """Stamp last_resend_at if the cooldown elapsed"""
        stmt = (
            update(OtpSession)
            .where(
                OtpSession.session_token == session_token,
                or_(
                    OtpSession.last_resend_at.is_(None),
                    OtpSession.last_resend_at <= now - cooldown,
                ),
            )
            .values(last_resend_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions whose expiry has passed"""
        stmt = delete(OtpSession).where(OtpSession.expires_at <= now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
