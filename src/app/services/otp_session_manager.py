"""
OTP Session Manager

Creates, validates and retires time-boxed one-time-passcode sessions.
"""

import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.repositories.otp_session_repository import DuplicateSessionTokenError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Employee, OtpSession, OtpSessionState

logger = logging.getLogger(__name__)

MAX_CREATE_ATTEMPTS = 3

SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
SESSION_USED = "SESSION_USED"
SESSION_EXPIRED = "SESSION_EXPIRED"
SESSION_EXHAUSTED = "SESSION_EXHAUSTED"

_STATE_ERRORS = {
    OtpSessionState.used: Error(SESSION_USED, "Login session is no longer valid"),
    OtpSessionState.expired: Error(SESSION_EXPIRED, "OTP has expired"),
    OtpSessionState.attempts_exhausted: Error(
        SESSION_EXHAUSTED, "Maximum OTP attempts reached"
    ),
}


class ClientContext(BaseModel):
    """Where a login request came from"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class SessionCreationError(Exception):
    """No unique session token could be generated within the retry budget"""


def generate_otp() -> str:
    """Uniform over 1000..9999"""
    return str(1000 + secrets.randbelow(9000))


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


class OtpSessionManager:
    """
    OTP session lifecycle: Created -> Valid -> Used | Expired | AttemptsExhausted.

    Business Rules:
    - Creating a session invalidates every valid session of the employee
    - Passcode: 4 digits, expires 5 minutes after creation, 3 attempts
    - Expiry is enforced on every read, regardless of the used flag
    - Verification and attempt counting are conditional store updates
    - Resend allowed once 60 seconds passed since the last resend
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ttl: timedelta = timedelta(minutes=5),
        max_attempts: int = 3,
        resend_cooldown: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.ttl = ttl
        self.max_attempts = max_attempts
        self.resend_cooldown = resend_cooldown
        self.clock = clock

    async def create_session(
        self,
        employee: Employee,
        client_context: Optional[ClientContext] = None,
        resend_count: int = 0,
        last_resend_at: Optional[datetime] = None,
    ) -> OtpSession:
        """
        Invalidate the employee's valid sessions, then insert a fresh one.

        A token collision is retried with a new token, at most
        MAX_CREATE_ATTEMPTS times.

        Raises:
            SessionCreationError: every attempt collided
        """
        client_context = client_context or ClientContext()
        now = self.clock()

        invalidated = await self.uow.otp_sessions.invalidate_active_for_employee(
            employee.id, now
        )
        if invalidated:
            logger.info(f"Invalidated {invalidated} prior OTP session(s) for {employee.id}")

        for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
            candidate = OtpSession(
                session_token=generate_session_token(),
                employee_id=employee.id,
                en_code=employee.en_code,
                otp_code=generate_otp(),
                created_at=now,
                expires_at=now + self.ttl,
                attempts=0,
                max_attempts=self.max_attempts,
                resend_count=resend_count,
                last_resend_at=last_resend_at,
                ip_address=client_context.ip_address,
                user_agent=client_context.user_agent,
            )
            try:
                return await self.uow.otp_sessions.create(candidate)
            except DuplicateSessionTokenError:
                logger.warning(f"Session token collision on attempt {attempt}")

        raise SessionCreationError(f"Could not create OTP session for {employee.id}")

    async def get_session(self, session_token: str) -> Optional[OtpSession]:
        return await self.uow.otp_sessions.get_by_token(session_token)

    async def verify_code(self, session_token: str, candidate_code: str) -> Result[bool]:
        """
        Check a candidate passcode.

        Returns:
            Result with True (session consumed) or False (attempt counted),
            or Error SESSION_NOT_FOUND / SESSION_USED / SESSION_EXPIRED /
            SESSION_EXHAUSTED when the session is not valid
        """
        now = self.clock()
        otp_session = await self.uow.otp_sessions.get_by_token(session_token)
        if otp_session is None:
            return Return.err(Error(SESSION_NOT_FOUND, "Login session not found"))

        state = otp_session.state(now)
        if state != OtpSessionState.valid:
            return Return.err(_STATE_ERRORS[state])

        if hmac.compare_digest(otp_session.otp_code.encode(), candidate_code.encode()):
            if await self.uow.otp_sessions.consume(session_token, now):
                return Return.ok(True)
            # Lost a race with another verification of the same session
            return await self._current_state_error(session_token, now)

        updated = await self.uow.otp_sessions.increment_attempts(session_token, now)
        if updated is None:
            return await self._current_state_error(session_token, now)
        return Return.ok(False)

    async def _current_state_error(self, session_token: str, now: datetime) -> Result[bool]:
        otp_session = await self.uow.otp_sessions.get_by_token(session_token)
        if otp_session is None:
            return Return.err(Error(SESSION_NOT_FOUND, "Login session not found"))
        state = otp_session.state(now)
        return Return.err(_STATE_ERRORS.get(state, _STATE_ERRORS[OtpSessionState.used]))

    def can_resend(self, otp_session: OtpSession) -> bool:
        if otp_session.last_resend_at is None:
            return True
        return self.clock() - otp_session.last_resend_at >= self.resend_cooldown

    def resend_available_in(self, otp_session: OtpSession) -> int:
        """Seconds until can_resend() turns true"""
        if otp_session.last_resend_at is None:
            return 0
        remaining = self.resend_cooldown - (self.clock() - otp_session.last_resend_at)
        return max(0, int(remaining.total_seconds() + 0.999))

    async def claim_resend(self, otp_session: OtpSession, now: datetime) -> bool:
        """Atomically take the resend slot of a session (cooldown check + stamp)"""
        return await self.uow.otp_sessions.claim_resend(
            otp_session.session_token, now, self.resend_cooldown
        )

    async def invalidate(self, session_token: str) -> bool:
        return await self.uow.otp_sessions.invalidate(session_token)

    async def record_delivery(self, session_token: str, sent_email: bool, sent_sms: bool) -> None:
        await self.uow.otp_sessions.update_delivery(session_token, sent_email, sent_sms)

    async def purge_expired(self) -> int:
        return await self.uow.otp_sessions.delete_expired(self.clock())
