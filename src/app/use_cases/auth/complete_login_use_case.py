"""
Complete Login Use Case

Step two of the employee login: check the passcode against the OTP
session and hand out the token pair.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.api.utils.jwt import TokenIssuer
from src.app.services.credential_verifier import ACCOUNT_INACTIVE
from src.app.services.login_policy import LoginPolicy
from src.app.services.otp_session_manager import (
    SESSION_EXHAUSTED,
    SESSION_EXPIRED,
    OtpSessionManager,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import CompleteLoginResponse, summarize_employee

logger = logging.getLogger(__name__)

SESSION_INVALID = Error(
    "SESSION_INVALID", "Login session is invalid. Please start the login process again."
)


def external_session_error(error: Error) -> Error:
    """Map internal session states onto what the portal is told"""
    if error.code == SESSION_EXPIRED:
        return Error(
            SESSION_EXPIRED,
            "OTP has expired. Please request a new one.",
            {"can_resend": True},
        )
    if error.code == SESSION_EXHAUSTED:
        return Error(
            SESSION_EXHAUSTED,
            "Too many incorrect attempts. Please start the login process again.",
            {"can_resend": False},
        )
    return SESSION_INVALID


class CompleteLoginUseCase:
    """
    Use case for the second login step.

    Business Rules:
    - A session verifies at most once
    - Wrong guesses count against the session (3 max) and are committed
    - The employee must still be active when the passcode is accepted
    - Successful login stamps last_login_at and clears is_first_login
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_issuer: TokenIssuer,
        policy: Optional[LoginPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.token_issuer = token_issuer
        self.policy = policy or LoginPolicy()
        self.clock = clock

    async def execute(self, session_id: str, otp: str) -> Result[CompleteLoginResponse]:
        async with self.uow:
            sessions = OtpSessionManager(
                self.uow,
                ttl=self.policy.otp_ttl,
                max_attempts=self.policy.otp_max_attempts,
                resend_cooldown=self.policy.resend_cooldown,
                clock=self.clock,
            )

            verified = await sessions.verify_code(session_id, otp)
            if verified.is_err():
                logger.info(f"OTP verification rejected: {verified.error.code}")
                return Return.err(external_session_error(verified.error))

            if not verified.value:
                await self.uow.commit()
                otp_session = await sessions.get_session(session_id)
                remaining = otp_session.attempts_remaining if otp_session else 0
                return Return.err(
                    Error(
                        "INVALID_OTP",
                        "Invalid OTP",
                        {"attempts_remaining": remaining},
                    )
                )

            otp_session = await sessions.get_session(session_id)
            employee = await self.uow.employees.get_by_id(otp_session.employee_id)
            if employee is None or not employee.is_active:
                await self.uow.commit()
                return Return.err(
                    Error(
                        ACCOUNT_INACTIVE,
                        "Your account has been deactivated. Please contact HR for assistance.",
                    )
                )

            employee = await self.uow.employees.record_login(employee.id, self.clock())
            await self.uow.commit()

            tokens = self.token_issuer.issue_token_pair(employee)
            logger.info(f"Employee {employee.id} logged in")

            return Return.ok(
                CompleteLoginResponse(
                    access_token=tokens.access_token,
                    refresh_token=tokens.refresh_token,
                    token_type=tokens.token_type,
                    expires_in=tokens.expires_in,
                    employee=summarize_employee(employee),
                )
            )
