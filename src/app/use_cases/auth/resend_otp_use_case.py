"""
Resend OTP Use Case

Replaces an unverified OTP session with a fresh one and delivers the new
passcode, subject to a per-session cooldown.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.services.credential_verifier import ACCOUNT_INACTIVE
from src.app.services.delivery import IDeliveryDispatcher
from src.app.services.login_policy import LoginPolicy
from src.app.services.otp_session_manager import (
    SESSION_EXHAUSTED,
    ClientContext,
    OtpSessionManager,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import OtpSessionState

from .complete_login_use_case import SESSION_INVALID, external_session_error
from .dtos import ResendOtpResponse
from .passcode_issuer import issue_passcode, session_started

logger = logging.getLogger(__name__)


class ResendOtpUseCase:
    """
    Use case for resending a login passcode.

    Business Rules:
    - Works on unverified sessions, valid or expired
    - A session whose attempts ran out must restart the login
    - At most one resend per session every 60 seconds
    - The new session inherits resend_count + 1 and the resend timestamp
    - The old session is invalidated by the new one
    """

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: IDeliveryDispatcher,
        policy: Optional[LoginPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.dispatcher = dispatcher
        self.policy = policy or LoginPolicy()
        self.clock = clock

    async def execute(
        self, session_id: str, client_context: Optional[ClientContext] = None
    ) -> Result[ResendOtpResponse]:
        async with self.uow:
            sessions = OtpSessionManager(
                self.uow,
                ttl=self.policy.otp_ttl,
                max_attempts=self.policy.otp_max_attempts,
                resend_cooldown=self.policy.resend_cooldown,
                clock=self.clock,
            )

            existing = await sessions.get_session(session_id)
            if existing is None or existing.verified_at is not None:
                return Return.err(SESSION_INVALID)

            now = self.clock()
            if existing.state(now) == OtpSessionState.attempts_exhausted:
                logger.warning(f"Resend refused for exhausted session of {existing.employee_id}")
                return Return.err(external_session_error(Error(SESSION_EXHAUSTED, "")))

            if not await sessions.claim_resend(existing, now):
                retry_after = sessions.resend_available_in(existing)
                return Return.err(
                    Error(
                        "RESEND_COOLDOWN",
                        f"Please wait {retry_after} seconds before requesting a new OTP",
                        {"retry_after_seconds": retry_after},
                    )
                )

            employee = await self.uow.employees.get_by_id(existing.employee_id)
            if employee is None or not employee.is_active:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        ACCOUNT_INACTIVE,
                        "Your account has been deactivated. Please contact HR for assistance.",
                    )
                )

            issued = await issue_passcode(
                self.uow,
                sessions,
                self.dispatcher,
                self.policy,
                employee,
                client_context,
                resend_count=existing.resend_count + 1,
                last_resend_at=now,
            )
            if issued.is_err():
                return issued

            otp_session, outcome = issued.value
            logger.info(
                f"OTP resent for employee {employee.id} (resend #{otp_session.resend_count})"
            )
            return Return.ok(
                ResendOtpResponse(
                    **session_started(employee, otp_session, outcome),
                    resend_count=otp_session.resend_count,
                )
            )
