"""
Start Login Use Case

Step one of the employee login: check EN code + access code, open an OTP
session and deliver the passcode by email and SMS.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Result, Return
from src.app.services.credential_verifier import CredentialVerifier, public_error
from src.app.services.delivery import IDeliveryDispatcher
from src.app.services.login_policy import LoginPolicy
from src.app.services.otp_session_manager import ClientContext, OtpSessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import StartLoginResponse
from .passcode_issuer import issue_passcode, session_started

logger = logging.getLogger(__name__)


class StartLoginUseCase:
    """
    Use case for the first login step.

    Business Rules:
    - Unknown EN code and wrong access code are indistinguishable
    - Failed attempt counter changes are committed even on failure
    - A new session invalidates any earlier valid session of the employee
    - Success as long as at least one channel delivered the passcode
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
        self,
        en_code: str,
        access_code: str,
        client_context: Optional[ClientContext] = None,
    ) -> Result[StartLoginResponse]:
        async with self.uow:
            verifier = CredentialVerifier(
                self.uow,
                max_attempts=self.policy.max_failed_attempts,
                lock_duration=self.policy.lock_duration,
                clock=self.clock,
            )
            verified = await verifier.verify(en_code, access_code)
            if verified.is_err():
                await self.uow.commit()
                return Return.err(public_error(verified.error))

            employee = verified.value
            sessions = OtpSessionManager(
                self.uow,
                ttl=self.policy.otp_ttl,
                max_attempts=self.policy.otp_max_attempts,
                resend_cooldown=self.policy.resend_cooldown,
                clock=self.clock,
            )
            issued = await issue_passcode(
                self.uow, sessions, self.dispatcher, self.policy, employee, client_context
            )
            if issued.is_err():
                return issued

            otp_session, outcome = issued.value
            logger.info(f"OTP session started for employee {employee.id}")
            return Return.ok(
                StartLoginResponse(**session_started(employee, otp_session, outcome))
            )
