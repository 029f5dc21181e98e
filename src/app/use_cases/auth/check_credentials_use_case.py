"""
Check Credentials Use Case

Validates EN code + access code without starting an OTP session, so the
portal can show where the passcode is going to be sent.
"""

from datetime import datetime
from typing import Callable, Optional

from libs.result import Result, Return
from src.app.services.credential_verifier import CredentialVerifier, public_error
from src.app.services.login_policy import LoginPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.contact_masking import mask_email, mask_phone

from .dtos import CheckCredentialsResponse


class CheckCredentialsUseCase:
    """
    Business Rules:
    - Same verification and lockout accounting as the real login
    - Only masked contact details are returned
    """

    def __init__(
        self,
        uow: UnitOfWork,
        policy: Optional[LoginPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.policy = policy or LoginPolicy()
        self.clock = clock

    async def execute(self, en_code: str, access_code: str) -> Result[CheckCredentialsResponse]:
        async with self.uow:
            verifier = CredentialVerifier(
                self.uow,
                max_attempts=self.policy.max_failed_attempts,
                lock_duration=self.policy.lock_duration,
                clock=self.clock,
            )
            verified = await verifier.verify(en_code, access_code)
            await self.uow.commit()

        if verified.is_err():
            return Return.err(public_error(verified.error))

        employee = verified.value
        return Return.ok(
            CheckCredentialsResponse(
                full_name=employee.full_name,
                masked_email=mask_email(employee.email),
                masked_phone=mask_phone(employee.phone_number),
                profile_completed=employee.profile_completed,
                is_first_login=employee.is_first_login,
            )
        )
