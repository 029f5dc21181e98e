"""
Credential Verifier

Checks an EN code + access code pair and enforces the lockout policy.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

import bcrypt

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Employee, is_locked

logger = logging.getLogger(__name__)

# Hash compared against when the handle is unknown, keeps timing uniform
_DUMMY_HASH = bcrypt.hashpw(b"dummy_access_code", bcrypt.gensalt(4))

EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
CREDENTIAL_MISMATCH = "CREDENTIAL_MISMATCH"
ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid credentials")


def public_error(error: Error) -> Error:
    """
    Collapse NOT_FOUND and MISMATCH into one externally visible error
    so that handles cannot be enumerated.
    """
    if error.code in (EMPLOYEE_NOT_FOUND, CREDENTIAL_MISMATCH):
        return INVALID_CREDENTIALS
    return error


class CredentialVerifier:
    """
    Verifies employee credentials against the credential store.

    Business Rules:
    - Locked employees fail without the access code being compared
    - bcrypt comparison is constant-time
    - Each mismatch increments the counter atomically; the 5th locks for 2h
    - A lock that already expired restarts the counter at 1
    - Inactive is only reported once the access code matched
    """

    def __init__(
        self,
        uow: UnitOfWork,
        max_attempts: int = 5,
        lock_duration: timedelta = timedelta(hours=2),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.max_attempts = max_attempts
        self.lock_duration = lock_duration
        self.clock = clock

    async def verify(self, en_code: str, access_code: str) -> Result[Employee]:
        """
        Verify credentials. Must be called inside an entered unit of work;
        the caller commits so the attempt counter change is persisted.

        Returns:
            Result with the Employee, or Error with one of EMPLOYEE_NOT_FOUND,
            ACCOUNT_LOCKED, CREDENTIAL_MISMATCH, ACCOUNT_INACTIVE
        """
        now = self.clock()
        employee = await self.uow.employees.get_by_en_code(en_code)

        if employee is None:
            bcrypt.checkpw(access_code.encode(), _DUMMY_HASH)
            logger.warning(f"Login attempt for unknown EN code {en_code}")
            return Return.err(Error(EMPLOYEE_NOT_FOUND, "Invalid credentials"))

        if is_locked(employee, now):
            logger.warning(f"Login attempt for locked employee {employee.id}")
            return Return.err(
                Error(
                    ACCOUNT_LOCKED,
                    "Account is temporarily locked. Please try again later.",
                    {"locked_until": employee.lock_until.isoformat()},
                )
            )

        if not bcrypt.checkpw(access_code.encode(), employee.access_code_hash.encode()):
            updated = await self.uow.employees.record_failed_attempt(
                employee.id, now, self.max_attempts, self.lock_duration
            )
            if updated is not None and is_locked(updated, now):
                logger.warning(
                    f"Employee {employee.id} locked until {updated.lock_until} "
                    f"after {updated.failed_attempts} failed attempts"
                )
            else:
                logger.info(f"Access code mismatch for employee {employee.id}")
            return Return.err(Error(CREDENTIAL_MISMATCH, "Invalid credentials"))

        if not employee.is_active:
            return Return.err(
                Error(
                    ACCOUNT_INACTIVE,
                    "Your account has been deactivated. Please contact HR for assistance.",
                )
            )

        if employee.failed_attempts > 0 or employee.lock_until is not None:
            await self.uow.employees.reset_attempts(employee.id)
            employee.failed_attempts = 0
            employee.lock_until = None

        return Return.ok(employee)
