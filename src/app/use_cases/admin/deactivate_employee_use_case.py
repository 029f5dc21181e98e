"""
Use Case: Deactivate Employee

HR offboarding endpoint. The record is kept; the employee can no longer
log in and any pending OTP session is invalidated.
"""

from datetime import datetime
from typing import Callable
from uuid import UUID

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow


class DeactivateEmployeeResponse(BaseModel):
    """Response DTO for DeactivateEmployeeUseCase"""

    status: str
    sessions_invalidated: int


class DeactivateEmployeeUseCase:
    """
    Deactivate an employee.

    Business Logic:
    1. Validate employee exists
    2. Set is_active = False
    3. Invalidate every valid OTP session of the employee

    Idempotent: deactivating an inactive employee succeeds with 0 sessions
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, employee_id: UUID) -> Result[DeactivateEmployeeResponse]:
        async with self.uow:
            employee = await self.uow.employees.get_by_id(employee_id)
            if not employee:
                return Return.err(Error("EMPLOYEE_NOT_FOUND", "Employee not found"))

            employee.is_active = False
            await self.uow.employees.update(employee)

            invalidated = await self.uow.otp_sessions.invalidate_active_for_employee(
                employee_id, self.clock()
            )
            await self.uow.commit()

            return Return.ok(
                DeactivateEmployeeResponse(
                    status="inactive", sessions_invalidated=invalidated
                )
            )
