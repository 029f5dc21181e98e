"""
Load Profile Use Case

Loads the current employee from the access token claims.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.credential_verifier import ACCOUNT_INACTIVE
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import EmployeeSummary, summarize_employee


class LoadProfileUseCase:
    """
    Use case for loading the logged-in employee.

    Business Rules:
    - JWT payload provides employee_id
    - Employee must exist and still be active
    - Returns the live record, not the token snapshot
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, employee_id: UUID) -> Result[EmployeeSummary]:
        """
        Execute load profile use case.

        Args:
            employee_id: Employee UUID from JWT

        Returns:
            Result with EmployeeSummary, or Error
        """
        async with self.uow:
            employee = await self.uow.employees.get_by_id(employee_id)

        if employee is None:
            return Return.err(Error("EMPLOYEE_NOT_FOUND", "Employee not found"))

        if not employee.is_active:
            return Return.err(
                Error(ACCOUNT_INACTIVE, "Your account has been deactivated")
            )

        return Return.ok(summarize_employee(employee))
