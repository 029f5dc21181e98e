from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import EmployeeSummary
from src.app.use_cases.employees import LoadProfileUseCase
from src.depends import get_current_employee, get_unit_of_work

router = APIRouter(prefix="/employee", tags=["Employee"])


@router.get("/me", status_code=status.HTTP_200_OK, response_model=EmployeeSummary)
async def get_me(
    current_employee: dict = Depends(get_current_employee),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Load the logged-in employee.

    Raises:
        - 401 Unauthorized: Invalid, expired or revoked access token
        - 403 Forbidden: ACCOUNT_INACTIVE
        - 404 Not Found: EMPLOYEE_NOT_FOUND
    """
    employee_id = UUID(current_employee["employee_id"])

    use_case = LoadProfileUseCase(uow)
    result = await use_case.execute(employee_id)

    if result.is_err():
        error = result.error
        if error.code == "ACCOUNT_INACTIVE":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        if error.code == "EMPLOYEE_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
