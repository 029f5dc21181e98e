"""
Admin API Routes - HR and Operator Endpoints

Authentication is via Admin API Key, not employee JWTs.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import (
    DeactivateEmployeeResponse,
    DeactivateEmployeeUseCase,
    PurgeExpiredSessionsResponse,
    PurgeExpiredSessionsUseCase,
)
from src.depends import get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/employees/{employee_id}/deactivate",
    status_code=status.HTTP_200_OK,
    response_model=DeactivateEmployeeResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def deactivate_employee(
    employee_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Deactivate Employee

    HR offboarding endpoint. Blocks future logins and invalidates any
    pending OTP session. Issued tokens stay valid until they expire.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: EMPLOYEE_NOT_FOUND
    """
    use_case = DeactivateEmployeeUseCase(uow)
    result = await use_case.execute(employee_id)

    if result.is_err():
        error = result.error
        if error.code == "EMPLOYEE_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post(
    "/otp-sessions/purge",
    status_code=status.HTTP_200_OK,
    response_model=PurgeExpiredSessionsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def purge_expired_sessions(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Purge Expired OTP Sessions

    Requires: X-Admin-API-Key header
    """
    use_case = PurgeExpiredSessionsUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
