"""
Refresh Token Use Case

Mints a new access token from a refresh token.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.api.utils.jwt import TOKEN_MALFORMED, AccessToken, TokenIssuer
from src.app.services.credential_verifier import ACCOUNT_INACTIVE
from src.app.services.unit_of_work import UnitOfWork


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Refresh token must be well-formed, unexpired, of refresh type, not revoked
    - Employee must still exist and be active
    - The new access token reflects the employee's current record
    - The refresh token itself is not rotated
    """

    def __init__(self, uow: UnitOfWork, token_issuer: TokenIssuer):
        self.uow = uow
        self.token_issuer = token_issuer

    async def execute(self, refresh_token: str) -> Result[AccessToken]:
        verified = await self.token_issuer.verify_refresh(refresh_token)
        if verified.is_err():
            return verified

        try:
            employee_id = UUID(verified.value["employee_id"])
        except ValueError:
            return Return.err(Error(TOKEN_MALFORMED, "Invalid or malformed token"))

        async with self.uow:
            employee = await self.uow.employees.get_by_id(employee_id)

        if employee is None or not employee.is_active:
            return Return.err(
                Error(ACCOUNT_INACTIVE, "Employee not found or inactive")
            )

        return await self.token_issuer.refresh(refresh_token, employee)
