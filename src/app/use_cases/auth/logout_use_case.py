"""
Logout Use Case

Revokes whichever of the access and refresh tokens the caller supplies.
"""

import logging
from typing import Optional

from libs.result import Result, Return
from src.api.utils.jwt import TokenIssuer

from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logging an employee out.

    Business Rules:
    - Revoked tokens fail verification until they would have expired anyway
    - Logout succeeds even when a token was already expired or unknown
    - Either token may be missing; a logout with neither is a no-op
    """

    def __init__(self, token_issuer: TokenIssuer):
        self.token_issuer = token_issuer

    async def execute(
        self, access_token: Optional[str] = None, refresh_token: Optional[str] = None
    ) -> Result[LogoutResponse]:
        access_revoked = False
        if access_token:
            access_revoked = await self.token_issuer.revoke(access_token, reason="logout")

        refresh_revoked = False
        if refresh_token:
            refresh_revoked = await self.token_issuer.revoke(refresh_token, reason="logout")

        logger.info(
            f"Logout: access revoked={access_revoked}, refresh revoked={refresh_revoked}"
        )
        return Return.ok(
            LogoutResponse(
                message="Logged out successfully",
                access_token_revoked=access_revoked,
                refresh_token_revoked=refresh_revoked,
            )
        )
