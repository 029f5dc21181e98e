"""
Use Case: Purge Expired OTP Sessions

Deletes OTP sessions whose expiry has passed. Run by the background
reaper and exposed to operators through the admin API.
"""

import logging
from datetime import datetime
from typing import Callable

from pydantic import BaseModel

from libs.result import Result, Return
from src.app.services.otp_session_manager import OtpSessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class PurgeExpiredSessionsResponse(BaseModel):
    deleted: int


class PurgeExpiredSessionsUseCase:
    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self) -> Result[PurgeExpiredSessionsResponse]:
        async with self.uow:
            deleted = await OtpSessionManager(self.uow, clock=self.clock).purge_expired()
            await self.uow.commit()

        if deleted:
            logger.info(f"Purged {deleted} expired OTP session(s)")
        return Return.ok(PurgeExpiredSessionsResponse(deleted=deleted))
