from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.employee_repository import EmployeeRepository
from src.adapter.repositories.otp_session_repository import OtpSessionRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.employees = EmployeeRepository(self.session)
        self.otp_sessions = OtpSessionRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
