from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, case, null, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.employee_repository import IEmployeeRepository
from src.domain.entities import Employee


class EmployeeRepository(IEmployeeRepository):
    """Employee repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, employee_id: UUID) -> Optional[Employee]:
        """Get employee by ID"""
        stmt = select(Employee).where(Employee.id == employee_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_en_code(self, en_code: str) -> Optional[Employee]:
        """Get employee by login handle"""
        stmt = select(Employee).where(Employee.en_code == en_code)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[Employee]:
        """Get employee by email address"""
        stmt = select(Employee).where(Employee.email == email.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, employee: Employee) -> Employee:
        """Create a new employee"""
        self.session.add(employee)
        await self.session.flush()
        await self.session.refresh(employee)
        return employee

    async def update(self, employee: Employee) -> Employee:
        """Update existing employee"""
        self.session.add(employee)
        await self.session.flush()
        await self.session.refresh(employee)
        return employee

    async def record_failed_attempt(
        self,
        employee_id: UUID,
        now: datetime,
        max_attempts: int,
        lock_duration: timedelta,
    ) -> Optional[Employee]:
        """
        Single UPDATE with CASE expressions so concurrent failures for the
        same employee never lose an increment.
        """
        lock_expired = and_(Employee.lock_until.is_not(None), Employee.lock_until <= now)
        unlocked = or_(Employee.lock_until.is_(None), Employee.lock_until <= now)

        stmt = (
            update(Employee)
            .where(Employee.id == employee_id)
            .values(
                failed_attempts=case(
                    (lock_expired, 1),
                    else_=Employee.failed_attempts + 1,
                ),
                lock_until=case(
                    (lock_expired, null()),
                    (
                        and_(unlocked, Employee.failed_attempts + 1 >= max_attempts),
                        now + lock_duration,
                    ),
                    else_=Employee.lock_until,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self._reload(employee_id)

    async def reset_attempts(self, employee_id: UUID) -> None:
        """Clear the failed-attempt counter and any lock"""
        stmt = (
            update(Employee)
            .where(Employee.id == employee_id)
            .values(failed_attempts=0, lock_until=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def record_login(self, employee_id: UUID, now: datetime) -> Optional[Employee]:
        """Stamp last_login_at and clear is_first_login"""
        stmt = (
            update(Employee)
            .where(Employee.id == employee_id)
            .values(last_login_at=now, is_first_login=False)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self._reload(employee_id)

    async def _reload(self, employee_id: UUID) -> Optional[Employee]:
        stmt = (
            select(Employee)
            .where(Employee.id == employee_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()
