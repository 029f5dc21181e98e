from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from src.domain.entities import Employee


class IEmployeeRepository(ABC):
    """Employee repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, employee_id: UUID) -> Optional[Employee]:
        """Get employee by ID"""
        pass

    @abstractmethod
    async def get_by_en_code(self, en_code: str) -> Optional[Employee]:
        """Get employee by login handle (active or not)"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Employee]:
        """Get employee by email address"""
        pass

    @abstractmethod
    async def create(self, employee: Employee) -> Employee:
        """Create a new employee"""
        pass

    @abstractmethod
    async def update(self, employee: Employee) -> Employee:
        """Update existing employee"""
        pass

    @abstractmethod
    async def record_failed_attempt(
        self,
        employee_id: UUID,
        now: datetime,
        max_attempts: int,
        lock_duration: timedelta,
    ) -> Optional[Employee]:
        """
        Atomically count a failed credential check.

        An already-expired lock restarts the counter at 1; otherwise the
        counter increments and reaching max_attempts on an unlocked employee
        sets lock_until = now + lock_duration. Returns the updated employee.
        """
        pass

    @abstractmethod
    async def reset_attempts(self, employee_id: UUID) -> None:
        """Atomically clear the failed-attempt counter and any lock"""
        pass

    @abstractmethod
    async def record_login(self, employee_id: UUID, now: datetime) -> Optional[Employee]:
        """Stamp last_login_at and clear is_first_login"""
        pass
