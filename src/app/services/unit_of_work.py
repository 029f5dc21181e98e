from abc import ABC, abstractmethod

from src.app.repositories.employee_repository import IEmployeeRepository
from src.app.repositories.otp_session_repository import IOtpSessionRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    employees: IEmployeeRepository
    otp_sessions: IOtpSessionRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
