from src.adapter.repositories.in_memory import (
    InMemoryEmployeeRepository,
    InMemoryOtpSessionRepository,
    InMemoryStore,
)
from src.app.services.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    Volatile UnitOfWork over a shared InMemoryStore.

    Writes apply immediately. Commit and rollback only end the transaction
    scope by releasing the employee locks it took.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def __aenter__(self):
        self.employees = InMemoryEmployeeRepository(self.store)
        self.otp_sessions = InMemoryOtpSessionRepository(self.store)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        self.otp_sessions.release_locks()

    async def rollback(self):
        self.otp_sessions.release_locks()
