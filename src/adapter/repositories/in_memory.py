"""
In-Memory Repositories

Volatile store selected with STORE_BACKEND=memory.

Conditional updates never await, so each one runs to completion on the
event loop. Invalidating an employee's sessions takes that employee's
asyncio.Lock and holds it until the unit of work commits or rolls back,
so invalidate-then-create is serialized per employee like the SQL row lock.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional
from uuid import UUID

from src.app.repositories.employee_repository import IEmployeeRepository
from src.app.repositories.otp_session_repository import (
    DuplicateSessionTokenError,
    IOtpSessionRepository,
)
from src.domain.entities import Employee, OtpSession, is_locked


class InMemoryStore:
    """Process-wide record holder shared by all in-memory units of work"""

    def __init__(self):
        self.employees: Dict[UUID, Employee] = {}
        self.otp_sessions: Dict[str, OtpSession] = {}
        self._employee_locks: Dict[UUID, asyncio.Lock] = {}

    def employee_lock(self, employee_id: UUID) -> asyncio.Lock:
        return self._employee_locks.setdefault(employee_id, asyncio.Lock())

    def clear(self) -> None:
        self.employees.clear()
        self.otp_sessions.clear()
        self._employee_locks.clear()


class InMemoryEmployeeRepository(IEmployeeRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_by_id(self, employee_id: UUID) -> Optional[Employee]:
        return self.store.employees.get(employee_id)

    async def get_by_en_code(self, en_code: str) -> Optional[Employee]:
        for employee in self.store.employees.values():
            if employee.en_code == en_code:
                return employee
        return None

    async def get_by_email(self, email: str) -> Optional[Employee]:
        email = email.lower()
        for employee in self.store.employees.values():
            if employee.email == email:
                return employee
        return None

    async def create(self, employee: Employee) -> Employee:
        for existing in self.store.employees.values():
            if existing.en_code == employee.en_code or existing.email == employee.email:
                raise ValueError("Employee with this EN code or email already exists")
        self.store.employees[employee.id] = employee
        return employee

    async def update(self, employee: Employee) -> Employee:
        self.store.employees[employee.id] = employee
        return employee

    async def record_failed_attempt(
        self,
        employee_id: UUID,
        now: datetime,
        max_attempts: int,
        lock_duration: timedelta,
    ) -> Optional[Employee]:
        employee = self.store.employees.get(employee_id)
        if employee is None:
            return None

        if employee.lock_until is not None and employee.lock_until <= now:
            employee.failed_attempts = 1
            employee.lock_until = None
            return employee

        was_locked = is_locked(employee, now)
        employee.failed_attempts += 1
        if employee.failed_attempts >= max_attempts and not was_locked:
            employee.lock_until = now + lock_duration
        return employee

    async def reset_attempts(self, employee_id: UUID) -> None:
        employee = self.store.employees.get(employee_id)
        if employee is not None:
            employee.failed_attempts = 0
            employee.lock_until = None

    async def record_login(self, employee_id: UUID, now: datetime) -> Optional[Employee]:
        employee = self.store.employees.get(employee_id)
        if employee is not None:
            employee.last_login_at = now
            employee.is_first_login = False
        return employee


class InMemoryOtpSessionRepository(IOtpSessionRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store
        self._held_locks: Dict[UUID, asyncio.Lock] = {}

    def release_locks(self) -> None:
        """Release the employee locks taken since the last commit or rollback"""
        for lock in self._held_locks.values():
            lock.release()
        self._held_locks.clear()

    async def get_by_token(self, session_token: str) -> Optional[OtpSession]:
        return self.store.otp_sessions.get(session_token)

    async def create(self, otp_session: OtpSession) -> OtpSession:
        if otp_session.session_token in self.store.otp_sessions:
            raise DuplicateSessionTokenError(otp_session.session_token[:8])
        self.store.otp_sessions[otp_session.session_token] = otp_session
        return otp_session

    async def invalidate_active_for_employee(self, employee_id: UUID, now: datetime) -> int:
        if employee_id not in self._held_locks:
            lock = self.store.employee_lock(employee_id)
            await lock.acquire()
            self._held_locks[employee_id] = lock

        count = 0
        for otp_session in self.store.otp_sessions.values():
            if (
                otp_session.employee_id == employee_id
                and not otp_session.used
                and otp_session.expires_at > now
            ):
                otp_session.used = True
                count += 1
        return count

    async def consume(self, session_token: str, now: datetime) -> bool:
        otp_session = self.store.otp_sessions.get(session_token)
        if otp_session is None or not otp_session.is_valid(now):
            return False
        otp_session.used = True
        otp_session.verified_at = now
        return True

    async def increment_attempts(self, session_token: str, now: datetime) -> Optional[OtpSession]:
        otp_session = self.store.otp_sessions.get(session_token)
        if otp_session is None or not otp_session.is_valid(now):
            return None
        otp_session.attempts += 1
        return otp_session

    async def invalidate(self, session_token: str) -> bool:
        otp_session = self.store.otp_sessions.get(session_token)
        if otp_session is None or otp_session.used:
            return False
        otp_session.used = True
        return True

    async def update_delivery(
        self, session_token: str, sent_email: bool, sent_sms: bool
    ) -> None:
        otp_session = self.store.otp_sessions.get(session_token)
        if otp_session is not None:
            otp_session.sent_email = sent_email
            otp_session.sent_sms = sent_sms

    async def claim_resend(
        self, session_token: str, now: datetime, cooldown: timedelta
    ) -> bool:
        otp_session = self.store.otp_sessions.get(session_token)
        if otp_session is None:
            return False
        if otp_session.last_resend_at is not None and now - otp_session.last_resend_at < cooldown:
            return False
        otp_session.last_resend_at = now
        return True

    async def delete_expired(self, now: datetime) -> int:
        expired = [
            token
            for token, otp_session in self.store.otp_sessions.items()
            if otp_session.expires_at <= now
        ]
        for token in expired:
            del self.store.otp_sessions[token]
        return len(expired)
