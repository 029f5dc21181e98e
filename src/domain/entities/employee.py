"""
Employee Entity

The identity record used by the two-factor login flow.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Employee(SQLModel, table=True):
    """
    Employee entity - identity, hashed access code and lockout counters.

    Business Rules:
    - en_code is a unique 3-digit login handle
    - Access code (10 letters) stored as bcrypt hash only
    - Never hard-deleted, only deactivated (is_active=False)
    - Lock state is derived from lock_until, never stored as a flag
    """

    __tablename__ = "employees"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    en_code: str = Field(unique=True, index=True, max_length=3)
    access_code_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    full_name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    phone_number: str = Field(max_length=32)
    designation: str = Field(max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)

    is_active: bool = Field(default=True)
    profile_completed: bool = Field(default=False)
    is_first_login: bool = Field(default=True)

    # Lockout
    failed_attempts: int = Field(default=0)
    lock_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_employee_active", "is_active"),)


def is_locked(employee: Employee, now: datetime) -> bool:
    return employee.lock_until is not None and employee.lock_until > now
