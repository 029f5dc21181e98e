"""
OtpSession Entity

Time-boxed one-time passcode challenge tied to a verified employee.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import OtpSessionState


class OtpSession(SQLModel, table=True):
    """
    OtpSession entity - one login challenge.

    Business Rules:
    - 4-digit numeric passcode, expires 5 minutes after creation
    - Valid while unused, unexpired and attempts < max_attempts
    - At most one valid session per employee
    - used=True without verified_at means the session was invalidated
    """

    __tablename__ = "otp_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_token: str = Field(unique=True, index=True, max_length=64)

    employee_id: UUID = Field(foreign_key="employees.id", nullable=False, index=True)
    en_code: str = Field(max_length=3)
    otp_code: str = Field(max_length=4)

    used: bool = Field(default=False)
    attempts: int = Field(default=0)
    max_attempts: int = Field(default=3)

    # Delivery outcomes
    sent_email: bool = Field(default=False)
    sent_sms: bool = Field(default=False)

    # Resend tracking
    resend_count: int = Field(default=0)
    last_resend_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Client context
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_otp_session_expires_at", "expires_at"),
        Index("idx_otp_session_employee_created", "employee_id", "created_at"),
    )

    def state(self, now: datetime) -> OtpSessionState:
        # Expiry wins over the used flag
        if self.expires_at <= now:
            return OtpSessionState.expired
        if self.used:
            return OtpSessionState.used
        if self.attempts >= self.max_attempts:
            return OtpSessionState.attempts_exhausted
        return OtpSessionState.valid

    def is_valid(self, now: datetime) -> bool:
        return self.state(now) == OtpSessionState.valid

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)
