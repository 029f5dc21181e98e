"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the employee login flow.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterEmployeeCommand(BaseModel):
    """Command for provisioning a new employee"""

    en_code: str
    access_code: str
    full_name: str
    email: str
    phone_number: str
    designation: str
    department: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class EmployeeSummary(BaseModel):
    """Employee fields safe to hand back to the portal"""

    id: str
    en_code: str
    full_name: str
    email: str
    phone_number: str
    designation: Optional[str] = None
    department: Optional[str] = None
    is_active: bool
    profile_completed: bool
    is_first_login: bool
    last_login_at: Optional[datetime] = None


class CheckCredentialsResponse(BaseModel):
    """Response for the credential pre-check"""

    employee_exists: bool = True
    full_name: str
    masked_email: str
    masked_phone: str
    profile_completed: bool
    is_first_login: bool


class StartLoginResponse(BaseModel):
    """Response for step one of the login (credentials accepted, OTP sent)"""

    session_id: str
    otp_expiry: datetime
    otp_length: int = 4
    masked_email: str
    masked_phone: str
    email_sent: bool
    sms_sent: bool
    partial_delivery: bool


class ResendOtpResponse(StartLoginResponse):
    """Response for resend OTP use case"""

    resend_count: int


class CompleteLoginResponse(BaseModel):
    """Response for step two of the login (OTP accepted, tokens issued)"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    employee: EmployeeSummary


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    message: str
    access_token_revoked: bool
    refresh_token_revoked: bool


class RegisterEmployeeResponse(BaseModel):
    """Response for employee registration"""

    employee: EmployeeSummary


def summarize_employee(employee) -> EmployeeSummary:
    return EmployeeSummary(
        id=str(employee.id),
        en_code=employee.en_code,
        full_name=employee.full_name,
        email=employee.email,
        phone_number=employee.phone_number,
        designation=employee.designation,
        department=employee.department,
        is_active=employee.is_active,
        profile_completed=employee.profile_completed,
        is_first_login=employee.is_first_login,
        last_login_at=employee.last_login_at,
    )
