"""
Authentication Use Cases

Two-step employee login: credentials, then one-time passcode.
"""

from .start_login_use_case import StartLoginUseCase
from .complete_login_use_case import CompleteLoginUseCase
from .resend_otp_use_case import ResendOtpUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .check_credentials_use_case import CheckCredentialsUseCase
from .register_employee_use_case import RegisterEmployeeUseCase
from .dtos import (
    RegisterEmployeeCommand,
    EmployeeSummary,
    CheckCredentialsResponse,
    StartLoginResponse,
    ResendOtpResponse,
    CompleteLoginResponse,
    LogoutResponse,
    RegisterEmployeeResponse,
)

__all__ = [
    # Use Cases
    "StartLoginUseCase",
    "CompleteLoginUseCase",
    "ResendOtpUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "CheckCredentialsUseCase",
    "RegisterEmployeeUseCase",
    # DTOs - Commands
    "RegisterEmployeeCommand",
    # DTOs - Responses
    "CheckCredentialsResponse",
    "StartLoginResponse",
    "ResendOtpResponse",
    "CompleteLoginResponse",
    "LogoutResponse",
    "RegisterEmployeeResponse",
    # DTOs - Nested Models
    "EmployeeSummary",
]
