"""
Use Cases

Organized into domain folders:
- auth/: Two-step login, tokens, registration
- employees/: Logged-in employee
- admin/: HR and operator actions
"""

from .auth import (
    StartLoginUseCase,
    CompleteLoginUseCase,
    ResendOtpUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
    CheckCredentialsUseCase,
    RegisterEmployeeUseCase,
)
from .employees import LoadProfileUseCase
from .admin import DeactivateEmployeeUseCase, PurgeExpiredSessionsUseCase

__all__ = [
    # Auth
    "StartLoginUseCase",
    "CompleteLoginUseCase",
    "ResendOtpUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "CheckCredentialsUseCase",
    "RegisterEmployeeUseCase",
    # Employees
    "LoadProfileUseCase",
    # Admin
    "DeactivateEmployeeUseCase",
    "PurgeExpiredSessionsUseCase",
]
