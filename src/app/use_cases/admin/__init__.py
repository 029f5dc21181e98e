"""Admin use cases for HR and operator actions."""

from .deactivate_employee_use_case import (
    DeactivateEmployeeUseCase,
    DeactivateEmployeeResponse,
)
from .purge_expired_sessions_use_case import (
    PurgeExpiredSessionsUseCase,
    PurgeExpiredSessionsResponse,
)

__all__ = [
    "DeactivateEmployeeUseCase",
    "DeactivateEmployeeResponse",
    "PurgeExpiredSessionsUseCase",
    "PurgeExpiredSessionsResponse",
]
