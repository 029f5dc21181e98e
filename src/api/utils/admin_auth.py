"""
Admin API Key Authentication

Validates admin API keys for HR / operator endpoints.
"""

import hmac

from fastapi import Header, status

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Used by the HR system to provision and deactivate employees.
    Different from employee JWT authentication - this is service-to-service auth.

    Raises:
        ClientError: 401 if key is missing or invalid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if not hmac.compare_digest(
        x_admin_api_key.encode(), str(ApplicationConfig.ADMIN_API_KEY).encode()
    ):
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
