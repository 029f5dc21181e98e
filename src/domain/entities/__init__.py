"""
Employee Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

from .enums import DeliveryChannel, OtpSessionState, TokenType
from .employee import Employee, is_locked
from .otp_session import OtpSession

__all__ = [
    # Enums
    "DeliveryChannel",
    "OtpSessionState",
    "TokenType",
    # Entities
    "Employee",
    "OtpSession",
    # Derivations
    "is_locked",
]
