"""
Employee Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class OtpSessionState(str, Enum):
    """Derived lifecycle state of an OTP session"""

    valid = "valid"
    used = "used"
    expired = "expired"
    attempts_exhausted = "attempts_exhausted"


class TokenType(str, Enum):
    """Type tag carried in every issued JWT"""

    access = "access"
    refresh = "refresh"


class DeliveryChannel(str, Enum):
    """Out-of-band channel a passcode is sent through"""

    email = "email"
    sms = "sms"
