"""Test doubles and builders shared by unit and integration tests"""

from datetime import datetime, timedelta

import bcrypt

from src.app.services.delivery import IDeliveryDispatcher
from src.domain.entities import Employee

ACCESS_CODE = "AbcdEfghIj"

# Cheap hash so the suite stays fast
ACCESS_CODE_HASH = bcrypt.hashpw(ACCESS_CODE.encode(), bcrypt.gensalt(4)).decode()


class FakeClock:
    """Naive-UTC clock that only moves when told to"""

    def __init__(self, now: datetime = datetime(2025, 1, 15, 9, 0, 0)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingDispatcher(IDeliveryDispatcher):
    """Delivery double that remembers every passcode it was asked to send"""

    def __init__(self, email_ok: bool = True, sms_ok: bool = True):
        self.email_ok = email_ok
        self.sms_ok = sms_ok
        self.emails = []
        self.sms = []

    async def send_email(self, address, payload):
        self.emails.append((address, payload.otp_code))
        return self.email_ok

    async def send_sms(self, number, payload):
        self.sms.append((number, payload.otp_code))
        return self.sms_ok

    @property
    def last_otp(self) -> str:
        return (self.emails or self.sms)[-1][1]


def make_employee(**overrides) -> Employee:
    fields = dict(
        en_code="001",
        access_code_hash=ACCESS_CODE_HASH,
        full_name="Asha Verma",
        email="asha.verma@example.com",
        phone_number="+91 9876543210",
        designation="Engineer",
        department="Platform",
    )
    fields.update(overrides)
    return Employee(**fields)
