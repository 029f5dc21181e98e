from datetime import timedelta

from pydantic import BaseModel


class LoginPolicy(BaseModel):
    """Tunable limits of the two-step login, loaded from config"""

    max_failed_attempts: int = 5
    lock_seconds: int = 7200
    otp_ttl_seconds: int = 300
    otp_max_attempts: int = 3
    resend_cooldown_seconds: int = 60
    delivery_timeout_seconds: float = 10.0

    @property
    def lock_duration(self) -> timedelta:
        return timedelta(seconds=self.lock_seconds)

    @property
    def otp_ttl(self) -> timedelta:
        return timedelta(seconds=self.otp_ttl_seconds)

    @property
    def resend_cooldown(self) -> timedelta:
        return timedelta(seconds=self.resend_cooldown_seconds)

    @property
    def otp_valid_minutes(self) -> int:
        return max(1, self.otp_ttl_seconds // 60)
