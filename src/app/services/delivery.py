"""
Passcode Delivery

Interface to the out-of-band delivery collaborator and the fan-out that
sends one passcode through both channels.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from src.domain.entities import DeliveryChannel, Employee

logger = logging.getLogger(__name__)


class OtpPayload(BaseModel):
    """What a channel needs to render the passcode message"""

    otp_code: str
    recipient_name: str
    valid_minutes: int


class DeliveryOutcome(BaseModel):
    """Per-channel result of one dispatch; each flag reported independently"""

    email_sent: bool
    sms_sent: bool

    @property
    def any_sent(self) -> bool:
        return self.email_sent or self.sms_sent

    @property
    def partial(self) -> bool:
        return self.email_sent != self.sms_sent


class IDeliveryDispatcher(ABC):
    """Delivery collaborator interface. Implementations do not retry."""

    @abstractmethod
    async def send_email(self, address: str, payload: OtpPayload) -> bool:
        pass

    @abstractmethod
    async def send_sms(self, number: str, payload: OtpPayload) -> bool:
        pass


async def _send_with_timeout(channel: DeliveryChannel, coro, timeout: float) -> bool:
    try:
        return bool(await asyncio.wait_for(coro, timeout=timeout))
    except asyncio.TimeoutError:
        logger.warning(f"OTP {channel.value} delivery timed out after {timeout}s")
        return False
    except Exception as exc:
        logger.error(f"OTP {channel.value} delivery failed: {exc}")
        return False


async def dispatch_passcode(
    dispatcher: IDeliveryDispatcher,
    employee: Employee,
    otp_code: str,
    valid_minutes: int,
    timeout: float = 10.0,
) -> DeliveryOutcome:
    """
    Send the passcode over email and SMS concurrently and wait for both.

    A failure or timeout on one channel never cancels the other.
    """
    payload = OtpPayload(
        otp_code=otp_code,
        recipient_name=employee.full_name,
        valid_minutes=valid_minutes,
    )
    email_sent, sms_sent = await asyncio.gather(
        _send_with_timeout(
            DeliveryChannel.email,
            dispatcher.send_email(employee.email, payload),
            timeout,
        ),
        _send_with_timeout(
            DeliveryChannel.sms,
            dispatcher.send_sms(employee.phone_number, payload),
            timeout,
        ),
    )
    outcome = DeliveryOutcome(email_sent=email_sent, sms_sent=sms_sent)
    if outcome.partial:
        logger.warning(
            f"Partial OTP delivery for employee {employee.id}: "
            f"email={email_sent} sms={sms_sent}"
        )
    return outcome
