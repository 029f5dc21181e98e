"""
Passcode issuing shared by login and resend.

Creates the OTP session, commits it, then fans the passcode out to both
channels outside the transaction. A session none of whose channels
delivered is invalidated again.
"""

import logging
from typing import Optional, Tuple

from libs.result import Error, Result, Return
from src.app.services.delivery import (
    DeliveryOutcome,
    IDeliveryDispatcher,
    dispatch_passcode,
)
from src.app.services.login_policy import LoginPolicy
from src.app.services.otp_session_manager import (
    ClientContext,
    OtpSessionManager,
    SessionCreationError,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.contact_masking import mask_email, mask_phone
from src.domain.entities import Employee, OtpSession

logger = logging.getLogger(__name__)

OTP_DELIVERY_FAILED = Error(
    "OTP_DELIVERY_FAILED", "Failed to send OTP. Please try again later."
)
SESSION_CREATION_FAILED = Error(
    "SESSION_CREATION_FAILED", "Could not start a login session. Please try again."
)


async def issue_passcode(
    uow: UnitOfWork,
    sessions: OtpSessionManager,
    dispatcher: IDeliveryDispatcher,
    policy: LoginPolicy,
    employee: Employee,
    client_context: Optional[ClientContext] = None,
    resend_count: int = 0,
    last_resend_at=None,
) -> Result[Tuple[OtpSession, DeliveryOutcome]]:
    """Must be called inside an entered unit of work; commits on its own."""
    try:
        otp_session = await sessions.create_session(
            employee,
            client_context,
            resend_count=resend_count,
            last_resend_at=last_resend_at,
        )
    except SessionCreationError as exc:
        logger.error(str(exc))
        await uow.rollback()
        return Return.err(SESSION_CREATION_FAILED)

    await uow.commit()

    outcome = await dispatch_passcode(
        dispatcher,
        employee,
        otp_session.otp_code,
        policy.otp_valid_minutes,
        timeout=policy.delivery_timeout_seconds,
    )

    await sessions.record_delivery(
        otp_session.session_token, outcome.email_sent, outcome.sms_sent
    )
    if not outcome.any_sent:
        await sessions.invalidate(otp_session.session_token)
        await uow.commit()
        logger.error(f"OTP delivery failed on every channel for employee {employee.id}")
        return Return.err(OTP_DELIVERY_FAILED)

    await uow.commit()
    return Return.ok((otp_session, outcome))


def session_started(
    employee: Employee, otp_session: OtpSession, outcome: DeliveryOutcome
) -> dict:
    """Fields of StartLoginResponse / ResendOtpResponse"""
    return dict(
        session_id=otp_session.session_token,
        otp_expiry=otp_session.expires_at,
        otp_length=len(otp_session.otp_code),
        masked_email=mask_email(employee.email),
        masked_phone=mask_phone(employee.phone_number),
        email_sent=outcome.email_sent,
        sms_sent=outcome.sms_sent,
        partial_delivery=outcome.partial,
    )
