"""
Passcode Delivery Adapters

SMTP email + HTTP SMS gateway for production, console logging for
development. Picked by DELIVERY_BACKEND.
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

import httpx

from src.app.services.delivery import IDeliveryDispatcher, OtpPayload

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Confirm Your Identity with a One-Time Passcode"


def render_email_html(payload: OtpPayload) -> str:
    return f"""
<div style="max-width: 480px; margin: 0 auto; font-family: Arial, sans-serif;">
  <p>Dear <strong>{payload.recipient_name}</strong>,</p>
  <p>Use the following one-time passcode to complete your login to the
  Employee Portal. It is valid for {payload.valid_minutes} minutes.</p>
  <p style="font-size: 2rem; font-weight: 600;">{payload.otp_code}</p>
  <p style="color: #888;">If you did not request this passcode you can ignore
  this message; someone may have entered your EN code by mistake.</p>
</div>
"""


def render_sms_text(payload: OtpPayload) -> str:
    return (
        f"Your Employee Portal login OTP is: {payload.otp_code}. "
        f"Valid for {payload.valid_minutes} minutes. Do not share this OTP with anyone."
    )


class SmtpSmsDeliveryDispatcher(IDeliveryDispatcher):
    """Email through an SMTP relay, SMS through an HTTP gateway"""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str,
        smtp_password: str,
        smtp_from: str,
        smtp_use_tls: bool,
        sms_gateway_url: str,
        sms_api_key: str,
        sms_sender_id: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_from = smtp_from
        self.smtp_use_tls = smtp_use_tls
        self.sms_gateway_url = sms_gateway_url
        self.sms_api_key = sms_api_key
        self.sms_sender_id = sms_sender_id
        self._client = http_client

    async def send_email(self, address: str, payload: OtpPayload) -> bool:
        msg = EmailMessage()
        msg["Subject"] = EMAIL_SUBJECT
        msg["From"] = self.smtp_from
        msg["To"] = address
        msg.set_content(render_sms_text(payload))
        msg.add_alternative(render_email_html(payload), subtype="html")

        try:
            # smtplib blocks, keep it off the event loop
            await asyncio.to_thread(self._send_message, msg)
            return True
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Failed to send OTP email: {exc}")
            return False

    def _send_message(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=10) as smtp:
            if self.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if self.smtp_user and self.smtp_password:
                smtp.login(self.smtp_user, self.smtp_password)
            smtp.send_message(msg)

    async def send_sms(self, number: str, payload: OtpPayload) -> bool:
        if not self.sms_gateway_url:
            logger.warning("SMS gateway URL not configured, skipping SMS delivery")
            return False

        body = {
            "to": number.replace(" ", ""),
            "sender": self.sms_sender_id,
            "message": render_sms_text(payload),
        }
        headers = {"Authorization": f"Bearer {self.sms_api_key}"}

        try:
            if self._client is not None:
                response = await self._client.post(self.sms_gateway_url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.post(self.sms_gateway_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error(f"Failed to send OTP SMS: {exc}")
            return False

        if response.status_code >= 400:
            logger.error(f"SMS gateway rejected OTP message: HTTP {response.status_code}")
            return False
        return True


class ConsoleDeliveryDispatcher(IDeliveryDispatcher):
    """Development dispatcher: writes the passcode to the log"""

    async def send_email(self, address: str, payload: OtpPayload) -> bool:
        logger.info(f"[console email] to={address} otp={payload.otp_code}")
        return True

    async def send_sms(self, number: str, payload: OtpPayload) -> bool:
        logger.info(f"[console sms] to={number} otp={payload.otp_code}")
        return True
