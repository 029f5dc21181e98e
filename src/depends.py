from contextlib import asynccontextmanager
from datetime import timedelta
from functools import lru_cache
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.repositories.in_memory import InMemoryStore
from src.adapter.services.delivery_dispatcher import (
    ConsoleDeliveryDispatcher,
    SmtpSmsDeliveryDispatcher,
)
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from src.adapter.services.revocation_store import (
    InMemoryRevocationStore,
    RedisRevocationStore,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import TokenIssuer
from src.app.services.delivery import IDeliveryDispatcher
from src.app.services.login_policy import LoginPolicy
from src.app.services.otp_session_manager import ClientContext
from src.app.services.revocation_store import IRevocationStore

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Backing store for STORE_BACKEND=memory, shared by every request
memory_store = InMemoryStore()

security = HTTPBearer(auto_error=False)


@asynccontextmanager
async def unit_of_work_scope():
    """UnitOfWork for the configured STORE_BACKEND, usable outside a request"""
    if ApplicationConfig.STORE_BACKEND == "memory":
        yield InMemoryUnitOfWork(memory_store)
        return

    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_unit_of_work():
    async with unit_of_work_scope() as uow:
        yield uow


@lru_cache(maxsize=1)
def get_revocation_store() -> IRevocationStore:
    if ApplicationConfig.CACHE_BACKEND == "redis":
        client = redis.from_url(ApplicationConfig.REDIS_URL, decode_responses=True)
        return RedisRevocationStore(client)
    return InMemoryRevocationStore()


def get_token_issuer(
    revocation_store: IRevocationStore = Depends(get_revocation_store),
) -> TokenIssuer:
    return TokenIssuer(
        secret=ApplicationConfig.JWT_SECRET,
        issuer=ApplicationConfig.JWT_ISSUER,
        audience=ApplicationConfig.JWT_AUDIENCE,
        revocation_store=revocation_store,
        access_ttl=timedelta(seconds=ApplicationConfig.JWT_ACCESS_TTL_SECONDS),
        refresh_ttl=timedelta(seconds=ApplicationConfig.JWT_REFRESH_TTL_SECONDS),
    )


@lru_cache(maxsize=1)
def get_delivery_dispatcher() -> IDeliveryDispatcher:
    if ApplicationConfig.DELIVERY_BACKEND == "smtp":
        return SmtpSmsDeliveryDispatcher(
            smtp_host=ApplicationConfig.SMTP_HOST,
            smtp_port=ApplicationConfig.SMTP_PORT,
            smtp_user=ApplicationConfig.SMTP_USER,
            smtp_password=ApplicationConfig.SMTP_PASS,
            smtp_from=ApplicationConfig.SMTP_FROM,
            smtp_use_tls=ApplicationConfig.SMTP_USE_TLS,
            sms_gateway_url=ApplicationConfig.SMS_GATEWAY_URL,
            sms_api_key=ApplicationConfig.SMS_API_KEY,
            sms_sender_id=ApplicationConfig.SMS_SENDER_ID,
        )
    return ConsoleDeliveryDispatcher()


def get_login_policy() -> LoginPolicy:
    return LoginPolicy(
        max_failed_attempts=ApplicationConfig.LOGIN_MAX_ATTEMPTS,
        lock_seconds=ApplicationConfig.LOGIN_LOCK_SECONDS,
        otp_ttl_seconds=ApplicationConfig.OTP_TTL_SECONDS,
        otp_max_attempts=ApplicationConfig.OTP_MAX_ATTEMPTS,
        resend_cooldown_seconds=ApplicationConfig.OTP_RESEND_COOLDOWN_SECONDS,
        delivery_timeout_seconds=ApplicationConfig.DELIVERY_TIMEOUT_SECONDS,
    )


def get_client_context(request: Request) -> ClientContext:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    elif request.client:
        ip_address = request.client.host
    else:
        ip_address = None
    return ClientContext(
        ip_address=ip_address, user_agent=request.headers.get("user-agent")
    )


def get_optional_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise ClientError(
            Error("UNAUTHORIZED", "Access token required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return credentials.credentials


async def get_current_employee(
    token: str = Depends(get_bearer_token),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Returns:
        Decoded JWT payload (employee_id, en_code, email, ...)

    Raises:
        ClientError: 401 if the token is expired, malformed, of the wrong type or revoked
    """
    result = await token_issuer.verify_access(token)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)
    return result.value
