from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.api.utils.jwt import AccessToken, TokenIssuer
from src.app.services.delivery import IDeliveryDispatcher
from src.app.services.login_policy import LoginPolicy
from src.app.services.otp_session_manager import ClientContext
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    CheckCredentialsResponse,
    CheckCredentialsUseCase,
    CompleteLoginResponse,
    CompleteLoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenUseCase,
    RegisterEmployeeCommand,
    RegisterEmployeeResponse,
    RegisterEmployeeUseCase,
    ResendOtpResponse,
    ResendOtpUseCase,
    StartLoginResponse,
    StartLoginUseCase,
)
from src.depends import (
    get_client_context,
    get_delivery_dispatcher,
    get_login_policy,
    get_optional_bearer_token,
    get_token_issuer,
    get_unit_of_work,
)

router = APIRouter(prefix="/employee/auth", tags=["Authentication"])

EN_CODE_PATTERN = r"^\d{3}$"
ACCESS_CODE_PATTERN = r"^[A-Za-z]{10}$"
OTP_PATTERN = r"^\d{4}$"

CREDENTIAL_ERROR_STATUS = {
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_LOCKED": status.HTTP_423_LOCKED,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
}

SESSION_ERROR_STATUS = {
    "SESSION_INVALID": status.HTTP_400_BAD_REQUEST,
    "SESSION_EXPIRED": status.HTTP_410_GONE,
    "SESSION_EXHAUSTED": status.HTTP_400_BAD_REQUEST,
    "INVALID_OTP": status.HTTP_400_BAD_REQUEST,
    "RESEND_COOLDOWN": status.HTTP_429_TOO_MANY_REQUESTS,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
}

TOKEN_ERROR_CODES = (
    "TOKEN_EXPIRED",
    "TOKEN_MALFORMED",
    "TOKEN_WRONG_TYPE",
    "TOKEN_REVOKED",
    "TOKEN_MISMATCH",
)


def _raise_for(error, status_map: dict):
    if error.code in status_map:
        raise ClientError(error, status_code=status_map[error.code])
    if error.code == "OTP_DELIVERY_FAILED":
        raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    raise ServerError(error)


class CredentialsRequest(BaseModel):
    """
    Credentials HTTP request payload

    EN code is 3 digits, access code is 10 letters.
    """

    en_code: str = Field(..., pattern=EN_CODE_PATTERN, description="Employee EN code")
    access_code: str = Field(
        ..., pattern=ACCESS_CODE_PATTERN, description="10-letter access code"
    )


@router.post(
    "/check-credentials",
    status_code=status.HTTP_200_OK,
    response_model=CheckCredentialsResponse,
)
async def check_credentials(
    request: CredentialsRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: LoginPolicy = Depends(get_login_policy),
):
    """
    Validate credentials without sending a passcode.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: ACCOUNT_INACTIVE
        - 423 Locked: ACCOUNT_LOCKED
    """
    use_case = CheckCredentialsUseCase(uow, policy)
    result = await use_case.execute(request.en_code, request.access_code)

    if result.is_err():
        _raise_for(result.error, CREDENTIAL_ERROR_STATUS)

    return result.value


@router.post("/send-otp", status_code=status.HTTP_200_OK, response_model=StartLoginResponse)
async def send_otp(
    request: CredentialsRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    dispatcher: IDeliveryDispatcher = Depends(get_delivery_dispatcher),
    policy: LoginPolicy = Depends(get_login_policy),
    client_context: ClientContext = Depends(get_client_context),
):
    """
    Login step one - verify credentials and send the passcode.

    Returns the opaque session id plus masked contact hints.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: ACCOUNT_INACTIVE
        - 423 Locked: ACCOUNT_LOCKED
        - 503 Service Unavailable: OTP_DELIVERY_FAILED (no channel delivered)
    """
    use_case = StartLoginUseCase(uow, dispatcher, policy)
    result = await use_case.execute(request.en_code, request.access_code, client_context)

    if result.is_err():
        _raise_for(result.error, CREDENTIAL_ERROR_STATUS)

    return result.value


class VerifyOtpRequest(BaseModel):
    session_id: str = Field(..., min_length=1, description="Session id from send-otp")
    otp: str = Field(..., pattern=OTP_PATTERN, description="4-digit passcode")


@router.post(
    "/verify-otp", status_code=status.HTTP_200_OK, response_model=CompleteLoginResponse
)
async def verify_otp(
    request: VerifyOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    policy: LoginPolicy = Depends(get_login_policy),
):
    """
    Login step two - verify the passcode and issue tokens.

    Raises:
        - 400 Bad Request: SESSION_INVALID, SESSION_EXHAUSTED, INVALID_OTP
        - 403 Forbidden: ACCOUNT_INACTIVE
        - 410 Gone: SESSION_EXPIRED (a resend is possible)
    """
    use_case = CompleteLoginUseCase(uow, token_issuer, policy)
    result = await use_case.execute(request.session_id, request.otp)

    if result.is_err():
        _raise_for(result.error, SESSION_ERROR_STATUS)

    return result.value


class ResendOtpRequest(BaseModel):
    session_id: str = Field(..., min_length=1, description="Session id from send-otp")


@router.post("/resend-otp", status_code=status.HTTP_200_OK, response_model=ResendOtpResponse)
async def resend_otp(
    request: ResendOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    dispatcher: IDeliveryDispatcher = Depends(get_delivery_dispatcher),
    policy: LoginPolicy = Depends(get_login_policy),
    client_context: ClientContext = Depends(get_client_context),
):
    """
    Replace the session with a new one and send a fresh passcode.

    Raises:
        - 400 Bad Request: SESSION_INVALID, SESSION_EXHAUSTED
        - 403 Forbidden: ACCOUNT_INACTIVE
        - 429 Too Many Requests: RESEND_COOLDOWN
        - 503 Service Unavailable: OTP_DELIVERY_FAILED
    """
    use_case = ResendOtpUseCase(uow, dispatcher, policy)
    result = await use_case.execute(request.session_id, client_context)

    if result.is_err():
        _raise_for(result.error, SESSION_ERROR_STATUS)

    return result.value


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=AccessToken)
async def refresh(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Mint a new access token from a refresh token.

    Raises:
        - 401 Unauthorized: TOKEN_* errors
        - 403 Forbidden: ACCOUNT_INACTIVE
    """
    use_case = RefreshTokenUseCase(uow, token_issuer)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        error = result.error
        if error.code in TOKEN_ERROR_CODES:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        if error.code == "ACCOUNT_INACTIVE":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, description="Refresh token to revoke too")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Optional[LogoutRequest] = None,
    access_token: Optional[str] = Depends(get_optional_bearer_token),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Revoke the bearer access token and the body's refresh token.

    Both are optional; whichever is supplied is revoked.
    """
    use_case = LogoutUseCase(token_issuer)
    result = await use_case.execute(
        access_token, request.refresh_token if request else None
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class RegisterEmployeeRequest(BaseModel):
    en_code: str = Field(..., pattern=EN_CODE_PATTERN)
    access_code: str = Field(..., pattern=ACCESS_CODE_PATTERN)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone_number: str = Field(..., min_length=7, max_length=32)
    designation: str = Field(..., min_length=1, max_length=255)
    department: Optional[str] = Field(None, max_length=255)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterEmployeeResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def register(
    request: RegisterEmployeeRequest, uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Provision an employee (HR integration).

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 409 Conflict: DUPLICATE_EN_CODE, DUPLICATE_EMAIL
    """
    command = RegisterEmployeeCommand(**request.model_dump())

    use_case = RegisterEmployeeUseCase(uow, bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code in ("DUPLICATE_EN_CODE", "DUPLICATE_EMAIL"):
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value
