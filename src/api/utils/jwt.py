"""
Token Issuer

Mints, verifies and revokes employee access/refresh JWTs (HS256).
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.revocation_store import IRevocationStore
from src.domain.entities import Employee, TokenType

logger = logging.getLogger(__name__)

TOKEN_EXPIRED = "TOKEN_EXPIRED"
TOKEN_MALFORMED = "TOKEN_MALFORMED"
TOKEN_WRONG_TYPE = "TOKEN_WRONG_TYPE"
TOKEN_REVOKED = "TOKEN_REVOKED"
TOKEN_MISMATCH = "TOKEN_MISMATCH"


class TokenPair(BaseModel):
    """Tokens handed out after a successful login"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class AccessToken(BaseModel):
    """New access token minted from a refresh token"""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenIssuer:
    """
    Issues and validates employee JWTs.

    Business Rules:
    - Access token: 15 minutes, carries an employee snapshot
    - Refresh token: 7 days, carries only employee_id + token_version
    - Every token has a unique jti plus issuer/audience
    - Revocation stores the jti for the token's remaining lifetime
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        revocation_store: IRevocationStore,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.secret = secret
        self.issuer = issuer
        self.audience = audience
        self.revocation_store = revocation_store
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.clock = clock

    @property
    def access_expires_in(self) -> int:
        return int(self.access_ttl.total_seconds())

    def _encode(self, claims: dict, token_type: TokenType, ttl: timedelta) -> str:
        now = self.clock()
        payload = {
            **claims,
            "type": token_type.value,
            "iss": self.issuer,
            "aud": self.audience,
            "jti": str(uuid4()),
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def create_access_token(self, employee: Employee) -> str:
        claims = {
            "sub": str(employee.id),
            "employee_id": str(employee.id),
            "en_code": employee.en_code,
            "email": employee.email,
            "full_name": employee.full_name,
            "department": employee.department,
            "designation": employee.designation,
            "is_active": employee.is_active,
            "profile_completed": employee.profile_completed,
        }
        return self._encode(claims, TokenType.access, self.access_ttl)

    def create_refresh_token(self, employee: Employee) -> str:
        claims = {
            "sub": str(employee.id),
            "employee_id": str(employee.id),
            # Creation time doubles as an implicit rotation version
            "token_version": int(self.clock().timestamp() * 1000),
        }
        return self._encode(claims, TokenType.refresh, self.refresh_ttl)

    def issue_token_pair(self, employee: Employee) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(employee),
            refresh_token=self.create_refresh_token(employee),
            token_type="Bearer",
            expires_in=self.access_expires_in,
        )

    def _decode(self, token: str, verify_exp: bool = True) -> Result[dict]:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_exp": verify_exp},
            )
        except ExpiredSignatureError:
            return Return.err(Error(TOKEN_EXPIRED, "Token has expired"))
        except JWTError:
            return Return.err(Error(TOKEN_MALFORMED, "Invalid or malformed token"))

        if not claims.get("jti") or not claims.get("employee_id"):
            return Return.err(Error(TOKEN_MALFORMED, "Invalid or malformed token"))
        return Return.ok(claims)

    async def _verify(self, token: str, expected_type: TokenType) -> Result[dict]:
        result = self._decode(token)
        if result.is_err():
            return result

        claims = result.value
        if claims.get("type") != expected_type.value:
            return Return.err(
                Error(TOKEN_WRONG_TYPE, f"Expected a {expected_type.value} token")
            )

        if await self.revocation_store.contains(claims["jti"]):
            return Return.err(Error(TOKEN_REVOKED, "Token has been revoked"))

        return Return.ok(claims)

    async def verify_access(self, token: str) -> Result[dict]:
        return await self._verify(token, TokenType.access)

    async def verify_refresh(self, token: str) -> Result[dict]:
        return await self._verify(token, TokenType.refresh)

    async def refresh(self, refresh_token: str, employee: Employee) -> Result[AccessToken]:
        """
        Mint a new access token from a refresh token, reflecting the
        employee's current state.
        """
        result = await self.verify_refresh(refresh_token)
        if result.is_err():
            return result

        if result.value["employee_id"] != str(employee.id):
            return Return.err(Error(TOKEN_MISMATCH, "Token does not belong to this employee"))

        return Return.ok(
            AccessToken(
                access_token=self.create_access_token(employee),
                token_type="Bearer",
                expires_in=self.access_expires_in,
            )
        )

    async def revoke(self, token: str, reason: str = "logout") -> bool:
        """
        Add the token's jti to the revocation set until the token expires.

        Returns False (and records nothing) for tokens that are forged,
        malformed or already expired.
        """
        result = self._decode(token, verify_exp=False)
        if result.is_err():
            return False

        claims = result.value
        remaining = self._remaining_seconds(claims)
        if remaining <= 0:
            return False

        await self.revocation_store.add(claims["jti"], remaining, reason)
        logger.info(f"Revoked {claims.get('type')} token {claims['jti'][:8]} ({reason})")
        return True

    async def is_revoked(self, token: str) -> bool:
        result = self._decode(token, verify_exp=False)
        if result.is_err():
            return False
        return await self.revocation_store.contains(result.value["jti"])

    def _remaining_seconds(self, claims: dict) -> int:
        exp: Optional[int] = claims.get("exp")
        if exp is None:
            return 0
        return int(exp - self.clock().timestamp())
