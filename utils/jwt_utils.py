"""JWT utilities for access and refresh tokens"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from config import settings


class TokenError(Exception):
    """Base class for token decode failures"""


class TokenExpiredError(TokenError):
    pass


class InvalidSignatureError(TokenError):
    pass


@dataclass
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime  # naive UTC, matches RefreshToken.expires_at


class TokenService:
    """Signs and verifies the two token kinds the API hands out"""

    def __init__(
        self,
        access_secret: str = settings.JWT_ACCESS_SECRET,
        refresh_secret: str = settings.JWT_REFRESH_SECRET,
        access_ttl: timedelta = timedelta(minutes=settings.JWT_ACCESS_EXPIRY_MINUTES),
        refresh_ttl: timedelta = timedelta(days=settings.JWT_REFRESH_EXPIRY_DAYS),
    ):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = "HS256"

    def sign(self, payload: Dict[str, Any], secret: str, ttl: timedelta) -> str:
        """
        Sign a payload, stamping iat and exp

        Args:
            payload: Claims to encode (not encrypted, only signed)
            secret: HMAC secret
            ttl: Lifetime from now

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        claims = {**payload, "iat": now, "exp": now + ttl}
        return jwt.encode(claims, secret, algorithm=self.algorithm)

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """
        Verify and decode a token

        Raises:
            TokenExpiredError: exp is in the past
            InvalidSignatureError: the token is malformed or signed with another key
        """
        try:
            return jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise InvalidSignatureError(str(e)) from e

    def create_access_token(self, user) -> str:
        payload = {
            "userId": user.id,
            "email": user.email,
            "username": user.username,
            "role": user.role.value,
        }
        return self.sign(payload, self.access_secret, self.access_ttl)

    def create_refresh_token(self, user_id: int) -> IssuedToken:
        # jti keeps tokens unique so one user can hold several sessions
        jti = str(uuid.uuid4())
        token = self.sign({"userId": user_id, "jti": jti}, self.refresh_secret, self.refresh_ttl)
        expires_at = datetime.now(timezone.utc).replace(tzinfo=None) + self.refresh_ttl
        return IssuedToken(token=token, jti=jti, expires_at=expires_at)

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret)


# Global instance
token_service = TokenService()
