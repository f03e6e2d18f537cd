"""
Authentication Service
Registration, login, access-token refresh and logout over the credential store
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models import User
from utils import credential_store
from utils.error_handling import (
    AccountDeactivatedError,
    ConflictError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    UserNotFoundError,
    handle_database_error,
)
from utils.jwt_utils import TokenError, TokenService, token_service
from utils.passwords import PasswordHasher, password_hasher
from utils.structured_logging import get_logger, log_authentication_event, LogCategory

logger = get_logger("auth.service")


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: str


@dataclass
class AuthResult:
    user: User
    tokens: AuthTokens


class AuthService:
    """Coordinates the credential store, password hashing and token signing"""

    def __init__(
        self,
        db: Session,
        tokens: TokenService = token_service,
        hasher: PasswordHasher = password_hasher,
    ):
        self.db = db
        self.tokens = tokens
        self.hasher = hasher

    def _issue_tokens(self, user: User) -> AuthTokens:
        """Create an access token and persist a fresh refresh token row"""
        access_token = self.tokens.create_access_token(user)
        issued = self.tokens.create_refresh_token(user.id)
        credential_store.create_refresh_token(self.db, user.id, issued.token, issued.expires_at)
        return AuthTokens(access_token=access_token, refresh_token=issued.token)

    def register(self, email: str, username: str, password: str) -> AuthResult:
        """
        Create an account and sign the user in

        The existence checks are a fast path; the unique constraints decide
        the outcome when two registrations race.
        """
        email = email.strip().lower()
        if credential_store.find_user_by_email(self.db, email):
            raise DuplicateEmailError()
        if credential_store.find_user_by_username(self.db, username):
            raise DuplicateUsernameError()

        password_hash = self.hasher.hash(password)

        try:
            user = credential_store.create_user(self.db, email, username, password_hash)
            tokens = self._issue_tokens(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise _duplicate_error_from(e) from e
        except SQLAlchemyError as e:
            handle_database_error(self.db, e, "user registration")

        self.db.refresh(user)
        log_authentication_event("register", user_id=user.id)
        return AuthResult(user=user, tokens=tokens)

    def login(self, email_or_username: str, password: str) -> AuthResult:
        """
        Authenticate by email (anything containing '@') or username

        Unknown accounts and wrong passwords raise the same error so callers
        cannot probe which accounts exist.
        """
        identifier = email_or_username.strip()
        if "@" in identifier:
            user = credential_store.find_user_by_email(self.db, identifier)
        else:
            user = credential_store.find_user_by_username(self.db, identifier)

        if user is None:
            self.hasher.burn_verify(password)
            log_authentication_event("login", success=False, details={"reason": "unknown_account"})
            raise InvalidCredentialsError()

        if not self.hasher.verify(password, user.password_hash):
            log_authentication_event("login", user_id=user.id, success=False, details={"reason": "bad_password"})
            raise InvalidCredentialsError()

        if not user.is_active:
            log_authentication_event("login", user_id=user.id, success=False, details={"reason": "deactivated"})
            raise AccountDeactivatedError()

        try:
            credential_store.touch_last_login(self.db, user)
            tokens = self._issue_tokens(user)
            self.db.commit()
        except SQLAlchemyError as e:
            handle_database_error(self.db, e, "login")

        self.db.refresh(user)
        log_authentication_event("login", user_id=user.id)
        return AuthResult(user=user, tokens=tokens)

    def refresh_access_token(self, refresh_token: str) -> str:
        """Mint a new access token. The refresh token itself is not rotated."""
        try:
            self.tokens.verify_refresh_token(refresh_token)
        except TokenError as e:
            log_authentication_event("refresh", success=False, method="refresh_token", details={"reason": str(e)})
            raise InvalidOrExpiredTokenError() from e

        # Signature alone is not enough: revoked or expired rows must fail here
        record = credential_store.find_live_refresh_token(self.db, refresh_token)
        if record is None:
            log_authentication_event("refresh", success=False, method="refresh_token", details={"reason": "not_live"})
            raise InvalidOrExpiredTokenError()

        user = credential_store.find_user_by_id(self.db, record.user_id)
        if user is None:
            raise UserNotFoundError()
        if not user.is_active:
            log_authentication_event("refresh", user_id=user.id, success=False, method="refresh_token", details={"reason": "deactivated"})
            raise AccountDeactivatedError()

        log_authentication_event("refresh", user_id=user.id, method="refresh_token")
        return self.tokens.create_access_token(user)

    def logout(self, refresh_token: str) -> None:
        record = credential_store.find_refresh_token(self.db, refresh_token)
        if record is None:
            raise InvalidTokenError()

        user_id = record.user_id
        try:
            credential_store.delete_refresh_token(self.db, refresh_token)
            self.db.commit()
        except SQLAlchemyError as e:
            handle_database_error(self.db, e, "logout")

        log_authentication_event("logout", user_id=user_id, method="refresh_token")

    def logout_all(self, user_id: int) -> int:
        """Revoke every refresh token the user holds"""
        try:
            revoked = credential_store.delete_user_refresh_tokens(self.db, user_id)
            self.db.commit()
        except SQLAlchemyError as e:
            handle_database_error(self.db, e, "logout all sessions")

        log_authentication_event("logout_all", user_id=user_id, details={"revoked": revoked})
        return revoked

    def purge_expired_tokens(self) -> int:
        try:
            removed = credential_store.delete_expired_refresh_tokens(self.db)
            self.db.commit()
        except SQLAlchemyError as e:
            handle_database_error(self.db, e, "expired token sweep")

        logger.info("Expired refresh tokens purged", category=LogCategory.SECURITY, extra={"removed": removed})
        return removed

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        try:
            return self.tokens.verify_access_token(token)
        except TokenError as e:
            raise InvalidOrExpiredTokenError() from e

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return credential_store.find_user_by_id(self.db, user_id)


_UNIQUE_USER_FIELDS = {
    "email": DuplicateEmailError,
    "username": DuplicateUsernameError,
}


def _collided_field(error: IntegrityError) -> Optional[str]:
    """
    Name the users column behind a unique violation

    psycopg2 reports the constraint name in diag; SQLite only has the message,
    which names the column as "users.<column>". The message is never searched
    loosely because PostgreSQL includes the colliding value in it.
    """
    diag = getattr(error.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        for field in _UNIQUE_USER_FIELDS:
            if constraint in (f"ix_users_{field}", f"users_{field}_key"):
                return field
        return None

    message = str(error.orig).lower()
    for field in _UNIQUE_USER_FIELDS:
        if f"users.{field}" in message:
            return field
    return None


def _duplicate_error_from(error: IntegrityError) -> ConflictError:
    """Map a unique-constraint violation to the field that collided"""
    field = _collided_field(error)
    if field is None:
        return ConflictError()
    return _UNIQUE_USER_FIELDS[field]()
