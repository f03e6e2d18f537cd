"""
Persistence for accounts and refresh tokens

Plain functions over a Session. They flush but leave commit/rollback to the
caller, so a service can group several writes into one transaction.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from models import RefreshToken, User, UserRole, utcnow


# =============================================================================
# USERS
# =============================================================================


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(func.lower(User.email) == email.strip().lower())).scalar_one_or_none()


def find_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def find_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def create_user(db: Session, email: str, username: str, password_hash: str, role: UserRole = UserRole.STUDENT) -> User:
    """Insert a user. Unique violations surface as IntegrityError on flush."""
    user = User(
        email=email.strip().lower(),
        username=username,
        password_hash=password_hash,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user


def touch_last_login(db: Session, user: User) -> None:
    user.last_login = utcnow()
    db.flush()


def delete_user(db: Session, user_id: int) -> bool:
    """Hard delete, only used to clean up test accounts"""
    result = db.execute(delete(User).where(User.id == user_id))
    return result.rowcount > 0


# =============================================================================
# REFRESH TOKENS
# =============================================================================


def create_refresh_token(db: Session, user_id: int, token: str, expires_at: datetime) -> RefreshToken:
    record = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
    db.add(record)
    db.flush()
    return record


def find_refresh_token(db: Session, token: str) -> Optional[RefreshToken]:
    """Any stored row for this token string, live or not"""
    return db.execute(select(RefreshToken).where(RefreshToken.token == token)).scalar_one_or_none()


def find_live_refresh_token(db: Session, token: str) -> Optional[RefreshToken]:
    """The stored row for this token, or None if it is missing or past expires_at"""
    record = find_refresh_token(db, token)
    if record is None or record.expires_at <= utcnow():
        return None
    return record


def delete_refresh_token(db: Session, token: str) -> bool:
    result = db.execute(delete(RefreshToken).where(RefreshToken.token == token))
    return result.rowcount > 0


def delete_user_refresh_tokens(db: Session, user_id: int) -> int:
    result = db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    return result.rowcount


def delete_expired_refresh_tokens(db: Session) -> int:
    result = db.execute(delete(RefreshToken).where(RefreshToken.expires_at < utcnow()))
    return result.rowcount
