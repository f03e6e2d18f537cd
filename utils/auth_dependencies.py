"""
FastAPI Authentication Dependencies
Provides clean dependency injection for authentication across routes
"""

from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from db import get_db
from models import User, UserRole
from utils.auth_middleware import get_auth_context, log_authentication_attempt
from utils.auth_service import AuthService
from utils.error_handling import AuthorizationError, UserNotFoundError
from utils.structured_logging import get_logger

logger = get_logger("auth.dependencies")


# =============================================================================
# COMPOSITION ROOT
# =============================================================================


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


# =============================================================================
# CORE AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_current_claims(request: Request) -> Dict[str, Any]:
    """
    Verified access-token claims - raises 401 if missing, malformed or expired
    Expired tokens also get 401 so the client knows to refresh
    """
    auth_context = get_auth_context(request)

    if not auth_context.claims:
        log_authentication_attempt(request, False, error=auth_context.error or "No token provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token" if auth_context.error else "No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    log_authentication_attempt(request, True, user_id=auth_context.user_id)
    return auth_context.claims


def get_current_user(
    claims: Dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """The account behind the access token - 404 if it has since been removed"""
    user = auth_service.get_user_by_id(claims["userId"])
    if user is None:
        raise UserNotFoundError()
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# =============================================================================
# ROLE-BASED AUTHENTICATION DEPENDENCIES
# =============================================================================


def require_roles(*roles: UserRole):
    """Factory for dependencies that only admit the given roles"""
    allowed = {role.value for role in roles}

    async def role_dependency(claims: Dict[str, Any] = Depends(get_current_claims)) -> Dict[str, Any]:
        if claims.get("role") not in allowed:
            logger.security(
                "Role check failed",
                event_type="authorization_denied",
                user_id=claims.get("userId"),
                details={"role": claims.get("role"), "required": sorted(allowed)},
            )
            raise AuthorizationError("Insufficient permissions for this role")
        return claims

    return role_dependency


def ensure_acting_for_self(claims: Dict[str, Any], user_id: int) -> None:
    """Learners may only write their own records; admins may act for anyone"""
    if claims.get("userId") != user_id and claims.get("role") != UserRole.ADMIN.value:
        raise AuthorizationError("Cannot submit on behalf of another user")
