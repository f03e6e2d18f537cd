"""
Authentication Service Router
Registration, login, access-token refresh, logout and the current-user lookup
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from config import settings
from models import User, UserRole
from schemas.api_models import (
    AuthData,
    AuthResponse,
    BaseResponse,
    CurrentUserData,
    CurrentUserResponse,
    RefreshData,
    RefreshResponse,
    RevokedData,
    RevokedResponse,
    UserInfo,
)
from schemas.validation import LoginRequest, RefreshRequest, RegisterRequest
from utils.auth_dependencies import get_auth_service, get_current_claims, get_current_user, require_roles
from utils.auth_service import AuthResult, AuthService
from utils.error_handling import AppError, InvalidOrExpiredTokenError
from utils.structured_logging import get_logger, LogCategory

router = APIRouter()
logger = get_logger("routes.auth")


# Helper functions


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.JWT_REFRESH_EXPIRY_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def read_refresh_token(request: Request, body: Optional[RefreshRequest]) -> Optional[str]:
    """Cookie first, then the JSON body"""
    token = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not token and body is not None:
        token = body.refreshToken
    return token


def auth_payload(result: AuthResult, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        data=AuthData(user=UserInfo.from_user(result.user), accessToken=result.tokens.access_token),
    )


# Public endpoints


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
def register(data: RegisterRequest, response: Response, auth_service: AuthService = Depends(get_auth_service)):
    """
    Create an account and start a session

    Returns the user and an access token; the refresh token is set as an
    httpOnly cookie. Duplicate email or username returns 409.
    """
    result = auth_service.register(data.email, data.username, data.password)
    set_refresh_cookie(response, result.tokens.refresh_token)
    return auth_payload(result, "registration successful")


@router.post("/login", response_model=AuthResponse, summary="Log in with email or username")
def login(data: LoginRequest, response: Response, auth_service: AuthService = Depends(get_auth_service)):
    """
    Authenticate and start a session

    Unknown accounts and wrong passwords both return the same 401 body.
    """
    result = auth_service.login(data.emailOrUsername, data.password)
    set_refresh_cookie(response, result.tokens.refresh_token)
    return auth_payload(result, "login successful")


@router.post("/refresh", response_model=RefreshResponse, summary="Mint a new access token")
def refresh_access_token(
    request: Request,
    body: Optional[RefreshRequest] = None,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange the refresh cookie (or a `refreshToken` body field) for a new access token"""
    refresh_token = read_refresh_token(request, body)
    if not refresh_token:
        raise InvalidOrExpiredTokenError("Refresh token is required")

    new_access_token = auth_service.refresh_access_token(refresh_token)
    return RefreshResponse(message="token refreshed", data=RefreshData(newAccessToken=new_access_token))


# Authenticated endpoints


@router.post("/logout", response_model=BaseResponse, summary="Log out and revoke the refresh token")
def logout(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = None,
    claims: Dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Revoke the session's refresh token and clear the cookie

    Always reports success once the caller is authenticated: a missing or
    already revoked refresh token still ends with the cookie cleared.
    """
    refresh_token = read_refresh_token(request, body)
    if refresh_token:
        try:
            auth_service.logout(refresh_token)
        except AppError as e:
            logger.warning(
                f"Logout could not revoke refresh token: {e.message}",
                category=LogCategory.AUTHENTICATION,
                user_id=claims.get("userId"),
            )
        except Exception as e:
            logger.error(
                "Unexpected error during logout", category=LogCategory.AUTHENTICATION, exception=e,
                user_id=claims.get("userId"),
            )

    clear_refresh_cookie(response)
    return BaseResponse(message="logout successful")


@router.post("/logout-all", response_model=RevokedResponse, summary="Revoke every session of the current user")
def logout_all(
    response: Response,
    claims: Dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthService = Depends(get_auth_service),
):
    revoked = auth_service.logout_all(claims["userId"])
    clear_refresh_cookie(response)
    return RevokedResponse(message="all sessions revoked", data=RevokedData(revoked=revoked))


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def get_me(current_user: User = Depends(get_current_user)):
    return CurrentUserResponse(data=CurrentUserData(user=UserInfo.from_user(current_user)))


@router.post(
    "/tokens/purge-expired",
    response_model=RevokedResponse,
    summary="Delete expired refresh tokens (admin)",
)
def purge_expired_tokens(
    claims: Dict[str, Any] = Depends(require_roles(UserRole.ADMIN)),
    auth_service: AuthService = Depends(get_auth_service),
):
    removed = auth_service.purge_expired_tokens()
    return RevokedResponse(message="expired tokens purged", data=RevokedData(revoked=removed))
