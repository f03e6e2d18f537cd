"""
Centralized Authentication Middleware and Utilities
Resolves bearer access tokens once per request; dependencies decide whether auth is required
"""

import time
import uuid
from typing import Any, Dict, Optional, Union

from fastapi import Request

from utils.jwt_utils import TokenError, TokenExpiredError, token_service
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("auth.middleware")


class BearerHeaderError(Exception):
    """Raised when the Authorization header cannot be parsed"""

    pass


class AuthContext:
    """Container for authentication context within a request"""

    def __init__(self):
        self.claims: Optional[Dict[str, Any]] = None
        self.auth_method: Optional[str] = None
        self.error: Optional[str] = None
        self.request_id: str = str(uuid.uuid4())
        self.start_time: float = time.time()

    @property
    def user_id(self) -> Optional[int]:
        return self.claims.get("userId") if self.claims else None

    def set_claims(self, claims: Dict[str, Any]):
        self.claims = claims
        self.auth_method = "bearer"


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Extract bearer token from Authorization header"""
    if not authorization:
        raise BearerHeaderError("No token provided")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise BearerHeaderError("Invalid token format. Use: Bearer <token>")

    return token.strip()


async def add_auth_context_to_request(request: Request, call_next):
    """
    Middleware to add authentication context to all requests
    Does not enforce authentication - just makes it available
    """
    auth_context = AuthContext()
    request.state.auth = auth_context

    authorization = request.headers.get("Authorization")
    if authorization:
        try:
            token = extract_bearer_token(authorization)
            auth_context.set_claims(token_service.verify_access_token(token))
            request.state.user_id = auth_context.user_id
        except BearerHeaderError as e:
            auth_context.error = str(e)
        except TokenExpiredError:
            auth_context.error = "Token expired"
        except TokenError:
            auth_context.error = "Invalid token"

        if auth_context.error:
            # Don't fail here - let individual endpoints decide if auth is required
            logger.debug(
                f"Auth extraction failed: {auth_context.error}",
                category=LogCategory.AUTHENTICATION,
                request_id=auth_context.request_id,
            )

    response = await call_next(request)

    process_time = time.time() - auth_context.start_time
    response.headers["X-Process-Time"] = f"{process_time:.3f}"
    if auth_context.auth_method:
        response.headers["X-Auth-Method"] = auth_context.auth_method

    return response


def get_auth_context(request: Request) -> AuthContext:
    """Get authentication context from request state"""
    return getattr(request.state, "auth", None) or AuthContext()


def log_authentication_attempt(
    request: Request,
    success: bool,
    user_id: Optional[Union[int, str]] = None,
    error: Optional[str] = None,
):
    """Log authentication attempts for security monitoring"""
    auth_context = get_auth_context(request)
    details = {
        "auth_request_id": auth_context.request_id,
        "success": success,
        "user_agent": request.headers.get("User-Agent", "unknown"),
        "endpoint": str(request.url.path),
        "method": request.method,
    }
    if error:
        details["error"] = error

    if success:
        logger.debug("Authentication successful", category=LogCategory.AUTHENTICATION, user_id=user_id, extra=details)
    else:
        logger.warning(
            "Authentication failed",
            category=LogCategory.AUTHENTICATION,
            user_id=user_id,
            request_ip=request.client.host if request.client else None,
            extra=details,
        )
