"""
OpenAPI Documentation Metadata
Tags, security schemes and shared error responses for the generated docs
"""

from .api_models import ErrorResponse


class APIExamples:
    """Example payloads shown in the docs"""

    VALIDATION_ERROR_RESPONSE = {
        "success": False,
        "error": "Validation Error",
        "detail": [{"field": "body.email", "message": "value is not a valid email address", "code": "value_error"}],
        "status_code": 400,
        "request_id": "req_1a2b3c4d",
        "correlation_id": "corr_0123456789abcdef",
    }

    UNAUTHORIZED_RESPONSE = {
        "success": False,
        "error": "Invalid or expired token",
        "detail": "Invalid or expired token",
        "status_code": 401,
        "request_id": "req_1a2b3c4d",
        "correlation_id": "corr_0123456789abcdef",
    }

    FORBIDDEN_RESPONSE = {
        "success": False,
        "error": "Cannot submit on behalf of another user",
        "detail": "Cannot submit on behalf of another user",
        "status_code": 403,
    }

    NOT_FOUND_RESPONSE = {
        "success": False,
        "error": "Concept 9999 not found",
        "detail": "Concept 9999 not found",
        "status_code": 404,
    }

    SERVER_ERROR_RESPONSE = {
        "success": False,
        "error": "Internal Server Error",
        "detail": "An unexpected error occurred. Please try again later.",
        "status_code": 500,
    }


class OpenAPITags:
    """Centralized tag definitions for OpenAPI documentation"""

    AUTH = {
        "name": "Authentication",
        "description": """
        **Accounts and sessions**

        - Register and log in with email or username
        - Short-lived access tokens (`Authorization: Bearer <token>`)
        - Long-lived refresh tokens in an httpOnly `refreshToken` cookie
        - Server-side revocation on logout
        """,
    }

    MODULES = {
        "name": "Modules",
        "description": """
        **Learning modules**

        Module overview with per-learner progress, module themes and end-of-module reflections.
        """,
    }

    CONCEPTS = {
        "name": "Concepts",
        "description": """
        **Concept content and practice**

        Tutorials, quizzes and summaries per concept, quiz answer scoring and progress tracking.
        """,
    }

    SYSTEM = {
        "name": "System",
        "description": "Service information and health checks.",
    }


class OpenAPIMetadata:
    """OpenAPI metadata for the FastAPI instance"""

    TITLE = "Concept Learning API"

    DESCRIPTION = """
    ## Concept Learning API

    Serves course modules, concepts, tutorials, quizzes and reflections, and tracks learner progress.

    ### Authentication
    1. `POST /api/auth/register` or `POST /api/auth/login` returns an access token and sets a refresh cookie
    2. Send the access token as `Authorization: Bearer <token>`
    3. When it expires, `POST /api/auth/refresh` mints a new one from the cookie

    ### Errors
    Every error uses the same envelope: `success`, `error`, `detail`, `status_code`, `request_id`, `correlation_id`.
    """

    VERSION = "1.0.0"

    CONTACT = {"name": "Concept Learning API Support"}

    LICENSE_INFO = {"name": "MIT", "url": "https://opensource.org/licenses/MIT"}


def _error_response(description: str, example: dict) -> dict:
    return {
        "description": description,
        "model": ErrorResponse,
        "content": {"application/json": {"example": example}},
    }


COMMON_RESPONSES = {
    400: _error_response("Bad Request - Invalid input data", APIExamples.VALIDATION_ERROR_RESPONSE),
    401: _error_response("Unauthorized - Authentication required", APIExamples.UNAUTHORIZED_RESPONSE),
    403: _error_response("Forbidden - Insufficient permissions", APIExamples.FORBIDDEN_RESPONSE),
    404: _error_response("Not Found - Resource does not exist", APIExamples.NOT_FOUND_RESPONSE),
    500: _error_response("Internal Server Error", APIExamples.SERVER_ERROR_RESPONSE),
}
