"""
Centralized error handling utilities for consistent error responses

Services raise the typed errors below; app.py turns them into the JSON error
envelope using the status_code each class carries.
"""

from typing import Any, Optional

from fastapi import status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from utils.structured_logging import get_logger, LogCategory

logger = get_logger("errors")


class AppError(Exception):
    """Base class for all business-rule failures"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred. Please try again later."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Data integrity constraint violated. This operation conflicts with existing data."


# Registration


class DuplicateEmailError(ConflictError):
    default_message = "Email already registered"


class DuplicateUsernameError(ConflictError):
    default_message = "Username already registered"


# Authentication


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid email/username or password"


class AccountDeactivatedError(AuthenticationError):
    default_message = "Account is deactivated"


class InvalidOrExpiredTokenError(AuthenticationError):
    default_message = "Invalid or expired token"


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid token"


# Lookups


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class LearningModuleNotFoundError(NotFoundError):
    default_message = "Module not found"


class ThemeNotFoundError(NotFoundError):
    default_message = "Theme not found"


class ConceptNotFoundError(NotFoundError):
    default_message = "Concept not found"


class TutorialNotFoundError(NotFoundError):
    default_message = "Tutorial not found"


class SummaryNotFoundError(NotFoundError):
    default_message = "Summary not found"


class QuizNotFoundError(NotFoundError):
    default_message = "Quiz not found"


class ReflectionNotFoundError(NotFoundError):
    default_message = "Reflection not found"


# Submissions


class EmptyAnswerError(ValidationError):
    default_message = "At least one answer index is required"


class UnsupportedQuizTypeError(ValidationError):
    default_message = "Unsupported quiz type"


class MissingUserIdError(ValidationError):
    default_message = "User ID is required"


class UnsupportedDialectError(AppError):
    default_message = "Progress upsert is not supported on this database"

    def __init__(self, dialect_name: str):
        super().__init__(f"Progress upsert is not supported on the {dialect_name} dialect")


def handle_database_error(db: Session, e: Exception, operation: str = "database operation") -> None:
    """
    Roll back and re-raise a store failure as a typed error

    Args:
        db: Session to roll back
        e: The exception that occurred
        operation: Description of the operation that failed
    """
    db.rollback()
    if isinstance(e, IntegrityError):
        logger.warning(f"Database integrity error during {operation}", category=LogCategory.DATABASE)
        raise ConflictError() from e
    if isinstance(e, SQLAlchemyError):
        logger.error(f"Database error during {operation}", category=LogCategory.DATABASE, exception=e)
        raise AppError("Database operation failed. Please try again later.") from e
    raise e


def validate_resource_exists(resource: Any, error_cls: type, resource_id: Any) -> Any:
    """Return the resource, or raise error_cls if it is None"""
    if resource is None:
        logger.warning(f"{error_cls.default_message}: {resource_id}", category=LogCategory.BUSINESS)
        raise error_cls()
    return resource
