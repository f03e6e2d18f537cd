import re
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


class RegisterRequest(BaseModel):
    """Schema for user registration"""

    email: EmailStr = Field(..., max_length=255, description="Email address")
    username: str = Field(..., min_length=3, max_length=20, description="Username")
    password: str = Field(..., min_length=6, max_length=72, description="Password")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class LoginRequest(BaseModel):
    emailOrUsername: str = Field(..., min_length=1, max_length=255, description="Email or username")
    password: str = Field(..., min_length=1, max_length=72, description="Password")

    @field_validator("emailOrUsername")
    @classmethod
    def validate_identifier(cls, v):
        if not v.strip():
            raise ValueError("Email or username is required")
        return v.strip()


class RefreshRequest(BaseModel):
    """Body fallback for clients that cannot send the refresh cookie"""

    refreshToken: Optional[str] = Field(None, min_length=1)


class QuizAnswerRequest(BaseModel):
    responseType: str = Field(..., description="Must be 'quiz'")
    userId: int = Field(..., gt=0, description="Learner submitting the answer")
    userAnswerIndices: List[int] = Field(..., description="Selected option indices")
    timeSpent: Optional[int] = Field(None, ge=0, description="Seconds spent on the question")

    @field_validator("userAnswerIndices")
    @classmethod
    def validate_indices(cls, v):
        if any(index < 0 for index in v):
            raise ValueError("Answer indices must be non-negative")
        return v


class ProgressUpdateRequest(BaseModel):
    userId: Optional[int] = Field(None, gt=0)
    isCompleted: bool
    timeSpent: Optional[int] = Field(None, ge=0, description="Seconds spent on the concept")


class ReflectionAnswerRequest(BaseModel):
    reflectionId: int = Field(..., gt=0)
    userId: int = Field(..., gt=0)
    answer: str = Field(..., min_length=1, max_length=10000)
    timeSpent: Optional[int] = Field(None, ge=0)
