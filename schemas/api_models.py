"""
Pydantic response schemas for the API
This is the single source of truth for the JSON the routes return
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from models import User


# ============================================================================
# BASE MODELS
# ============================================================================


class BaseResponse(BaseModel):
    """Base response with common fields"""

    success: bool = True
    message: Optional[str] = None


class ErrorDetail(BaseModel):
    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[Union[str, List[ErrorDetail]]] = None
    status_code: int
    request_id: Optional[str] = None
    correlation_id: Optional[str] = None


# ============================================================================
# USER / AUTH MODELS
# ============================================================================


class UserInfo(BaseModel):
    """Public view of an account - never includes the password hash"""

    id: int
    email: str
    username: str
    role: str
    isActive: bool
    lastLogin: Optional[datetime] = None
    createdAt: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            role=user.role.value,
            isActive=user.is_active,
            lastLogin=user.last_login,
            createdAt=user.created_at,
        )


class AuthData(BaseModel):
    user: UserInfo
    accessToken: str


class AuthResponse(BaseResponse):
    data: AuthData


class RefreshData(BaseModel):
    newAccessToken: str


class RefreshResponse(BaseResponse):
    data: RefreshData


class CurrentUserData(BaseModel):
    user: UserInfo


class CurrentUserResponse(BaseResponse):
    data: CurrentUserData


class RevokedData(BaseModel):
    revoked: int


class RevokedResponse(BaseResponse):
    data: RevokedData


# ============================================================================
# MODULE MODELS
# ============================================================================


class ThemeResponse(BaseModel):
    title: str
    context: Optional[str] = None
    mediaUrl: Optional[str] = None
    mediaType: Optional[str] = None
    question: Optional[str] = None


class ModuleConceptItem(BaseModel):
    id: int
    title: str
    completed: bool


class ModuleOverviewItem(BaseModel):
    id: int
    title: str
    theme: Optional[ThemeResponse] = None
    progress: int
    concepts: List[ModuleConceptItem]


class ModulesOverviewResponse(BaseModel):
    modules: List[ModuleOverviewItem]


class ReflectionResponse(BaseModel):
    id: int
    type: str
    prompt: Optional[str] = None
    moduleSummary: Optional[str] = None
    moduleSummaryMediaUrl: Optional[str] = None
    learningAdvice: Optional[str] = None


# ============================================================================
# CONCEPT MODELS
# ============================================================================


class TutorialExample(BaseModel):
    story: Optional[str] = None
    mediaUrl: Optional[str] = None


class TutorialBody(BaseModel):
    goodExample: TutorialExample
    badExample: TutorialExample


class ConceptTutorialResponse(BaseModel):
    title: str
    definition: Optional[str] = None
    whyItWorks: Optional[str] = None
    tutorial: TutorialBody


class QuizQuestion(BaseModel):
    id: int
    orderIndex: int
    question: str
    questionType: str
    mediaUrl: Optional[str] = None
    options: List[str]
    correctOptionIndex: List[int]
    explanation: Optional[str] = None


class ConceptQuizzesResponse(BaseModel):
    questions: List[QuizQuestion]


class ConceptSummaryResponse(BaseModel):
    summaryContent: Optional[str] = None
    nextConceptIntro: Optional[str] = None


class QuizAnswerResponse(BaseModel):
    userAnswerIndices: List[int]
    correctOptionIndices: List[int]
    score: float


class ProgressResponse(BaseModel):
    conceptId: int
    userId: int
    completed: bool
    timeSpent: int
    completedAt: Optional[datetime] = None
