import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.utcnow()


class UserRole(enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class QuestionType(str, enum.Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"


class ResponseType(str, enum.Enum):
    QUIZ = "quiz"
    REFLECTION = "reflection"


# =============================================================================
# ACCOUNTS
# =============================================================================


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Stored lower-cased, which makes the unique constraint case-insensitive
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.STUDENT, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(Text, unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="refresh_tokens")


# =============================================================================
# COURSE CONTENT (read-only reference data)
# =============================================================================


class Module(Base):
    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)

    theme = relationship("Theme", back_populates="module", uselist=False, cascade="all, delete-orphan")
    concepts = relationship(
        "Concept", back_populates="module", order_by="Concept.order_index", cascade="all, delete-orphan"
    )
    reflections = relationship(
        "Reflection", back_populates="module", order_by="Reflection.order_index", cascade="all, delete-orphan"
    )


class Theme(Base):
    __tablename__ = "themes"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), unique=True, nullable=False)
    title = Column(String, nullable=False)
    context = Column(Text, nullable=True)
    media_url = Column(String, nullable=True)
    media_type = Column(String(20), nullable=True)
    question = Column(Text, nullable=True)

    module = relationship("Module", back_populates="theme")


class Concept(Base):
    __tablename__ = "concepts"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)
    definition = Column(Text, nullable=True)
    why_it_works = Column(Text, nullable=True)

    module = relationship("Module", back_populates="concepts")
    tutorial = relationship("Tutorial", back_populates="concept", uselist=False, cascade="all, delete-orphan")
    summary = relationship("Summary", back_populates="concept", uselist=False, cascade="all, delete-orphan")
    quizzes = relationship(
        "Quiz", back_populates="concept", order_by="Quiz.order_index", cascade="all, delete-orphan"
    )


class Tutorial(Base):
    __tablename__ = "tutorials"

    id = Column(Integer, primary_key=True, index=True)
    concept_id = Column(Integer, ForeignKey("concepts.id", ondelete="CASCADE"), unique=True, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    good_story = Column(Text, nullable=True)
    good_media_url = Column(String, nullable=True)
    bad_story = Column(Text, nullable=True)
    bad_media_url = Column(String, nullable=True)

    concept = relationship("Concept", back_populates="tutorial")


class Summary(Base):
    __tablename__ = "summaries"

    id = Column(Integer, primary_key=True, index=True)
    concept_id = Column(Integer, ForeignKey("concepts.id", ondelete="CASCADE"), unique=True, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    summary_content = Column(Text, nullable=True)
    next_chapter_intro = Column(Text, nullable=True)

    concept = relationship("Concept", back_populates="summary")


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    concept_id = Column(Integer, ForeignKey("concepts.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)
    question = Column(Text, nullable=False)
    question_type = Column(String(30), nullable=False, default=QuestionType.SINGLE_CHOICE.value)
    options = Column(JSON, nullable=False, default=list)
    # One index for single_choice, one or more for multiple_choice
    correct_option_index = Column(JSON, nullable=False, default=list)
    explanation = Column(Text, nullable=True)
    media_url = Column(String, nullable=True)

    concept = relationship("Concept", back_populates="quizzes")


class Reflection(Base):
    __tablename__ = "reflections"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)
    module_summary = Column(Text, nullable=True)
    module_summary_media_url = Column(String, nullable=True)
    learning_advice = Column(Text, nullable=True)

    module = relationship("Module", back_populates="reflections")


# =============================================================================
# LEARNER ACTIVITY
# =============================================================================


class UserResponse(Base):
    """One row per submission; rows are never updated"""

    __tablename__ = "user_responses"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=True, index=True)
    reflection_id = Column(Integer, ForeignKey("reflections.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    response_type = Column(String(20), nullable=False)
    answer = Column(JSON, nullable=False)
    is_correct = Column(Boolean, nullable=True)
    time_spent = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(quiz_id IS NULL) <> (reflection_id IS NULL)",
            name="ck_user_responses_single_target",
        ),
    )


class UserConceptProgress(Base):
    __tablename__ = "user_concept_progress"

    id = Column(Integer, primary_key=True, index=True)
    concept_id = Column(Integer, ForeignKey("concepts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)
    time_spent = Column(Integer, default=0, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Upserts key on this pair
    __table_args__ = (UniqueConstraint("concept_id", "user_id", name="uq_user_concept_progress"),)
