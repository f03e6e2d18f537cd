import pytest
import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment variables before the app reads its settings
os.environ["NODE_ENV"] = "test"
os.environ["SQLALCHEMY_TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["JWT_ACCESS_EXPIRY_MINUTES"] = "15"
os.environ["JWT_REFRESH_EXPIRY_DAYS"] = "7"
os.environ["BCRYPT_SALT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app import app
from db import engine, get_db
from models import (
    Base,
    Concept,
    Module,
    QuestionType,
    Quiz,
    Reflection,
    Summary,
    Theme,
    Tutorial,
    User,
    UserRole,
)
from utils.jwt_utils import token_service
from utils.passwords import password_hasher

TEST_PASSWORD = "password123"


@pytest.fixture(scope="session")
def test_engine():
    """Test database engine - the SQLite engine db.py builds when NODE_ENV=test"""
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    # Cleanup
    try:
        os.remove("./test.db")
    except FileNotFoundError:
        pass


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create test database session"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    # Create fresh session for each test
    session = TestingSessionLocal()

    yield session

    # Cleanup after each test
    session.close()
    # Clear all tables
    with test_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture(scope="function")
def client(test_db):
    """Create test client with test database"""

    def override_get_db():
        # Shared with the test body; test_db closes it at teardown
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clean up dependency override
    app.dependency_overrides.clear()


# =============================================================================
# ACCOUNTS
# =============================================================================


def make_user(test_db, email, username, role=UserRole.STUDENT, is_active=True):
    user = User(
        email=email,
        username=username,
        password_hash=password_hasher.hash(TEST_PASSWORD),
        role=role,
        is_active=is_active,
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


def auth_headers_for(user):
    return {"Authorization": f"Bearer {token_service.create_access_token(user)}"}


@pytest.fixture
def user_factory(test_db):
    def factory(email, username, **kwargs):
        return make_user(test_db, email, username, **kwargs)

    return factory


@pytest.fixture
def student(test_db):
    return make_user(test_db, "student@example.com", "student_one")


@pytest.fixture
def other_student(test_db):
    return make_user(test_db, "other@example.com", "student_two")


@pytest.fixture
def admin(test_db):
    return make_user(test_db, "admin@example.com", "admin_user", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(student):
    return auth_headers_for(student)


@pytest.fixture
def admin_headers(admin):
    return auth_headers_for(admin)


@pytest.fixture
def headers_for():
    return auth_headers_for


# =============================================================================
# COURSE CONTENT
# =============================================================================


@pytest.fixture
def course_content(test_db):
    """One module with a theme, two concepts, quizzes and a reflection"""
    module = Module(title="Persuasion Basics", description="How arguments land", order_index=1)
    test_db.add(module)
    test_db.flush()

    theme = Theme(
        module_id=module.id,
        title="The Marketplace",
        context="You are at a busy market.",
        media_url="https://cdn.example.com/market.png",
        media_type="image",
        question="What made you trust the seller?",
    )
    first = Concept(
        module_id=module.id,
        order_index=1,
        title="Social Proof",
        definition="People follow what others do.",
        why_it_works="Uncertainty makes crowds look informed.",
    )
    second = Concept(module_id=module.id, order_index=2, title="Scarcity", definition="Rare things feel valuable.")
    test_db.add_all([theme, first, second])
    test_db.flush()

    tutorial = Tutorial(
        concept_id=first.id,
        good_story="The busy stall sold out by noon.",
        good_media_url="https://cdn.example.com/good.png",
        bad_story="The empty stall stayed empty.",
        bad_media_url=None,
    )
    summary = Summary(
        concept_id=first.id,
        summary_content="Crowds signal quality.",
        next_chapter_intro="Next: why rarity matters.",
    )
    single = Quiz(
        concept_id=first.id,
        order_index=1,
        question="Which stall looks most trustworthy?",
        question_type=QuestionType.SINGLE_CHOICE.value,
        options=["Empty stall", "Stall with a sign", "Stall with a queue"],
        correct_option_index=[2],
        explanation="A queue is social proof.",
    )
    multiple = Quiz(
        concept_id=first.id,
        order_index=2,
        question="Which of these are social proof?",
        question_type=QuestionType.MULTIPLE_CHOICE.value,
        options=["Reviews", "Discount", "Bestseller badge", "Free shipping"],
        correct_option_index=[0, 2],
    )
    reflection = Reflection(
        module_id=module.id,
        order_index=1,
        module_summary="Trust follows the crowd.",
        module_summary_media_url="https://cdn.example.com/summary.mp4",
        learning_advice="Notice the signals around you this week.",
    )
    test_db.add_all([tutorial, summary, single, multiple, reflection])
    test_db.commit()

    return {
        "module": module,
        "theme": theme,
        "concept": first,
        "bare_concept": second,
        "single_quiz": single,
        "multiple_quiz": multiple,
        "reflection": reflection,
    }
