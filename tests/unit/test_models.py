import pytest
from datetime import datetime, timedelta
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from models import RefreshToken, ResponseType, User, UserConceptProgress, UserResponse, UserRole
from utils import credential_store


class TestUserModel:
    """Test User model operations"""

    def test_create_user_defaults(self, test_db):
        user = User(email="new@example.com", username="new_user", password_hash="x")
        test_db.add(user)
        test_db.commit()

        assert user.id is not None
        assert user.role == UserRole.STUDENT
        assert user.is_active is True
        assert user.last_login is None
        assert user.created_at is not None

    def test_email_must_be_unique(self, test_db):
        test_db.add(User(email="same@example.com", username="first", password_hash="x"))
        test_db.commit()

        test_db.add(User(email="same@example.com", username="second", password_hash="x"))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_username_must_be_unique(self, test_db):
        test_db.add(User(email="one@example.com", username="taken", password_hash="x"))
        test_db.commit()

        test_db.add(User(email="two@example.com", username="taken", password_hash="x"))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_deleting_user_removes_refresh_tokens(self, test_db, student):
        credential_store.create_refresh_token(
            test_db, student.id, "token-value", datetime.utcnow() + timedelta(days=1)
        )
        test_db.commit()
        user_id = student.id

        assert credential_store.delete_user(test_db, user_id) is True
        test_db.commit()

        remaining = test_db.execute(select(RefreshToken).where(RefreshToken.user_id == user_id)).scalars().all()
        assert remaining == []


class TestUserResponseModel:
    """A response points at exactly one of quiz or reflection"""

    def test_quiz_response(self, test_db, student, course_content):
        response = UserResponse(
            quiz_id=course_content["single_quiz"].id,
            user_id=student.id,
            response_type=ResponseType.QUIZ.value,
            answer={"userAnswerIndices": [2], "correctOptionIndices": [2], "score": 1},
            is_correct=True,
        )
        test_db.add(response)
        test_db.commit()
        assert response.id is not None

    def test_response_without_target_is_rejected(self, test_db, student):
        test_db.add(UserResponse(user_id=student.id, response_type="quiz", answer={}))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_response_with_both_targets_is_rejected(self, test_db, student, course_content):
        test_db.add(
            UserResponse(
                quiz_id=course_content["single_quiz"].id,
                reflection_id=course_content["reflection"].id,
                user_id=student.id,
                response_type="quiz",
                answer={},
            )
        )
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()


class TestUserConceptProgressModel:
    def test_one_row_per_user_and_concept(self, test_db, student, course_content):
        concept_id = course_content["concept"].id
        test_db.add(UserConceptProgress(concept_id=concept_id, user_id=student.id))
        test_db.commit()

        test_db.add(UserConceptProgress(concept_id=concept_id, user_id=student.id, completed=True))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()
