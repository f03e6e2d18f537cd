"""
Integration Tests for concept progress upserts
"""

import pytest
from sqlalchemy import func, select

from models import UserConceptProgress
from utils.error_handling import ConceptNotFoundError, MissingUserIdError, UnsupportedDialectError
from utils.progress import dialect_insert, save_progress


def progress_rows(test_db):
    return test_db.execute(select(func.count()).select_from(UserConceptProgress)).scalar_one()


class TestSaveProgress:
    def test_first_save_creates_row(self, test_db, student, course_content):
        progress = save_progress(test_db, course_content["concept"].id, student.id, True, 120)

        assert progress.completed is True
        assert progress.time_spent == 120
        assert progress.completed_at is not None

    def test_repeat_save_updates_same_row(self, test_db, student, course_content):
        concept_id = course_content["concept"].id
        save_progress(test_db, concept_id, student.id, False, 30)
        progress = save_progress(test_db, concept_id, student.id, True, 90)

        assert progress_rows(test_db) == 1
        assert progress.completed is True
        assert progress.time_spent == 90

    def test_time_spent_kept_when_omitted(self, test_db, student, course_content):
        concept_id = course_content["concept"].id
        save_progress(test_db, concept_id, student.id, False, 45)
        progress = save_progress(test_db, concept_id, student.id, True)

        assert progress.time_spent == 45

    def test_uncompleting_clears_completed_at(self, test_db, student, course_content):
        concept_id = course_content["concept"].id
        save_progress(test_db, concept_id, student.id, True, 10)
        progress = save_progress(test_db, concept_id, student.id, False, 10)

        assert progress.completed is False
        assert progress.completed_at is None

    def test_users_are_tracked_separately(self, test_db, student, other_student, course_content):
        concept_id = course_content["concept"].id
        save_progress(test_db, concept_id, student.id, True)
        save_progress(test_db, concept_id, other_student.id, False)

        assert progress_rows(test_db) == 2

    def test_missing_user_id(self, test_db, course_content):
        with pytest.raises(MissingUserIdError):
            save_progress(test_db, course_content["concept"].id, None, True)

    def test_unknown_concept(self, test_db, student):
        with pytest.raises(ConceptNotFoundError):
            save_progress(test_db, 999999, student.id, True)


class TestDialectInsert:
    def test_supported_dialects(self):
        assert dialect_insert("sqlite") is not dialect_insert("postgresql")

    def test_unsupported_dialect_is_a_clear_error(self):
        with pytest.raises(UnsupportedDialectError, match="mysql"):
            dialect_insert("mysql")
