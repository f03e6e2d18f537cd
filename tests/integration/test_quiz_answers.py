"""
Integration Tests for quiz answer storage and the content reader
"""

import pytest
from sqlalchemy import select

from models import ResponseType, UserResponse
from utils.content import (
    ConceptResource,
    get_concept_resource,
    get_module_reflection,
    get_module_theme,
    get_modules_overview,
    save_reflection_answer,
)
from utils.error_handling import (
    ConceptNotFoundError,
    EmptyAnswerError,
    LearningModuleNotFoundError,
    QuizNotFoundError,
    ReflectionNotFoundError,
    SummaryNotFoundError,
    TutorialNotFoundError,
    UnsupportedQuizTypeError,
    ValidationError,
)
from utils.progress import save_progress
from utils.quiz_scoring import save_quiz_answers


class TestSaveQuizAnswers:
    def test_single_choice_answer_is_scored_and_stored(self, test_db, student, course_content):
        quiz = course_content["single_quiz"]
        answer = save_quiz_answers(test_db, "quiz", quiz.id, student.id, [2], time_spent=12)

        assert answer == {"userAnswerIndices": [2], "correctOptionIndices": [2], "score": 1}
        stored = test_db.execute(select(UserResponse)).scalar_one()
        assert stored.quiz_id == quiz.id
        assert stored.reflection_id is None
        assert stored.is_correct is True
        assert stored.time_spent == 12
        assert stored.answer == answer

    def test_multiple_choice_partial_credit(self, test_db, student, course_content):
        answer = save_quiz_answers(test_db, "quiz", course_content["multiple_quiz"].id, student.id, [0])

        assert answer["score"] == pytest.approx(0.5)
        assert test_db.execute(select(UserResponse)).scalar_one().is_correct is False

    def test_every_attempt_is_kept(self, test_db, student, course_content):
        quiz_id = course_content["single_quiz"].id
        save_quiz_answers(test_db, "quiz", quiz_id, student.id, [0])
        save_quiz_answers(test_db, "quiz", quiz_id, student.id, [2])

        assert len(test_db.execute(select(UserResponse)).scalars().all()) == 2

    def test_empty_answer(self, test_db, student, course_content):
        with pytest.raises(EmptyAnswerError):
            save_quiz_answers(test_db, "quiz", course_content["single_quiz"].id, student.id, [])

    def test_reflection_response_type_is_unsupported(self, test_db, student, course_content):
        with pytest.raises(UnsupportedQuizTypeError):
            save_quiz_answers(test_db, "reflection", course_content["single_quiz"].id, student.id, [0])

    def test_unknown_quiz(self, test_db, student):
        with pytest.raises(QuizNotFoundError):
            save_quiz_answers(test_db, "quiz", 999999, student.id, [0])


class TestContentReader:
    def test_theme(self, test_db, course_content):
        theme = get_module_theme(test_db, course_content["module"].id)
        assert theme["title"] == "The Marketplace"
        assert theme["mediaType"] == "image"

    def test_theme_for_unknown_module(self, test_db):
        with pytest.raises(LearningModuleNotFoundError):
            get_module_theme(test_db, 999999)

    def test_overview_reflects_user_progress(self, test_db, student, course_content):
        save_progress(test_db, course_content["concept"].id, student.id, True)

        overview = get_modules_overview(test_db, student.id)
        module = overview["modules"][0]
        assert module["progress"] == 50
        assert [c["completed"] for c in module["concepts"]] == [True, False]

    def test_overview_for_new_user(self, test_db, other_student, course_content):
        module = get_modules_overview(test_db, other_student.id)["modules"][0]
        assert module["progress"] == 0
        assert module["theme"]["title"] == "The Marketplace"

    def test_tutorial(self, test_db, course_content):
        tutorial = get_concept_resource(test_db, course_content["concept"].id, ConceptResource.TUTORIAL)
        assert tutorial["title"] == "Social Proof"
        assert tutorial["tutorial"]["goodExample"]["story"] == "The busy stall sold out by noon."
        assert tutorial["tutorial"]["badExample"]["mediaUrl"] is None

    def test_quizzes_in_order(self, test_db, course_content):
        quizzes = get_concept_resource(test_db, course_content["concept"].id, ConceptResource.QUIZZES)
        assert [q["orderIndex"] for q in quizzes["questions"]] == [1, 2]
        assert quizzes["questions"][1]["correctOptionIndex"] == [0, 2]

    def test_concept_without_quizzes(self, test_db, course_content):
        quizzes = get_concept_resource(test_db, course_content["bare_concept"].id, ConceptResource.QUIZZES)
        assert quizzes == {"questions": []}

    def test_missing_tutorial_and_summary(self, test_db, course_content):
        concept_id = course_content["bare_concept"].id
        with pytest.raises(TutorialNotFoundError):
            get_concept_resource(test_db, concept_id, ConceptResource.TUTORIAL)
        with pytest.raises(SummaryNotFoundError):
            get_concept_resource(test_db, concept_id, ConceptResource.SUMMARY)

    def test_unknown_concept(self, test_db):
        with pytest.raises(ConceptNotFoundError):
            get_concept_resource(test_db, 999999, ConceptResource.SUMMARY)


class TestReflections:
    def test_reflection_prompt_comes_from_theme(self, test_db, course_content):
        reflection = get_module_reflection(test_db, course_content["module"].id)
        assert reflection["type"] == "reflection"
        assert reflection["prompt"] == "What made you trust the seller?"
        assert reflection["learningAdvice"] == "Notice the signals around you this week."

    def test_save_reflection_answer(self, test_db, student, course_content):
        response = save_reflection_answer(
            test_db, course_content["module"].id, course_content["reflection"].id, student.id, "  The queue.  ", 60
        )
        assert response.response_type == ResponseType.REFLECTION.value
        assert response.quiz_id is None
        assert response.answer == {"text": "The queue."}
        assert response.is_correct is None

    def test_blank_reflection_answer(self, test_db, student, course_content):
        with pytest.raises(ValidationError):
            save_reflection_answer(
                test_db, course_content["module"].id, course_content["reflection"].id, student.id, "   "
            )

    def test_reflection_from_another_module(self, test_db, student, course_content):
        with pytest.raises(ReflectionNotFoundError):
            save_reflection_answer(test_db, 999999, course_content["reflection"].id, student.id, "answer")
