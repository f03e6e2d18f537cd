"""
Unit tests for quiz answer scoring
"""

import pytest

from utils.error_handling import UnsupportedQuizTypeError
from utils.quiz_scoring import score_answer


class TestSingleChoiceScoring:
    def test_correct_answer_scores_one(self):
        result = score_answer("single_choice", [2], [2])
        assert result.score == 1
        assert result.is_correct is True

    def test_wrong_answer_scores_zero(self):
        result = score_answer("single_choice", [1], [2])
        assert result.score == 0
        assert result.is_correct is False

    def test_only_first_submitted_index_counts(self):
        assert score_answer("single_choice", [2, 0], [2]).is_correct is True
        assert score_answer("single_choice", [0, 2], [2]).is_correct is False

    def test_quiz_without_correct_index_never_matches(self):
        result = score_answer("single_choice", [0], [])
        assert result.score == 0
        assert result.is_correct is False


class TestMultipleChoiceScoring:
    def test_exact_set_is_correct(self):
        result = score_answer("multiple_choice", [0, 2], [0, 2])
        assert result.score == 1.0
        assert result.is_correct is True

    def test_order_does_not_matter(self):
        result = score_answer("multiple_choice", [2, 0], [0, 2])
        assert result.is_correct is True

    def test_partial_credit(self):
        result = score_answer("multiple_choice", [0], [0, 2])
        assert result.score == pytest.approx(0.5)
        assert result.is_correct is False

    def test_extra_wrong_option_keeps_credit_but_is_not_correct(self):
        result = score_answer("multiple_choice", [0, 1, 2], [0, 2])
        assert result.score == pytest.approx(1.0)
        assert result.is_correct is False

    def test_no_overlap_scores_zero(self):
        result = score_answer("multiple_choice", [1, 3], [0, 2])
        assert result.score == 0
        assert result.is_correct is False

    def test_empty_correct_list_scores_zero(self):
        result = score_answer("multiple_choice", [0], [])
        assert result.score == 0
        assert result.is_correct is False


def test_unknown_question_type_is_rejected():
    with pytest.raises(UnsupportedQuizTypeError):
        score_answer("free_text", [0], [0])
