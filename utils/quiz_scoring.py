"""
Quiz answer scoring

single_choice: only the first submitted index is compared, score is 0 or 1.
multiple_choice: partial credit of matches / len(correct), but is_correct
requires the submitted set to be exactly the correct set.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import QuestionType, Quiz, ResponseType, UserResponse
from utils.error_handling import (
    EmptyAnswerError,
    QuizNotFoundError,
    UnsupportedQuizTypeError,
    handle_database_error,
    validate_resource_exists,
)
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("quiz.scoring")


@dataclass(frozen=True)
class QuizScore:
    score: float
    is_correct: bool


def score_answer(question_type: str, submitted: Sequence[int], correct: Sequence[int]) -> QuizScore:
    if question_type == QuestionType.SINGLE_CHOICE.value:
        is_correct = bool(submitted) and bool(correct) and submitted[0] == correct[0]
        return QuizScore(score=1 if is_correct else 0, is_correct=is_correct)

    if question_type == QuestionType.MULTIPLE_CHOICE.value:
        if not correct:
            return QuizScore(score=0, is_correct=False)
        matches = len(set(submitted) & set(correct))
        is_correct = len(submitted) == len(correct) and all(index in submitted for index in correct)
        return QuizScore(score=matches / len(correct), is_correct=is_correct)

    raise UnsupportedQuizTypeError(f"Unsupported quiz type: {question_type}")


def save_quiz_answers(
    db: Session,
    response_type: str,
    quiz_id: int,
    user_id: int,
    submitted: List[int],
    time_spent: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Score a submission and append it to the learner's response history

    Returns:
        The persisted answer payload: userAnswerIndices, correctOptionIndices, score
    """
    if not submitted:
        raise EmptyAnswerError()
    if response_type != ResponseType.QUIZ.value:
        raise UnsupportedQuizTypeError(f"Unsupported response type: {response_type}")

    quiz = validate_resource_exists(db.get(Quiz, quiz_id), QuizNotFoundError, quiz_id)

    correct = list(quiz.correct_option_index or [])
    result = score_answer(quiz.question_type, submitted, correct)

    answer = {
        "userAnswerIndices": list(submitted),
        "correctOptionIndices": correct,
        "score": result.score,
    }

    try:
        db.add(
            UserResponse(
                quiz_id=quiz.id,
                user_id=user_id,
                response_type=ResponseType.QUIZ.value,
                answer=answer,
                is_correct=result.is_correct,
                time_spent=time_spent,
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        handle_database_error(db, e, "save quiz answer")

    logger.info(
        "Quiz answer recorded",
        category=LogCategory.BUSINESS,
        user_id=user_id,
        extra={"quiz_id": quiz.id, "score": result.score, "is_correct": result.is_correct},
    )
    return answer
