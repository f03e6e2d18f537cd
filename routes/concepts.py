"""
Concept Router
Tutorials, quizzes and summaries, quiz answers and progress updates
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import (
    ConceptQuizzesResponse,
    ConceptSummaryResponse,
    ConceptTutorialResponse,
    ProgressResponse,
    QuizAnswerResponse,
)
from schemas.validation import ProgressUpdateRequest, QuizAnswerRequest
from utils.auth_dependencies import ensure_acting_for_self, get_current_claims
from utils.content import ConceptResource, get_concept_resource
from utils.progress import save_progress
from utils.quiz_scoring import save_quiz_answers

router = APIRouter()


@router.get("/concepts/{concept_id}/tutorial", response_model=ConceptTutorialResponse, summary="Concept tutorial")
def concept_tutorial(
    concept_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return get_concept_resource(db, concept_id, ConceptResource.TUTORIAL)


@router.get("/concepts/{concept_id}/quiz", response_model=ConceptQuizzesResponse, summary="Concept quiz questions")
def concept_quizzes(
    concept_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Questions in order; a concept without quizzes returns an empty list"""
    return get_concept_resource(db, concept_id, ConceptResource.QUIZZES)


@router.get("/concepts/{concept_id}/summary", response_model=ConceptSummaryResponse, summary="Concept summary")
def concept_summary(
    concept_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return get_concept_resource(db, concept_id, ConceptResource.SUMMARY)


@router.post("/concepts/quiz/{quiz_id}/answer", response_model=QuizAnswerResponse, summary="Submit a quiz answer")
def submit_quiz_answer(
    data: QuizAnswerRequest,
    quiz_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """
    Score the submission and store it

    Every submission is kept, so retries build up a history. The response
    echoes the correct indices alongside the score.
    """
    ensure_acting_for_self(claims, data.userId)
    return save_quiz_answers(db, data.responseType, quiz_id, data.userId, data.userAnswerIndices, data.timeSpent)


@router.post("/concepts/{concept_id}/progress", response_model=ProgressResponse, summary="Update concept progress")
def update_progress(
    data: ProgressUpdateRequest,
    concept_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    if data.userId is not None:
        ensure_acting_for_self(claims, data.userId)
    progress = save_progress(db, concept_id, data.userId, data.isCompleted, data.timeSpent)
    return ProgressResponse(
        conceptId=progress.concept_id,
        userId=progress.user_id,
        completed=progress.completed,
        timeSpent=progress.time_spent,
        completedAt=progress.completed_at,
    )
