"""
Module Router
Overview with per-learner progress, module themes and reflections
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import BaseResponse, ModulesOverviewResponse, ReflectionResponse, ThemeResponse
from schemas.validation import ReflectionAnswerRequest
from utils.auth_dependencies import ensure_acting_for_self, get_current_claims
from utils.content import get_module_reflection, get_module_theme, get_modules_overview, save_reflection_answer

router = APIRouter()


@router.get("/modules/overview", response_model=ModulesOverviewResponse, summary="All modules with progress")
def modules_overview(
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Modules in course order; each concept carries the caller's completion flag"""
    return get_modules_overview(db, claims["userId"])


@router.get("/modules/{module_id}/theme", response_model=ThemeResponse, summary="Module theme")
def module_theme(
    module_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return get_module_theme(db, module_id)


@router.get("/modules/{module_id}/reflection", response_model=ReflectionResponse, summary="Module reflection")
def module_reflection(
    module_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return get_module_reflection(db, module_id)


@router.post("/modules/{module_id}/reflection", response_model=BaseResponse, summary="Submit a reflection answer")
def submit_reflection(
    data: ReflectionAnswerRequest,
    module_id: int = Path(..., gt=0),
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    ensure_acting_for_self(claims, data.userId)
    save_reflection_answer(db, module_id, data.reflectionId, data.userId, data.answer, data.timeSpent)
    return BaseResponse(message="Reflection saved successfully")
