"""
Course content queries and DTO builders

Modules, themes, concepts, tutorials, summaries, quizzes and reflections are
reference data; the only writes here are learner reflection answers.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models import (
    Concept,
    Module,
    Reflection,
    ResponseType,
    Theme,
    UserConceptProgress,
    UserResponse,
)
from utils.error_handling import (
    ConceptNotFoundError,
    LearningModuleNotFoundError,
    ReflectionNotFoundError,
    SummaryNotFoundError,
    ThemeNotFoundError,
    TutorialNotFoundError,
    ValidationError,
    handle_database_error,
)
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("content")


class ConceptResource(str, Enum):
    TUTORIAL = "tutorial"
    QUIZZES = "quiz"
    SUMMARY = "summary"


# =============================================================================
# MODULES
# =============================================================================


def theme_to_dto(theme: Optional[Theme]) -> Optional[Dict[str, Any]]:
    if theme is None:
        return None
    return {
        "title": theme.title,
        "context": theme.context,
        "mediaUrl": theme.media_url,
        "mediaType": theme.media_type,
        "question": theme.question,
    }


def get_module_theme(db: Session, module_id: int) -> Dict[str, Any]:
    module = db.get(Module, module_id)
    if module is None:
        raise LearningModuleNotFoundError(f"Module {module_id} not found")
    if module.theme is None:
        raise ThemeNotFoundError(f"Theme not found for module {module_id}")
    return theme_to_dto(module.theme)


def _completed_concept_ids(db: Session, user_id: int) -> Set[int]:
    rows = db.execute(
        select(UserConceptProgress.concept_id).where(
            UserConceptProgress.user_id == user_id, UserConceptProgress.completed.is_(True)
        )
    )
    return set(rows.scalars())


def get_modules_overview(db: Session, user_id: int) -> Dict[str, List[Dict[str, Any]]]:
    """Every module in order, with the user's completion state per concept"""
    modules = (
        db.execute(
            select(Module)
            .options(selectinload(Module.theme), selectinload(Module.concepts))
            .order_by(Module.order_index, Module.id)
        )
        .scalars()
        .all()
    )
    completed_ids = _completed_concept_ids(db, user_id)

    overview = []
    for module in modules:
        concepts = [
            {"id": concept.id, "title": concept.title, "completed": concept.id in completed_ids}
            for concept in module.concepts
        ]
        done = sum(1 for concept in concepts if concept["completed"])
        overview.append(
            {
                "id": module.id,
                "title": module.title,
                "theme": theme_to_dto(module.theme),
                "progress": round(done * 100 / len(concepts)) if concepts else 0,
                "concepts": concepts,
            }
        )
    return {"modules": overview}


# =============================================================================
# CONCEPTS
# =============================================================================


def _tutorial_dto(concept: Concept) -> Dict[str, Any]:
    tutorial = concept.tutorial
    if tutorial is None:
        raise TutorialNotFoundError(f"Tutorial not found for concept {concept.id}")
    return {
        "title": concept.title,
        "definition": concept.definition,
        "whyItWorks": concept.why_it_works,
        "tutorial": {
            "goodExample": {"story": tutorial.good_story, "mediaUrl": tutorial.good_media_url},
            "badExample": {"story": tutorial.bad_story, "mediaUrl": tutorial.bad_media_url},
        },
    }


def _quizzes_dto(concept: Concept) -> Dict[str, Any]:
    return {
        "questions": [
            {
                "id": quiz.id,
                "orderIndex": quiz.order_index,
                "question": quiz.question,
                "questionType": quiz.question_type,
                "mediaUrl": quiz.media_url,
                "options": list(quiz.options or []),
                "correctOptionIndex": list(quiz.correct_option_index or []),
                "explanation": quiz.explanation,
            }
            for quiz in concept.quizzes
        ]
    }


def _summary_dto(concept: Concept) -> Dict[str, Any]:
    summary = concept.summary
    if summary is None:
        raise SummaryNotFoundError(f"Summary not found for concept {concept.id}")
    return {
        "summaryContent": summary.summary_content,
        "nextConceptIntro": summary.next_chapter_intro,
    }


_RESOURCE_BUILDERS = {
    ConceptResource.TUTORIAL: _tutorial_dto,
    ConceptResource.QUIZZES: _quizzes_dto,
    ConceptResource.SUMMARY: _summary_dto,
}


def get_concept_resource(db: Session, concept_id: int, resource: ConceptResource) -> Dict[str, Any]:
    concept = db.get(Concept, concept_id)
    if concept is None:
        raise ConceptNotFoundError(f"Concept {concept_id} not found")
    return _RESOURCE_BUILDERS[resource](concept)


# =============================================================================
# REFLECTIONS
# =============================================================================


def _module_reflection(db: Session, module_id: int) -> Reflection:
    if db.get(Module, module_id) is None:
        raise LearningModuleNotFoundError(f"Module {module_id} not found")
    reflection = db.execute(
        select(Reflection).where(Reflection.module_id == module_id).order_by(Reflection.order_index).limit(1)
    ).scalar_one_or_none()
    if reflection is None:
        raise ReflectionNotFoundError(f"Reflection not found for module {module_id}")
    return reflection


def get_module_reflection(db: Session, module_id: int) -> Dict[str, Any]:
    reflection = _module_reflection(db, module_id)
    theme = reflection.module.theme
    return {
        "id": reflection.id,
        "type": ResponseType.REFLECTION.value,
        "prompt": theme.question if theme is not None and theme.question else reflection.learning_advice,
        "moduleSummary": reflection.module_summary,
        "moduleSummaryMediaUrl": reflection.module_summary_media_url,
        "learningAdvice": reflection.learning_advice,
    }


def save_reflection_answer(
    db: Session,
    module_id: int,
    reflection_id: int,
    user_id: int,
    answer: str,
    time_spent: Optional[int] = None,
) -> UserResponse:
    if not answer or not answer.strip():
        raise ValidationError("Reflection answer cannot be empty")

    reflection = db.get(Reflection, reflection_id)
    if reflection is None or reflection.module_id != module_id:
        raise ReflectionNotFoundError(f"Reflection {reflection_id} not found for module {module_id}")

    response = UserResponse(
        reflection_id=reflection.id,
        user_id=user_id,
        response_type=ResponseType.REFLECTION.value,
        answer={"text": answer.strip()},
        is_correct=None,
        time_spent=time_spent,
    )
    try:
        db.add(response)
        db.commit()
    except SQLAlchemyError as e:
        handle_database_error(db, e, "save reflection answer")

    db.refresh(response)
    logger.info(
        "Reflection answer recorded",
        category=LogCategory.BUSINESS,
        user_id=user_id,
        extra={"module_id": module_id, "reflection_id": reflection.id},
    )
    return response
