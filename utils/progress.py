"""Per-user concept completion tracking"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Concept, UserConceptProgress, utcnow
from utils.error_handling import (
    ConceptNotFoundError,
    MissingUserIdError,
    UnsupportedDialectError,
    handle_database_error,
    validate_resource_exists,
)
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("progress")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(dialect_name: str):
    """Return the ON CONFLICT capable insert() for a dialect"""
    try:
        return _DIALECT_INSERTS[dialect_name]
    except KeyError:
        logger.error(
            f"Progress upsert is not supported on {dialect_name}",
            category=LogCategory.DATABASE,
            extra={"dialect": dialect_name},
        )
        raise UnsupportedDialectError(dialect_name) from None


def save_progress(
    db: Session,
    concept_id: int,
    user_id: Optional[int],
    is_completed: bool,
    time_spent: Optional[int] = None,
) -> UserConceptProgress:
    """
    Create or update the (concept_id, user_id) progress row in one statement

    time_spent is only overwritten when given; completed_at follows completed.
    """
    if user_id is None:
        raise MissingUserIdError()
    validate_resource_exists(db.get(Concept, concept_id), ConceptNotFoundError, concept_id)

    completed_at = utcnow() if is_completed else None

    insert = dialect_insert(db.get_bind().dialect.name)
    stmt = insert(UserConceptProgress).values(
        concept_id=concept_id,
        user_id=user_id,
        completed=is_completed,
        time_spent=time_spent if time_spent is not None else 0,
        completed_at=completed_at,
    )
    update_values = {"completed": is_completed, "completed_at": completed_at}
    if time_spent is not None:
        update_values["time_spent"] = time_spent
    stmt = stmt.on_conflict_do_update(index_elements=["concept_id", "user_id"], set_=update_values)

    try:
        db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        handle_database_error(db, e, "save concept progress")

    progress = db.execute(
        select(UserConceptProgress).where(
            UserConceptProgress.concept_id == concept_id, UserConceptProgress.user_id == user_id
        )
    ).scalar_one()
    # The upsert bypasses the identity map, so make sure we hand back fresh values
    db.refresh(progress)

    logger.info(
        "Concept progress saved",
        category=LogCategory.BUSINESS,
        user_id=user_id,
        extra={"concept_id": concept_id, "completed": is_completed},
    )
    return progress
