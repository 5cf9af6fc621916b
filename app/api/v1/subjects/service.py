from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateKeyError
from app.core.app_logger import get_logger
from app.core.models import Subject

from .schemas import SubjectCreate, SubjectResponse

logger = get_logger(__name__)


def _to_response(s: Subject) -> SubjectResponse:
    return SubjectResponse(
        id=s.id,
        name=s.name,
        code=s.code,
        description=s.description,
        credits=s.credits,
        created_at=s.created_at,
    )


async def _find_by_code(db: AsyncSession, code: str) -> Optional[Subject]:
    """Advisory check only; the unique constraint on subjects.code rejects racing inserts."""
    result = await db.execute(select(Subject).where(Subject.code == code).limit(1))
    return result.scalar_one_or_none()


async def subject_exists(db: AsyncSession, subject_id: int) -> bool:
    result = await db.execute(select(Subject.id).where(Subject.id == subject_id))
    return result.scalar_one_or_none() is not None


async def create_subject(db: AsyncSession, payload: SubjectCreate) -> SubjectResponse:
    existing = await _find_by_code(db, payload.code)
    if existing:
        logger.warning("Rejected subject create: code %s already used by subject %s", payload.code, existing.id)
        raise DuplicateKeyError("Subject", "code", payload.code)
    obj = Subject(
        name=payload.name,
        code=payload.code,
        description=payload.description,
        credits=payload.credits,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKeyError("Subject", "code", payload.code)
    await db.refresh(obj)
    logger.info("Created subject %s (%s)", obj.id, obj.code)
    return _to_response(obj)


async def list_subjects(db: AsyncSession) -> List[SubjectResponse]:
    result = await db.execute(select(Subject).order_by(Subject.id))
    return [_to_response(s) for s in result.scalars().all()]
