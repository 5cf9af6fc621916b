from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students.service import student_exists
from app.api.v1.subjects.service import subject_exists
from app.core.exceptions import StorageError, StudentNotFoundError, SubjectNotFoundError
from app.core.app_logger import get_logger
from app.core.models import GradeRecord, Student, Subject
from app.core.projection import full_name, percentage, to_date, to_float, utc_today

from .schemas import GradeCreate, GradeResponse, GradeWithDetails

logger = get_logger(__name__)


def _to_response(g: GradeRecord) -> GradeResponse:
    return GradeResponse(
        id=g.id,
        student_id=g.student_id,
        subject_id=g.subject_id,
        grade=to_float(g.grade),
        grade_type=g.grade_type,
        max_score=to_float(g.max_score),
        comments=g.comments,
        recorded_date=to_date(g.recorded_date),
        created_at=g.created_at,
    )


async def _check_references(db: AsyncSession, student_id: int, subject_id: int) -> None:
    if not await student_exists(db, student_id):
        raise StudentNotFoundError(student_id)
    if not await subject_exists(db, subject_id):
        raise SubjectNotFoundError(subject_id)


async def record_grade(db: AsyncSession, payload: GradeCreate) -> GradeResponse:
    await _check_references(db, payload.student_id, payload.subject_id)
    obj = GradeRecord(
        student_id=payload.student_id,
        subject_id=payload.subject_id,
        grade=payload.grade,
        grade_type=payload.grade_type.value,
        max_score=payload.max_score,
        comments=payload.comments,
        recorded_date=payload.recorded_date or utc_today(),
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        await _check_references(db, payload.student_id, payload.subject_id)
        raise StorageError(f"Failed to record grade for student {payload.student_id}: {e}") from e
    await db.refresh(obj)
    logger.info(
        "Recorded %s grade %s/%s for student %s in subject %s",
        obj.grade_type,
        obj.grade,
        obj.max_score,
        obj.student_id,
        obj.subject_id,
    )
    return _to_response(obj)


async def get_grades(db: AsyncSession, student_id: Optional[int] = None) -> List[GradeWithDetails]:
    stmt = (
        select(
            GradeRecord,
            Student.first_name,
            Student.last_name,
            Subject.name,
            Subject.code,
        )
        .join(Student, GradeRecord.student_id == Student.id)
        .join(Subject, GradeRecord.subject_id == Subject.id)
    )
    if student_id is not None:
        stmt = stmt.where(GradeRecord.student_id == student_id)
    stmt = stmt.order_by(GradeRecord.id)
    result = await db.execute(stmt)
    rows = []
    for g, first_name, last_name, subject_name, subject_code in result.all():
        rows.append(GradeWithDetails(
            id=g.id,
            student_id=g.student_id,
            student_name=full_name(first_name, last_name),
            subject_id=g.subject_id,
            subject_name=subject_name,
            subject_code=subject_code,
            grade=to_float(g.grade),
            grade_type=g.grade_type,
            max_score=to_float(g.max_score),
            percentage=to_float(percentage(g.grade, g.max_score)),
            comments=g.comments,
            recorded_date=to_date(g.recorded_date),
            created_at=g.created_at,
        ))
    return rows
