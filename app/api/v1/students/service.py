"""Student service: CRUD plus the cascading delete of a student's attendance and grades."""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateKeyError, StorageError
from app.core.app_logger import get_logger
from app.core.models import AttendanceRecord, GradeRecord, Student
from app.core.projection import to_date, utc_today

from .schemas import DeleteStudentResult, StudentCreate, StudentResponse, StudentUpdate

logger = get_logger(__name__)

STUDENT_NOT_FOUND = "Student not found"


def _to_response(s: Student) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        first_name=s.first_name,
        last_name=s.last_name,
        email=s.email,
        phone=s.phone,
        date_of_birth=to_date(s.date_of_birth),
        enrollment_date=to_date(s.enrollment_date),
        created_at=s.created_at,
    )


async def student_exists(db: AsyncSession, student_id: int) -> bool:
    result = await db.execute(select(Student.id).where(Student.id == student_id))
    return result.scalar_one_or_none() is not None


async def _find_by_email(
    db: AsyncSession,
    email: str,
    exclude_student_id: Optional[int] = None,
) -> Optional[int]:
    """Advisory uniqueness check; the unique constraint on students.email is authoritative."""
    stmt = select(Student.id).where(Student.email == email)
    if exclude_student_id is not None:
        stmt = stmt.where(Student.id != exclude_student_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    email = str(payload.email)
    if await _find_by_email(db, email) is not None:
        logger.warning("Rejected student create: email %s already registered", email)
        raise DuplicateKeyError("Student", "email", email)
    obj = Student(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        phone=payload.phone,
        date_of_birth=payload.date_of_birth,
        enrollment_date=payload.enrollment_date or utc_today(),
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKeyError("Student", "email", email)
    await db.refresh(obj)
    logger.info("Created student %s (%s)", obj.id, obj.email)
    return _to_response(obj)


async def list_students(db: AsyncSession) -> List[StudentResponse]:
    result = await db.execute(select(Student).order_by(Student.id))
    return [_to_response(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: int) -> Optional[StudentResponse]:
    result = await db.execute(select(Student).where(Student.id == student_id))
    obj = result.scalar_one_or_none()
    return _to_response(obj) if obj else None


async def update_student(
    db: AsyncSession,
    student_id: int,
    payload: StudentUpdate,
) -> Optional[StudentResponse]:
    result = await db.execute(select(Student).where(Student.id == student_id))
    obj = result.scalar_one_or_none()
    if not obj:
        return None
    # phone is the only nullable field; an explicit null elsewhere means "leave unchanged"
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "phone"
    }
    if not changes:
        return _to_response(obj)
    if "email" in changes:
        changes["email"] = str(changes["email"])
        if await _find_by_email(db, changes["email"], exclude_student_id=student_id) is not None:
            raise DuplicateKeyError("Student", "email", changes["email"])
    # read before commit; a rollback expires obj
    email = changes.get("email", obj.email)
    for field, value in changes.items():
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKeyError("Student", "email", email)
    await db.refresh(obj)
    logger.info("Updated student %s: %s", student_id, ", ".join(sorted(changes)))
    return _to_response(obj)


async def delete_student(db: AsyncSession, student_id: int) -> DeleteStudentResult:
    """
    Delete a student together with its attendance and grade rows in one transaction.
    Subjects are never touched. A storage failure rolls everything back and raises StorageError.
    """
    try:
        if not await student_exists(db, student_id):
            return DeleteStudentResult(success=False, message=STUDENT_NOT_FOUND)
        attendance_result = await db.execute(
            delete(AttendanceRecord).where(AttendanceRecord.student_id == student_id)
        )
        grades_result = await db.execute(
            delete(GradeRecord).where(GradeRecord.student_id == student_id)
        )
        student_result = await db.execute(delete(Student).where(Student.id == student_id))
        if student_result.rowcount == 0:
            # Removed by a concurrent request after the existence check
            await db.rollback()
            return DeleteStudentResult(success=False, message=STUDENT_NOT_FOUND)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Cascading delete of student %s failed; transaction rolled back", student_id)
        raise StorageError(f"Failed to delete student {student_id}: {e}") from e

    attendance_deleted = attendance_result.rowcount or 0
    grades_deleted = grades_result.rowcount or 0
    related = attendance_deleted + grades_deleted
    logger.info(
        "Deleted student %s with %s attendance and %s grade records",
        student_id,
        attendance_deleted,
        grades_deleted,
    )
    return DeleteStudentResult(
        success=True,
        message=f"Student with ID {student_id} and {related} related records deleted successfully",
        attendance_deleted=attendance_deleted,
        grades_deleted=grades_deleted,
    )
