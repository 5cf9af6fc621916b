"""Attendance service: duplicate-day guarded recording, range queries and per-date breakdowns."""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students.service import student_exists
from app.core.enums import AttendanceStatus
from app.core.exceptions import DuplicateAttendanceError, StudentNotFoundError
from app.core.app_logger import get_logger
from app.core.models import AttendanceRecord, Student
from app.core.projection import to_date

from .schemas import AttendanceCreate, AttendanceDaySummary, AttendanceResponse, AttendanceWithStudent

logger = get_logger(__name__)


def _to_response(a: AttendanceRecord) -> AttendanceResponse:
    return AttendanceResponse(
        id=a.id,
        student_id=a.student_id,
        date=to_date(a.date),
        status=a.status,
        reason=a.reason,
        created_at=a.created_at,
    )


async def _attendance_exists(db: AsyncSession, student_id: int, att_date: date) -> bool:
    result = await db.execute(
        select(AttendanceRecord.id).where(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.date == att_date,
        )
    )
    return result.scalars().first() is not None


async def record_attendance(db: AsyncSession, payload: AttendanceCreate) -> AttendanceResponse:
    """Student must exist; at most one record per (student, date)."""
    if not await student_exists(db, payload.student_id):
        raise StudentNotFoundError(payload.student_id)
    if await _attendance_exists(db, payload.student_id, payload.date):
        logger.warning("Rejected duplicate attendance for student %s on %s", payload.student_id, payload.date)
        raise DuplicateAttendanceError(payload.student_id, payload.date)
    obj = AttendanceRecord(
        student_id=payload.student_id,
        date=payload.date,
        status=payload.status.value,
        reason=payload.reason,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # Lost a race: either the same day was recorded or the student was deleted meanwhile
        if not await student_exists(db, payload.student_id):
            raise StudentNotFoundError(payload.student_id)
        raise DuplicateAttendanceError(payload.student_id, payload.date)
    await db.refresh(obj)
    logger.info("Recorded %s for student %s on %s", obj.status, obj.student_id, obj.date)
    return _to_response(obj)


async def get_attendance(
    db: AsyncSession,
    start_date: date,
    end_date: date,
    student_id: Optional[int] = None,
) -> List[AttendanceWithStudent]:
    """Inclusive date range, optionally for one student. Unknown students simply match nothing."""
    stmt = (
        select(AttendanceRecord, Student.first_name)
        .join(Student, AttendanceRecord.student_id == Student.id)
        .where(
            AttendanceRecord.date >= start_date,
            AttendanceRecord.date <= end_date,
        )
    )
    if student_id is not None:
        stmt = stmt.where(AttendanceRecord.student_id == student_id)
    stmt = stmt.order_by(AttendanceRecord.date, AttendanceRecord.id)
    result = await db.execute(stmt)
    return [
        AttendanceWithStudent(
            id=a.id,
            student_id=a.student_id,
            student_name=first_name,
            date=to_date(a.date),
            status=a.status,
            reason=a.reason,
            created_at=a.created_at,
        )
        for a, first_name in result.all()
    ]


async def count_by_status(db: AsyncSession, on_date: Optional[date] = None) -> Dict[str, int]:
    """Attendance counts per status, for one date or across all history. Every status is present."""
    stmt = select(AttendanceRecord.status, func.count(AttendanceRecord.id))
    if on_date is not None:
        stmt = stmt.where(AttendanceRecord.date == on_date)
    stmt = stmt.group_by(AttendanceRecord.status)
    result = await db.execute(stmt)
    counts = {s.value: 0 for s in AttendanceStatus}
    for status_val, cnt in result.all():
        counts[status_val] = cnt
    return counts


async def get_attendance_day_summary(db: AsyncSession, on_date: date) -> AttendanceDaySummary:
    counts = await count_by_status(db, on_date)
    return AttendanceDaySummary(
        date=on_date,
        total_present=counts[AttendanceStatus.present.value],
        total_absent=counts[AttendanceStatus.absent.value],
        total_late=counts[AttendanceStatus.late.value],
        total_records=sum(counts.values()),
    )
