"""Dashboard statistics and the top-student leaderboard."""

from typing import List, Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.attendance.service import count_by_status
from app.core.enums import ATTENDED_STATUSES, AttendanceStatus, GradeType
from app.core.models import GradeRecord, Student, Subject
from app.core.projection import mean, percentage, round_half_up, to_float, utc_today

from .schemas import DashboardStatistics, StudentRanking

DEFAULT_TOP_STUDENTS_LIMIT = 10


async def _count(db: AsyncSession, column) -> int:
    result = await db.execute(select(func.count(column)))
    return result.scalar() or 0


async def get_student_statistics(db: AsyncSession) -> DashboardStatistics:
    """
    Today's attendance is counted per status. The attendance rate covers all history:
    (present + late) / all records x 100. The grade average covers every grade ever recorded.
    """
    today_counts = await count_by_status(db, utc_today())
    all_counts = await count_by_status(db)
    attended = sum(all_counts[s] for s in ATTENDED_STATUSES)
    attendance_rate = percentage(attended, sum(all_counts.values()))

    grade_row = (
        await db.execute(select(func.sum(GradeRecord.grade), func.count(GradeRecord.id)))
    ).one()
    average_grade = mean(grade_row[0], grade_row[1])

    return DashboardStatistics(
        total_students=await _count(db, Student.id),
        present_today=today_counts[AttendanceStatus.present.value],
        absent_today=today_counts[AttendanceStatus.absent.value],
        late_today=today_counts[AttendanceStatus.late.value],
        average_attendance_rate=round_half_up(attendance_rate),
        total_subjects=await _count(db, Subject.id),
        average_grade_all_students=round_half_up(average_grade),
    )


async def get_top_students(
    db: AsyncSession,
    limit: Optional[int] = None,
    grade_type: Optional[GradeType] = None,
) -> List[StudentRanking]:
    """
    Rank students by their average grade, highest first. Students without a matching
    grade are left out. Equal averages are ordered by student id. Rank is the 1-based
    position after truncating to ``limit``.
    """
    if limit is None:
        limit = DEFAULT_TOP_STUDENTS_LIMIT
    if limit <= 0:
        raise ValueError(f"limit must be a positive integer, got {limit}")

    stmt = (
        select(
            Student.id,
            Student.first_name,
            Student.last_name,
            Student.email,
            func.sum(GradeRecord.grade),
            func.count(GradeRecord.id),
            func.count(distinct(GradeRecord.subject_id)),
        )
        .join(GradeRecord, GradeRecord.student_id == Student.id)
    )
    if grade_type is not None:
        stmt = stmt.where(GradeRecord.grade_type == GradeType(grade_type).value)
    stmt = stmt.group_by(Student.id, Student.first_name, Student.last_name, Student.email)
    result = await db.execute(stmt)

    # Averages are compared as exact decimals; SQL AVG on floating columns can split ties
    aggregated = []
    for student_id, first_name, last_name, email, total, count, subjects in result.all():
        aggregated.append((mean(total, count), student_id, first_name, last_name, email, subjects))
    aggregated.sort(key=lambda row: (-row[0], row[1]))

    return [
        StudentRanking(
            id=student_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            average_grade=to_float(average),
            total_subjects=int(subjects),
            rank=position,
        )
        for position, (average, student_id, first_name, last_name, email, subjects) in enumerate(
            aggregated[:limit], start=1
        )
    ]
