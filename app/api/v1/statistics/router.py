from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import GradeType
from app.db.session import get_db

from .schemas import DashboardStatistics, StudentRanking
from . import service

router = APIRouter(prefix="/api/v1/statistics", tags=["statistics"])


@router.get("/dashboard", response_model=DashboardStatistics)
async def get_student_statistics(db: AsyncSession = Depends(get_db)):
    return await service.get_student_statistics(db)


@router.get("/top-students", response_model=List[StudentRanking])
async def get_top_students(
    limit: Optional[int] = Query(None, gt=0, description="Defaults to 10"),
    grade_type: Optional[GradeType] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Leaderboard by average grade, optionally restricted to one grade type."""
    return await service.get_top_students(db, limit=limit, grade_type=grade_type)
