"""Attendance API router."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.projection import utc_today
from app.db.session import get_db

from . import service
from .schemas import AttendanceCreate, AttendanceDaySummary, AttendanceResponse, AttendanceWithStudent

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_attendance(
    payload: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record attendance. One record per student per day."""
    try:
        return await service.record_attendance(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[AttendanceWithStudent])
async def get_attendance(
    start_date: date = Query(..., description="Inclusive lower bound"),
    end_date: date = Query(..., description="Inclusive upper bound"),
    student_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await service.get_attendance(db, start_date, end_date, student_id=student_id)


@router.get("/summary", response_model=AttendanceDaySummary)
async def get_attendance_day_summary(
    att_date: Optional[date] = Query(None, alias="date", description="Defaults to today (UTC)"),
    db: AsyncSession = Depends(get_db),
):
    """Present/absent/late counts for one day."""
    return await service.get_attendance_day_summary(db, att_date or utc_today())
