from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import GradeCreate, GradeResponse, GradeWithDetails
from . import service

router = APIRouter(prefix="/api/v1/grades", tags=["grades"])


@router.post(
    "",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_grade(
    payload: GradeCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.record_grade(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[GradeWithDetails])
async def get_grades(
    student_id: Optional[int] = Query(None, description="Only grades for this student"),
    db: AsyncSession = Depends(get_db),
):
    return await service.get_grades(db, student_id=student_id)
