from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import GradeType


class GradeCreate(BaseModel):
    student_id: int
    subject_id: int
    grade: Decimal = Field(..., ge=0, max_digits=5, decimal_places=2)
    grade_type: GradeType
    max_score: Decimal = Field(..., gt=0, max_digits=5, decimal_places=2)
    comments: Optional[str] = None
    recorded_date: Optional[date] = Field(None, description="Defaults to today")


class GradeResponse(BaseModel):
    id: int
    student_id: int
    subject_id: int
    grade: float
    grade_type: GradeType
    max_score: float
    comments: Optional[str] = None
    recorded_date: date
    created_at: datetime


class GradeWithDetails(BaseModel):
    """Grade joined with student full name and subject name/code; percentage is not rounded."""

    id: int
    student_id: int
    student_name: str
    subject_id: int
    subject_name: str
    subject_code: str
    grade: float
    grade_type: GradeType
    max_score: float
    percentage: float
    comments: Optional[str] = None
    recorded_date: date
    created_at: datetime
