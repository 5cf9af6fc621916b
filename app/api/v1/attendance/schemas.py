from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import AttendanceStatus


class AttendanceCreate(BaseModel):
    """Record attendance for one student on one day."""

    student_id: int
    date: date
    status: AttendanceStatus = Field(..., description="present, absent, late")
    reason: Optional[str] = Field(None, description="Usually given for absent or late")


class AttendanceResponse(BaseModel):
    id: int
    student_id: int
    date: date
    status: AttendanceStatus
    reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AttendanceWithStudent(BaseModel):
    """Attendance row joined with the owning student's first name."""

    id: int
    student_id: int
    student_name: str
    date: date
    status: AttendanceStatus
    reason: Optional[str] = None
    created_at: datetime


class AttendanceDaySummary(BaseModel):
    """Status breakdown for a single date."""

    date: date
    total_present: int
    total_absent: int
    total_late: int
    total_records: int
