from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class StudentCreate(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    date_of_birth: date
    enrollment_date: Optional[date] = Field(None, description="Defaults to today")


class StudentUpdate(BaseModel):
    """Only fields that are sent are changed; phone may be set to null."""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None


class StudentResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: date
    enrollment_date: date
    created_at: datetime

    class Config:
        from_attributes = True


class DeleteStudentResult(BaseModel):
    """Outcome of a cascading student delete. A missing student is a normal negative result."""

    success: bool
    message: str
    attendance_deleted: int = 0
    grades_deleted: int = 0
