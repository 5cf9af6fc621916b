from app.core.models.student import Student
from app.core.models.subject import Subject
from app.core.models.attendance import AttendanceRecord
from app.core.models.grade import GradeRecord

__all__ = [
    "AttendanceRecord",
    "GradeRecord",
    "Student",
    "Subject",
]
