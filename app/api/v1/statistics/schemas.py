from pydantic import BaseModel


class DashboardStatistics(BaseModel):
    """Dashboard counters. Rates and averages are rounded to 2 places; all zero on an empty store."""

    total_students: int
    present_today: int
    absent_today: int
    late_today: int
    average_attendance_rate: float
    total_subjects: int
    average_grade_all_students: float


class StudentRanking(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    average_grade: float
    total_subjects: int
    rank: int
