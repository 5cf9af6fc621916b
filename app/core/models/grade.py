"""Grade rows. A student may hold several grades per subject and grade type."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from app.core.projection import utc_today
from app.db.session import Base


class GradeRecord(Base):
    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint("grade >= 0", name="ck_grade_non_negative"),
        CheckConstraint("max_score > 0", name="ck_grade_max_score_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    grade = Column(Numeric(5, 2), nullable=False)
    grade_type = Column(String(20), nullable=False)  # midterm, final, assignment, quiz
    max_score = Column(Numeric(5, 2), nullable=False)
    comments = Column(Text, nullable=True)
    recorded_date = Column(Date, nullable=False, default=utc_today)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="grades")
    subject = relationship("Subject", back_populates="grades")
