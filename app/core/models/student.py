from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.projection import utc_today
from app.db.session import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=False)
    enrollment_date = Column(Date, nullable=False, default=utc_today)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    attendance_records = relationship("AttendanceRecord", back_populates="student", passive_deletes=True)
    grades = relationship("GradeRecord", back_populates="student", passive_deletes=True)
