from datetime import date
from typing import Any

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class StudentNotFoundError(NotFoundError):
    def __init__(self, student_id: int) -> None:
        super().__init__(f"Student with ID {student_id} does not exist")
        self.student_id = student_id


class SubjectNotFoundError(NotFoundError):
    def __init__(self, subject_id: int) -> None:
        super().__init__(f"Subject with ID {subject_id} does not exist")
        self.subject_id = subject_id


class DuplicateKeyError(ServiceError):
    """Unique field collision (student email, subject code)."""

    def __init__(self, entity: str, field: str, value: Any) -> None:
        super().__init__(f"{entity} with {field} '{value}' already exists", status.HTTP_409_CONFLICT)
        self.entity = entity
        self.field = field
        self.value = value


class DuplicateAttendanceError(ServiceError):
    def __init__(self, student_id: int, att_date: date) -> None:
        super().__init__(
            f"Attendance record already exists for student {student_id} on {att_date.isoformat()}",
            status.HTTP_409_CONFLICT,
        )
        self.student_id = student_id
        self.date = att_date


class StorageError(ServiceError):
    """Record store failure; the surrounding transaction has been rolled back."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
