from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students import service
from app.api.v1.students.schemas import StudentCreate, StudentUpdate
from app.core.exceptions import DuplicateKeyError, StorageError
from app.core.models import AttendanceRecord, GradeRecord, Student, Subject
from app.core.projection import utc_today

from factories import add_attendance, add_grade, add_student, add_subject


async def _count(db: AsyncSession, model, **filters) -> int:
    stmt = select(func.count()).select_from(model)
    for field, value in filters.items():
        stmt = stmt.where(getattr(model, field) == value)
    return (await db.execute(stmt)).scalar_one()


def _student_payload(**overrides) -> StudentCreate:
    data = {
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane.smith@example.com",
        "phone": "555-0123",
        "date_of_birth": date(2004, 3, 20),
    }
    data.update(overrides)
    return StudentCreate(**data)


# ----- create / update -----
@pytest.mark.asyncio
async def test_create_student_defaults_enrollment_date(db_session: AsyncSession) -> None:
    student = await service.create_student(db_session, _student_payload())

    assert student.id is not None
    assert student.email == "jane.smith@example.com"
    assert student.enrollment_date == utc_today()
    assert student.date_of_birth == date(2004, 3, 20)


@pytest.mark.asyncio
async def test_create_student_duplicate_email(db_session: AsyncSession) -> None:
    await service.create_student(db_session, _student_payload())

    with pytest.raises(DuplicateKeyError) as exc_info:
        await service.create_student(db_session, _student_payload(first_name="Other"))

    assert exc_info.value.field == "email"
    assert exc_info.value.value == "jane.smith@example.com"
    assert "jane.smith@example.com" in exc_info.value.message
    assert await _count(db_session, Student) == 1


@pytest.mark.asyncio
async def test_update_student_changes_only_sent_fields(db_session: AsyncSession) -> None:
    created = await service.create_student(db_session, _student_payload())

    updated = await service.update_student(
        db_session, created.id, StudentUpdate(first_name="Janet", phone=None)
    )

    assert updated is not None
    assert updated.first_name == "Janet"
    assert updated.last_name == "Smith"
    assert updated.phone is None
    assert updated.email == created.email


@pytest.mark.asyncio
async def test_update_student_rejects_taken_email(db_session: AsyncSession) -> None:
    await add_student(db_session, "John", "Doe", email="john@example.com")
    jane = await service.create_student(db_session, _student_payload())

    with pytest.raises(DuplicateKeyError):
        await service.update_student(db_session, jane.id, StudentUpdate(email="john@example.com"))

    # Re-sending its own email is not a collision
    same = await service.update_student(db_session, jane.id, StudentUpdate(email=jane.email))
    assert same is not None


@pytest.mark.asyncio
async def test_update_unknown_student_returns_none(db_session: AsyncSession) -> None:
    assert await service.update_student(db_session, 999, StudentUpdate(first_name="X")) is None



@pytest.mark.asyncio
async def test_create_student_unique_constraint_catches_missed_precheck(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    await service.create_student(db_session, _student_payload())

    async def no_match(db, email, exclude_student_id=None):
        return None

    monkeypatch.setattr(service, "_find_by_email", no_match)
    with pytest.raises(DuplicateKeyError) as exc_info:
        await service.create_student(db_session, _student_payload(first_name="Racer"))

    assert exc_info.value.value == "jane.smith@example.com"
    assert await _count(db_session, Student) == 1


@pytest.mark.asyncio
async def test_update_student_unique_constraint_catches_missed_precheck(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    await add_student(db_session, "John", "Doe", email="john@example.com")
    jane = await service.create_student(db_session, _student_payload())

    async def no_match(db, email, exclude_student_id=None):
        return None

    monkeypatch.setattr(service, "_find_by_email", no_match)
    with pytest.raises(DuplicateKeyError) as exc_info:
        await service.update_student(db_session, jane.id, StudentUpdate(email="john@example.com"))

    assert exc_info.value.value == "john@example.com"
    assert await _count(db_session, Student, email="jane.smith@example.com") == 1

# ----- cascading delete -----
@pytest.mark.asyncio
async def test_delete_unknown_student(db_session: AsyncSession) -> None:
    await add_student(db_session)

    result = await service.delete_student(db_session, 999)

    assert result.success is False
    assert result.message == "Student not found"
    assert await _count(db_session, Student) == 1


@pytest.mark.asyncio
async def test_delete_student_without_related_records(db_session: AsyncSession) -> None:
    student = await add_student(db_session)
    student_id = student.id

    result = await service.delete_student(db_session, student_id)

    assert result.success is True
    assert result.message == f"Student with ID {student_id} and 0 related records deleted successfully"
    assert await service.get_student(db_session, student_id) is None


@pytest.mark.asyncio
async def test_delete_student_cascades_attendance_and_grades(db_session: AsyncSession) -> None:
    student = await add_student(db_session, "Jane", "Smith")
    other = await add_student(db_session, "Bob", "Stone")
    math = await add_subject(db_session, "MATH101")
    physics = await add_subject(db_session, "PHYS101", "Physics")

    await add_attendance(db_session, student.id, date(2024, 1, 15), "present")
    await add_attendance(db_session, student.id, date(2024, 1, 16), "absent")
    await add_attendance(db_session, other.id, date(2024, 1, 15), "late")
    await add_grade(db_session, student.id, math.id, "85.50")
    await add_grade(db_session, student.id, physics.id, "90.00", grade_type="final")
    await add_grade(db_session, student.id, math.id, "70.25", grade_type="quiz")
    await add_grade(db_session, other.id, math.id, "60.00")
    student_id, other_id = student.id, other.id

    result = await service.delete_student(db_session, student_id)

    assert result.success is True
    assert result.attendance_deleted == 2
    assert result.grades_deleted == 3
    assert "5 related records" in result.message

    assert await _count(db_session, Student, id=student_id) == 0
    assert await _count(db_session, AttendanceRecord, student_id=student_id) == 0
    assert await _count(db_session, GradeRecord, student_id=student_id) == 0
    # Other students and all subjects are untouched
    assert await _count(db_session, AttendanceRecord, student_id=other_id) == 1
    assert await _count(db_session, GradeRecord, student_id=other_id) == 1
    assert await _count(db_session, Subject) == 2


@pytest.mark.asyncio
async def test_delete_student_storage_failure_rolls_back(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    student = await add_student(db_session)
    subject = await add_subject(db_session)
    await add_attendance(db_session, student.id, date(2024, 1, 15), "present")
    await add_attendance(db_session, student.id, date(2024, 1, 16), "late")
    await add_grade(db_session, student.id, subject.id, "88.00")
    # Rollback expires loaded instances; keep the plain id
    student_id = student.id

    real_execute = AsyncSession.execute

    async def failing_execute(self, statement, *args, **kwargs):
        if getattr(statement, "is_delete", False) and statement.table.name == "students":
            raise OperationalError("DELETE FROM students", {}, Exception("disk I/O error"))
        return await real_execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "execute", failing_execute)
    with pytest.raises(StorageError) as exc_info:
        await service.delete_student(db_session, student_id)
    monkeypatch.undo()

    assert exc_info.value.status_code == 500
    assert str(student_id) in exc_info.value.message
    assert await _count(db_session, Student, id=student_id) == 1
    assert await _count(db_session, AttendanceRecord, student_id=student_id) == 2
    assert await _count(db_session, GradeRecord, student_id=student_id) == 1



@pytest.mark.asyncio
async def test_delete_student_existence_check_failure_raises_storage_error(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    student = await add_student(db_session)
    student_id = student.id

    async def broken_lookup(db, student_id):
        raise OperationalError("SELECT students.id", {}, Exception("database is locked"))

    monkeypatch.setattr(service, "student_exists", broken_lookup)
    with pytest.raises(StorageError) as exc_info:
        await service.delete_student(db_session, student_id)
    monkeypatch.undo()

    assert exc_info.value.status_code == 500
    assert await _count(db_session, Student, id=student_id) == 1

# ----- HTTP -----
@pytest.mark.asyncio
async def test_student_endpoints(client: AsyncClient) -> None:
    payload = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone": None,
        "date_of_birth": "2005-12-10",
        "enrollment_date": "2024-09-01",
    }
    response = await client.post("/api/v1/students", json=payload)
    assert response.status_code == 201
    created = response.json()
    assert created["enrollment_date"] == "2024-09-01"

    duplicate = await client.post("/api/v1/students", json=payload)
    assert duplicate.status_code == 409
    assert "ada@example.com" in duplicate.json()["detail"]

    listed = await client.get("/api/v1/students")
    assert [s["id"] for s in listed.json()] == [created["id"]]

    updated = await client.put(f"/api/v1/students/{created['id']}", json={"phone": "555-0199"})
    assert updated.status_code == 200
    assert updated.json()["phone"] == "555-0199"

    deleted = await client.delete(f"/api/v1/students/{created['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    missing = await client.get(f"/api/v1/students/{created['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_unknown_student_endpoint(client: AsyncClient) -> None:
    response = await client.delete("/api/v1/students/424242")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Student not found"


@pytest.mark.asyncio
async def test_create_student_validation(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/students",
        json={"first_name": "", "last_name": "X", "email": "not-an-email", "date_of_birth": "2005-01-01"},
    )
    assert response.status_code == 422
