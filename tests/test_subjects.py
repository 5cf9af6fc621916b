import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.subjects import service
from app.api.v1.subjects.schemas import SubjectCreate
from app.core.exceptions import DuplicateKeyError


@pytest.mark.asyncio
async def test_create_subject(db_session: AsyncSession) -> None:
    subject = await service.create_subject(
        db_session,
        SubjectCreate(name="Mathematics", code="MATH101", description="Basic Mathematics", credits=3),
    )

    assert subject.id is not None
    assert subject.code == "MATH101"
    assert subject.credits == 3


@pytest.mark.asyncio
async def test_create_subject_duplicate_code(db_session: AsyncSession) -> None:
    await service.create_subject(db_session, SubjectCreate(name="Mathematics", code="MATH101", credits=3))

    with pytest.raises(DuplicateKeyError) as exc_info:
        await service.create_subject(db_session, SubjectCreate(name="Algebra", code="MATH101", credits=4))

    assert exc_info.value.field == "code"
    assert exc_info.value.message == "Subject with code 'MATH101' already exists"
    assert len(await service.list_subjects(db_session)) == 1


@pytest.mark.asyncio
async def test_unique_constraint_rejects_code_missed_by_precheck(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    await service.create_subject(db_session, SubjectCreate(name="Mathematics", code="MATH101", credits=3))

    async def no_match(db, code):
        return None

    monkeypatch.setattr(service, "_find_by_code", no_match)
    with pytest.raises(DuplicateKeyError) as exc_info:
        await service.create_subject(db_session, SubjectCreate(name="Algebra", code="MATH101", credits=4))

    assert exc_info.value.value == "MATH101"
    assert len(await service.list_subjects(db_session)) == 1

@pytest.mark.asyncio
async def test_subject_endpoints(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/subjects", json={"name": "Physics", "code": "PHYS101", "description": None, "credits": 4}
    )
    assert response.status_code == 201

    conflict = await client.post("/api/v1/subjects", json={"name": "Physics II", "code": "PHYS101", "credits": 4})
    assert conflict.status_code == 409

    non_positive = await client.post("/api/v1/subjects", json={"name": "Art", "code": "ART1", "credits": 0})
    assert non_positive.status_code == 422

    listed = await client.get("/api/v1/subjects")
    assert [s["code"] for s in listed.json()] == ["PHYS101"]
