from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.grades.router import router as grades_router
from app.api.v1.statistics.router import router as statistics_router
from app.api.v1.students.router import router as students_router
from app.api.v1.subjects.router import router as subjects_router
from app.core.config import settings
from app.core.app_logger import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Academic Records Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    # Routers
    app.include_router(students_router)
    app.include_router(subjects_router)
    app.include_router(attendance_router)
    app.include_router(grades_router)
    app.include_router(statistics_router)

    return app


app = create_app()
