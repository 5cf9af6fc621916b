from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./academic_records.db", alias="DATABASE_URL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    cors_origins: List[str] = Field(["*"], alias="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
