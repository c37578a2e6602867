import os
import sys

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Scorebook API"
    API_V1_STR: str = "/api/v1"

    # Local SQLite file by default; point DATABASE_URL at Postgres in .env for deployments.
    DATABASE_URL: str = "sqlite:///./scorebook.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # Browser origins allowed to call the API (JSON list in the environment).
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    class Config:
        # Avoid picking up local .env during pytest runs.
        env_file = None if ("pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST")) else ".env"


settings = Settings()
