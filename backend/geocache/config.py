from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "geocache-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Geocache")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/geocache_dev")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me-0123456789abcdef")

    # Public coordinates: 3 decimals is ~111 m at the equator
    coordinate_precision: int = int(os.getenv("COORDINATE_PRECISION", "3"))
    geofence_srid: int = int(os.getenv("GEOFENCE_SRID", "4326"))

    # Deadline for the store calls of one submission (0 = none)
    submission_timeout_seconds: float = float(os.getenv("SUBMISSION_TIMEOUT_SECONDS", "5"))
    geofence_rejection_message: str = os.getenv(
        "GEOFENCE_REJECTION_MESSAGE",
        "Location rejected: Falls within a restricted safety zone (e.g., school, military base).",
    )

settings = Settings()
