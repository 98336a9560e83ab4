from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Lab Equipment Lending API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./lablend.db"
    cors_origins: list[str] = ["http://localhost:3020"]

    # File upload & storage
    upload_dir: str = "uploads"
    max_upload_size_mb: int = 50
    max_image_size_mb: int = 10

    # Image URL fallback during import
    image_fetch_timeout: float = 15.0

    # Seeded at startup when set; an existing user is promoted instead
    bootstrap_admin_identity: str = ""

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_import: str = "INFO"           # AssetImportService pipeline

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def max_image_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
