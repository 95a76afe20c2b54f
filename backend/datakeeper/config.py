from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Datakeeper API"
    app_version: str = "1.0.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./data/datakeeper.db"
    database_echo: bool = False                # log every SQL statement via the engine
    cors_origins: list[str] = ["http://localhost:5173"]

    # Local storage areas
    storage_dir: str = "data/storage"
    storage_quota_bytes: int = 5 * 1024 * 1024   # 0 = unlimited

    # Remote backend: "database" (app_data table), "supabase" (REST) or "none"
    remote_backend: Literal["database", "supabase", "none"] = "database"
    remote_data_id: str = "default"
    supabase_url: str = ""
    supabase_api_key: str = ""

    # Conflict detection
    conflict_window_seconds: int = 300

    # Automated backups
    auto_backup_enabled: bool = True
    backup_interval_seconds: int = 24 * 60 * 60
    backup_check_interval_seconds: int = 60 * 60
    max_local_backups: int = 10
    backup_history_limit: int = 20
    store_cloud_backups: bool = True

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_storage: str = "INFO"          # Redundant writer / recovery scanner
    log_level_remote: str = "INFO"           # Supabase client / app_data table

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
