"""Application configuration helpers."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Centralized configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    app_name: str = "MUF Order Pipeline"
    environment: str = "dev"
    log_level: str = "INFO"

    # Database connection pieces (fallback to local sqlite for dev/testing)
    database_url: Optional[str] = None
    pg_host: str = "localhost"
    pg_port: int = 5432
    pg_db: str = "orderflow"
    pg_user: str = "orderflow"
    pg_password: str = "secret"
    pg_sslmode: str = "prefer"

    # Notifications are best effort: retry a few times, then log and move on
    notification_retries: int = 2
    notification_fanout_limit: int = 50

    # API behavior
    allow_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000", "*"]

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.pg_user}:{self.pg_password}"
            f"@{self.pg_host}:{self.pg_port}/{self.pg_db}?sslmode={self.pg_sslmode}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
