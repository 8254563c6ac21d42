from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent

_env_file = BASE_DIR / ".env"
if _env_file.exists():
    load_dotenv(_env_file, override=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENVIRONMENT: str = "development"

    # Supabase (auth + admin registry)
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: str
    CREDENTIAL_STORE_TIMEOUT_SECONDS: float = 5.0
    ADMIN_REGISTRY_TIMEOUT_SECONDS: float = 5.0

    # Cookies
    COOKIE_SECURE: bool = True
    DEFAULT_ACCESS_TOKEN_MAX_AGE_SECONDS: int = 3600
    REFRESH_TOKEN_MAX_AGE_SECONDS: int = 7 * 24 * 60 * 60
    EXTENDED_SESSION_DAYS: int = 30

    # Admin-role cache
    ADMIN_CACHE_TTL_SECONDS: int = 300
    ADMIN_CACHE_MAX_SIZE: int = 1024

    # CORS (comma-separated)
    ALLOWED_ORIGINS: str = "http://localhost:4321"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = str(BASE_DIR / "system" / "logs")
    MAX_LOG_FILE_SIZE: int = 10 * 1024 * 1024
    BACKUP_COUNT: int = 5

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        return self.COOKIE_SECURE or self.is_production

    @property
    def extended_session_seconds(self) -> int:
        return self.EXTENDED_SESSION_DAYS * 24 * 60 * 60

    @property
    def allowed_origin_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
