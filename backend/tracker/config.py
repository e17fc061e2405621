"""
Application configuration from environment variables.
Loads .env from the backend directory so secrets are found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env next to backend/ (parent of tracker/); loaded explicitly so keys are set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)
else:
    # Fallback: try backend/.env relative to cwd (e.g. when running from repo root)
    import os
    _cwd_env = Path(os.getcwd()) / "backend" / ".env"
    if _cwd_env.exists():
        from dotenv import load_dotenv
        load_dotenv(_cwd_env, override=False)

DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database: sqlite for local runs and tests, postgresql for production (schema via alembic)
    database_url: str = "sqlite:///./tracker_dev.db"

    # Environment: development | production. Error details are hidden from responses in production.
    env: str = "development"

    # JWT session tokens. In production (ENV=production), SECRET_KEY must be set.
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 30

    # bcrypt cost factor; tests lower it to keep registration fast
    bcrypt_rounds: int = 12

    # All routers are mounted under this prefix
    api_prefix: str = "/api/v1"

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    # Pagination applied uniformly to every list endpoint
    default_page_limit: int = 10
    max_page_limit: int = 100

    log_level: str = "INFO"
    # Echo SQL statements through the sqlalchemy.engine logger
    debug: bool = False

    @field_validator("api_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        s = (v or "").strip().rstrip("/")
        if s and not s.startswith("/"):
            s = "/" + s
        return s

    @property
    def is_production(self) -> bool:
        return (self.env or "").strip().lower() == "production"


settings = Settings()
