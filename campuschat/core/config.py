# campuschat/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_DEFAULT_SECRET_KEY = SecretStr("campuschat-dev-secret-key-change-me")


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path} (exists: {env_path.exists()})")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")
    log_level: str = Field(default="INFO", description="Root logging level")

    # Database
    database_url: str = Field(
        default="sqlite:///./campuschat.db",
        description="SQLAlchemy database URL",
    )
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 5
    db_pool_recycle: int = 300
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup (schema migrations are managed elsewhere)",
    )

    # Auth (tokens are issued by the identity provider; we only decode them)
    secret_key: SecretStr = Field(
        default=_DEFAULT_SECRET_KEY,
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Messaging
    message_max_length: int = Field(
        default=5000, description="Maximum accepted length of a chat message"
    )
    realtime_relay_url: Optional[str] = Field(
        default=None,
        description="Optional broadcaster URL (redis://... or memory://) for cross-worker room fan-out",
    )

    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:5174"],
        description="Origins allowed to call the REST and WebSocket endpoints",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @field_validator("realtime_relay_url")
    @classmethod
    def _blank_relay_is_disabled(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
