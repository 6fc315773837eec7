"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path("data")
    uploads_dir: Path = Path("uploads")
    session_ttl_seconds: int = 86400
    session_reap_interval_seconds: int = 3600
    session_cookie_name: str = "portal_session"
    cookie_secure: bool = False
    max_photo_bytes: int = 5 * 1024 * 1024
    password_hash_time_cost: int = 3
    password_hash_memory_cost: int = 65536
    password_hash_parallelism: int = 4
    admin_username: str = "admin"
    admin_display_name: str = "Administrator"
    admin_student_id: str = "000000"
    admin_email: str = "admin@localhost"
    admin_password: str = "admin"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def users_path(self) -> Path:
        """Location of the user record file."""
        return self.data_dir / "users.json"

    @property
    def sessions_path(self) -> Path:
        """Location of the session file."""
        return self.data_dir / "sessions.json"
