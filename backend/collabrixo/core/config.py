"""
Centralised settings using `pydantic-settings`.

All env-vars are loaded once at import time. Missing Appwrite values do not
crash the process; callers ask `missing_settings()` and render the setup
screen instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

# env-var names that must be non-empty for the board to talk to Appwrite
REQUIRED_SETTINGS = (
    "APPWRITE_PROJECT_ID",
    "APPWRITE_DATABASE_ID",
    "APPWRITE_COMPONENT_COLLECTION_ID",
    "APPWRITE_BUCKET_ID",
    "APPWRITE_MEETING_COLLECTION_ID",
    "APPWRITE_TIMELINE_COLLECTION_ID",
    "APPWRITE_RESOURCE_COLLECTION_ID",
)


class Settings(BaseSettings):
    # environment
    ENV: str = "development"  # development | staging | production | test

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # e.g. "http://localhost:8000"  (no trailing slash)
    API_BASE_URL: HttpUrl = "http://localhost:8000"

    # App JWT wrapping the Appwrite session secret
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # --- Appwrite ---
    APPWRITE_ENDPOINT: str = "https://cloud.appwrite.io/v1"
    APPWRITE_PROJECT_ID: str = ""
    APPWRITE_DATABASE_ID: str = ""
    APPWRITE_COMPONENT_COLLECTION_ID: str = ""  # work items (kanban cards)
    APPWRITE_MEETING_COLLECTION_ID: str = ""
    APPWRITE_TIMELINE_COLLECTION_ID: str = ""
    APPWRITE_RESOURCE_COLLECTION_ID: str = ""
    APPWRITE_BUCKET_ID: str = ""

    # optional: countdown timer is disabled when unset
    APPWRITE_TIMER_COLLECTION_ID: str = ""
    # optional: server key, needed for Appwrite to hand back session secrets
    APPWRITE_API_KEY: str | None = None
    # optional: verify X-Appwrite-Webhook-Signature when set
    APPWRITE_WEBHOOK_SIGNATURE_KEY: str | None = None

    REMOTE_TIMEOUT_SECONDS: float = 15.0
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024  # 100 MB

    # Log level (DEBUG/INFO/WARNING/ERROR)
    LOG_LEVEL: str = "INFO"
    # empty string disables the rotating file sink
    LOG_FILE: str = "logs/collabrixo_{time:YYYY-MM-DD}.log"

    # --- internal ---
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    WEBHOOK_PATH: str = "/api/v1/webhooks/appwrite"  # local path

    @property
    def webhook_address(self) -> str:  # full public URL, part of the signed payload
        return f"{str(self.API_BASE_URL).rstrip('/')}{self.WEBHOOK_PATH}"

    def missing_settings(self) -> list[str]:
        return [name for name in REQUIRED_SETTINGS if not getattr(self, name)]

    def is_config_valid(self) -> bool:
        return not self.missing_settings()


settings = Settings()  # Singleton
