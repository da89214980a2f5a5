from enum import Enum
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StagingCleanupPolicy(str, Enum):
    """What happens to the staged copy once the sheet append succeeds."""

    DELETE_AFTER_COMMIT = "delete_after_commit"
    RETAIN = "retain"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Staging store (Redis)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: SecretStr | None = None
    redis_db: int = 0
    staging_key_prefix: str = ""
    staging_ttl_days: int = 30
    staging_cleanup_policy: StagingCleanupPolicy = StagingCleanupPolicy.DELETE_AFTER_COMMIT

    # Durable sink (Google Sheets)
    google_service_account_email: str = ""
    google_service_private_key: SecretStr = SecretStr("")
    google_sheet_id: str = ""
    sheet_title: str = "Logs"
    sheet_metadata_ttl_seconds: int = 300

    # Bound for every Redis / Google call
    downstream_timeout_seconds: float = 10.0

    # Normalization / categorization
    timezone: str = "Europe/Kyiv"
    rules_path: Path | None = None
    category_match_case_sensitive: bool = False

    @field_validator("timezone")
    @classmethod
    def timezone_must_exist(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("staging_ttl_days", "sheet_metadata_ttl_seconds")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def google_private_key(self) -> str:
        """Private key with escaped newlines expanded (env vars hold it on one line)."""
        return self.google_service_private_key.get_secret_value().replace("\\n", "\n")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
