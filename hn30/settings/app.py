"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    sqlite_path: Path = Field(
        default=Path("./data/hn30.db"), validation_alias="SQLITE_PATH"
    )

    onesignal_app_id: str | None = Field(
        default=None, validation_alias="ONESIGNAL_APP_ID"
    )
    onesignal_key: str | None = Field(default=None, validation_alias="ONESIGNAL_KEY")

    turso_database_url: str | None = Field(
        default=None, validation_alias="TURSO_DATABASE_URL"
    )
    turso_auth_token: str | None = Field(
        default=None, validation_alias="TURSO_AUTH_TOKEN"
    )

    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")

    host: str = Field(default="0.0.0.0", validation_alias="HN30_HOST")  # noqa: S104
    port: int = Field(default=8080, ge=1, le=65535, validation_alias="HN30_PORT")
    refresh_interval_seconds: float = Field(
        default=300.0, gt=0, validation_alias="HN30_REFRESH_INTERVAL_SECONDS"
    )
    shutdown_grace_seconds: int = Field(
        default=5, ge=0, validation_alias="HN30_SHUTDOWN_GRACE_SECONDS"
    )
    api_prefix: str = Field(default="", validation_alias="HN30_API_PREFIX")

    @property
    def notifications_enabled(self) -> bool:
        """Whether both OneSignal credentials are present."""
        return bool(self.onesignal_app_id and self.onesignal_key)

    @property
    def replica_enabled(self) -> bool:
        """Whether both Turso credentials are present."""
        return bool(self.turso_database_url and self.turso_auth_token)

    @property
    def summaries_enabled(self) -> bool:
        """Whether a Gemini API key is configured."""
        return bool(self.gemini_api_key)


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
