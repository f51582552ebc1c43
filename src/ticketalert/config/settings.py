"""Application settings loaded from environment variables and .env.

Every integration is optional. A missing credential never stops the app from
starting; the matching component switches to its unconfigured variant instead
(empty event lists, non-persisting subscription store, email sender that only
logs). Each section exposes ``is_configured`` so the lifecycle can pick the
variant once at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_BASE_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class DatabaseSettings(BaseSettings):
    """Subscription database (DATABASE_*)."""

    model_config = SettingsConfigDict(**_BASE_CONFIG, env_prefix="DATABASE_")

    # Hey future me - empty URL means "demo mode": tracking requests succeed but nothing is
    # stored and the sweep sees no pending rows. Use sqlite+aiosqlite:///./ticketalert.db for
    # local runs or postgresql+asyncpg://... in production.
    url: str = Field(default="", description="SQLAlchemy async database URL")
    echo: bool = Field(default=False, description="Log SQL statements")
    create_tables: bool = Field(
        default=True, description="Create missing tables at startup"
    )
    pool_pre_ping: bool = Field(default=True)
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, ge=1)
    pool_recycle: int = Field(default=1800, ge=-1)

    @property
    def is_configured(self) -> bool:
        return bool(self.url.strip())

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class TicketmasterSettings(BaseSettings):
    """Ticketmaster Discovery API (TICKETMASTER_*)."""

    model_config = SettingsConfigDict(**_BASE_CONFIG, env_prefix="TICKETMASTER_")

    api_key: str = Field(default="", description="Discovery API consumer key")
    base_url: str = Field(default="https://app.ticketmaster.com/discovery/v2")
    timeout: float = Field(default=15.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())


class SpotifySettings(BaseSettings):
    """Spotify OAuth application credentials (SPOTIFY_*)."""

    model_config = SettingsConfigDict(**_BASE_CONFIG, env_prefix="SPOTIFY_")

    client_id: str = Field(default="")
    client_secret: str = Field(default="")
    redirect_uri: str = Field(
        default="http://localhost:8000/api/spotify/callback",
        description="Must match the redirect URI registered in the Spotify dashboard",
    )
    timeout: float = Field(default=30.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id.strip() and self.client_secret.strip())


class EmailSettings(BaseSettings):
    """Transactional email via Resend (RESEND_API_KEY, EMAIL_*)."""

    model_config = SettingsConfigDict(**_BASE_CONFIG, env_prefix="EMAIL_")

    api_key: str = Field(
        default="", validation_alias=AliasChoices("RESEND_API_KEY", "EMAIL_API_KEY")
    )
    api_url: str = Field(default="https://api.resend.com/emails")
    from_address: str = Field(default="TicketAlert Norge <onboarding@resend.dev>")
    timeout: float = Field(default=15.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())


class SweepSettings(BaseSettings):
    """Resale notification sweep (SWEEP_*)."""

    model_config = SettingsConfigDict(**_BASE_CONFIG, env_prefix="SWEEP_")

    delay_seconds: float = Field(
        default=0.2, ge=0, description="Pause between subscriptions in one pass"
    )
    # 0 disables the in-process loop; an external cron then calls /api/check-and-notify.
    interval_seconds: int = Field(default=0, ge=0)


class ObservabilitySettings(BaseSettings):
    """Logging output (LOG_*)."""

    model_config = SettingsConfigDict(**_BASE_CONFIG, env_prefix="LOG_")

    json_format: bool = Field(
        default=False,
        validation_alias=AliasChoices("LOG_JSON_FORMAT", "LOG_JSON"),
        description="Emit JSON log lines (production)",
    )

    @property
    def log_json_format(self) -> bool:
        return self.json_format


class Settings(BaseSettings):
    """Top-level application settings."""

    model_config = _BASE_CONFIG

    app_name: str = Field(default="ticketalert")
    log_level: str = Field(default="INFO")
    base_url: str = Field(
        default="http://localhost:8000", description="Public URL of this service"
    )
    cron_secret: str = Field(
        default="", description="Bearer secret guarding the sweep trigger"
    )
    cookie_secure: bool = Field(default=False, description="Mark session cookies Secure")
    domestic_artists_file: Path | None = Field(
        default=None, description="Override for the bundled domestic artist list"
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ticketmaster: TicketmasterSettings = Field(default_factory=TicketmasterSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    sweep: SweepSettings = Field(default_factory=SweepSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    def get_sqlite_db_path(self) -> Path | None:
        """Return the SQLite file path for file-backed SQLite URLs, else None."""
        url = self.database.url
        if not url.startswith("sqlite") or ":memory:" in url:
            return None
        _, _, path = url.partition(":///")
        return Path(path) if path else None


# Listen up, get_settings() is cached so every Depends(get_settings) shares one instance.
# Tests that need different settings should build Settings(...) directly and override the
# dependency, or call get_settings.cache_clear().
@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
