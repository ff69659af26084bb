"""Application settings.

Values come from, in order of precedence:

1. Process environment variables
2. ``.env`` file in the working directory
3. ``appsettings.{ENVIRONMENT}.json`` next to the base settings file
4. ``appsettings.json`` (path overridable with ``APPSETTINGS_PATH``)

Usage:
    from app.config import get_settings
    settings = get_settings()
"""

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_PORT = 5000
DEFAULT_CONNECTION_NAME = "DefaultConnection"
DEFAULT_ENVIRONMENT = "Production"
ENVIRONMENT_KEYS = ("ENVIRONMENT", "ASPNETCORE_ENVIRONMENT")


class StorageBackend(str, Enum):
    LOCAL = "local"
    S3 = "s3"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


def _resolve_environment(*sources: PydanticBaseSettingsSource) -> str:
    """Environment name from the first source that sets one, else ``Production``."""
    for source in sources:
        values = source()
        for key in ENVIRONMENT_KEYS:
            if values.get(key):
                return str(values[key])
    return DEFAULT_ENVIRONMENT


def _appsettings_files(environment: str) -> list[Path]:
    """Base settings file followed by its environment-specific overlay."""
    base = Path(os.environ.get("APPSETTINGS_PATH", "appsettings.json"))
    overlay = base.with_name(f"{base.stem}.{environment}{base.suffix}")
    return [base, overlay]


class Settings(BaseSettings):
    """Application settings loaded from the environment and JSON files."""

    # ── Database ───────────────────────────────────
    DefaultConnection: str | None = Field(
        default=None,
        description="Connection string override; wins over ConnectionStrings",
    )
    ConnectionStrings: dict[str, str] = Field(
        default_factory=dict,
        description="Named connection strings, usually from appsettings.json",
    )
    DB_ECHO: bool = Field(default=False, description="Log emitted SQL")

    # ── Hosting ────────────────────────────────────
    PORT: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    HOST: str = Field(default="0.0.0.0")
    ENVIRONMENT: str = Field(
        default=DEFAULT_ENVIRONMENT,
        validation_alias=AliasChoices(*ENVIRONMENT_KEYS),
    )
    HTTPS_REDIRECT: bool = Field(
        default=False,
        description="Redirect plain HTTP requests to HTTPS",
    )
    SEED_ON_STARTUP: bool = Field(
        default=False,
        description="Create the default identity roles at startup",
    )

    # ── Logging ────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: LogFormat = Field(default=LogFormat.CONSOLE)

    # ── Identity / JWT ─────────────────────────────
    JWT_SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_ISSUER: str = Field(default="BookFinalAPI")
    JWT_AUDIENCE: str = Field(default="BookFinalAPI")
    JWT_EXPIRE_MINUTES: int = Field(default=60, ge=1)

    # ── OTP ────────────────────────────────────────
    OTP_ISSUER: str = Field(default="BookFinalAPI")
    OTP_DIGITS: int = Field(default=6, ge=6, le=8)
    OTP_INTERVAL_SECONDS: int = Field(default=300, ge=30)

    # ── File storage ───────────────────────────────
    STORAGE_BACKEND: StorageBackend = Field(default=StorageBackend.LOCAL)
    STORAGE_LOCAL_PATH: str = Field(default="./uploads")
    STORAGE_PUBLIC_BASE_URL: str = Field(default="/uploads")
    S3_ENDPOINT_URL: str | None = Field(default=None)
    S3_ACCESS_KEY: str = Field(default="")
    S3_SECRET_KEY: str = Field(default="")
    S3_BUCKET: str = Field(default="bookfinal")
    MAX_UPLOAD_SIZE_MB: int = Field(default=10, ge=1, le=500)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        env_nested_delimiter="__",
        case_sensitive=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # The overlay is named after the environment resolved from the sources
        # above it. Later JSON files override earlier ones.
        environment = _resolve_environment(init_settings, env_settings, dotenv_settings)
        json_settings = JsonConfigSettingsSource(
            settings_cls, json_file=_appsettings_files(environment)
        )
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            json_settings,
            file_secret_settings,
        )

    @property
    def connection_string(self) -> str | None:
        """Environment override first, then the named connection string."""
        if self.DefaultConnection:
            return self.DefaultConnection
        return self.ConnectionStrings.get(DEFAULT_CONNECTION_NAME)

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, parsed once."""
    return Settings()
