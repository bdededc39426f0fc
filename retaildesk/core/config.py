"""Environment-driven configuration for the RetailDesk dashboard.

Every setting is read once through ``pydantic-settings`` (environment
variables, then ``.env``/``.env.local``). Request handlers never read the
process environment themselves; they receive the ``AppSettings`` instance the
application was built with via ``request.app.state.settings``.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class ExecutionMode(str, Enum):
    """Where the app runs; drives redirect host selection and cookie flags."""

    LOCAL = "local"
    PRODUCTION = "production"


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "RetailDesk"
    EXECUTION_MODE: ExecutionMode = Field(
        default=ExecutionMode.PRODUCTION,
        validation_alias=AliasChoices("EXECUTION_MODE", "APP_ENV"),
    )
    LOG_LEVEL: str = "INFO"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    MESSAGES_DIR: Path | None = None
    TZ: str = "Asia/Kabul"
    CURRENCY_SYMBOL: str = "$"

    SUPABASE_URL: str = Field(
        default="http://localhost:54321",
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    )
    SUPABASE_ANON_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
    )
    # Only needed for staff invitations; empty disables them.
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Empty list: any X-Forwarded-Host is trusted (a startup warning is logged).
    TRUSTED_FORWARDED_HOSTS: Annotated[list[str], NoDecode] = Field(default_factory=list)

    AUTH_COOKIE_PREFIX: str = "sb"
    AUTH_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 400
    LOCALE_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365

    @field_validator("EXECUTION_MODE", mode="before")
    @classmethod
    def parse_execution_mode(cls, value: Any) -> Any:
        # NODE_ENV-style values still map onto the two modes.
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"dev", "development", "local"}:
                return ExecutionMode.LOCAL
            if lowered in {"prod", "production", "stage", "staging"}:
                return ExecutionMode.PRODUCTION
        return value

    @field_validator("TRUSTED_FORWARDED_HOSTS", mode="before")
    @classmethod
    def parse_trusted_hosts(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip().lower() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip().lower() for item in value if str(item).strip()]
        raise TypeError("TRUSTED_FORWARDED_HOSTS must be a comma separated string or list")

    def _resolve_path(self, base: Path | None, fallback: Path) -> Path:
        return base if base is not None else fallback

    @property
    def templates_dir(self) -> Path:
        return self._resolve_path(self.TEMPLATES_DIR, self.BASE_DIR / "templates")

    @property
    def static_dir(self) -> Path:
        return self._resolve_path(self.STATIC_DIR, self.BASE_DIR / "static")

    @property
    def messages_dir(self) -> Path:
        return self._resolve_path(self.MESSAGES_DIR, self.BASE_DIR / "i18n" / "messages")

    @property
    def is_local(self) -> bool:
        return self.EXECUTION_MODE is ExecutionMode.LOCAL

    def forwarded_host_allowed(self, host: str) -> bool:
        if not self.TRUSTED_FORWARDED_HOSTS:
            return True
        return host.lower() in self.TRUSTED_FORWARDED_HOSTS


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
