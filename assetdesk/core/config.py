"""Human-friendly configuration loader.

The ``AppSettings`` class centralises every environment variable AssetDesk
relies on, so anyone inspecting the project can quickly answer:

*What:* Which settings exist and what do they control?
*When:* They are read once, the first time ``get_settings`` is called.
*Why:* Centralising configuration keeps magic strings out of the codebase.
*How:* pydantic-settings reads the environment (and ``.env`` files) and fills
in sensible defaults so the service boots in development without extra setup.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "AssetDesk"
    APP_ENV: str = "dev"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")

    # ---- Persistence
    # ``sqlite`` keeps every collection in one table, ``json`` writes one file
    # per collection under DATA_DIR and ``memory`` forgets everything on exit.
    STORE_BACKEND: Literal["sqlite", "json", "memory"] = "sqlite"
    DB_URL: str = Field(default="", validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))

    # ---- Accounts and password reset
    APP_ORIGIN: str = "http://localhost:5173"
    RESET_TOKEN_TTL_SECONDS: int = 60 * 60
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # ---- Outbound email (the send-email function); empty URL logs instead
    EMAIL_API_URL: str = ""
    EMAIL_API_KEY: str = ""
    EMAIL_FROM: str = "noreply@assetdesk.local"
    EMAIL_TIMEOUT: float = 10.0

    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=list)
    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'assetdesk.db'}"

    @property
    def reset_link_base(self) -> str:
        return f"{self.APP_ORIGIN.rstrip('/')}/reset-password"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    if settings.STORE_BACKEND != "memory":
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings
