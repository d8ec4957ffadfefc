"""
Tillbook settings, read from the environment and an optional .env file.

Each group has its own prefix: STORAGE_*, API_* and INVOICE_*.
"""

import re
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the SQLite file lives and how it is pooled."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "tillbook.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0)  # ms a writer waits for the lock

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class InvoicingSettings(BaseSettings):
    """Tax, numbering and defaults applied when an invoice is created."""

    model_config = SettingsConfigDict(env_prefix="INVOICE_")

    tax_rate: Decimal = Decimal("0.18")
    number_prefix: str = "INV"
    number_max_attempts: int = Field(default=3, ge=1)
    default_customer_name: str = "Walk-in Customer"
    default_payment_method: str = "cash"

    @field_validator("tax_rate")
    @classmethod
    def tax_rate_in_range(cls, v: Decimal) -> Decimal:
        if not Decimal(0) <= v <= Decimal(1):
            raise ValueError("tax_rate must be between 0 and 1")
        return v

    @field_validator("number_prefix")
    @classmethod
    def prefix_is_uppercase_token(cls, v: str) -> str:
        if not re.fullmatch(r"[A-Z0-9]+", v):
            raise ValueError("number_prefix must be uppercase letters and digits")
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Tillbook"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    invoicing: InvoicingSettings = Field(default_factory=InvoicingSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
