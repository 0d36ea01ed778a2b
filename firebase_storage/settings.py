from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

DEFAULT_ENDPOINT = "https://firebasestorage.googleapis.com/v0/b/"


class StorageSettings(BaseModel):
    bucket: str
    endpoint: str = DEFAULT_ENDPOINT
    throw_on_cancel: bool = False
    http_timeout: float | None = Field(100.0, gt=0.0)
    progress_interval: float = Field(0.5, gt=0.0)
    chunk_size: int = Field(64 * 1024, ge=1)
    auth_token_env: str = "FIREBASE_AUTH_TOKEN"

    @field_validator("bucket")
    @classmethod
    def _strip_bucket(cls, value: str) -> str:
        bucket = value.strip().strip("/")
        if not bucket:
            raise ValueError("bucket must not be empty")
        return bucket

    @field_validator("endpoint")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"

    @property
    def auth_token(self) -> str:
        return os.getenv(self.auth_token_env, "")


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    log_file: Path | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        if value is None:
            return "INFO"
        return str(value).upper()


class Settings(BaseModel):
    storage: StorageSettings
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                FIREBASE_STORAGE_CONFIG environment variable or defaults to
                config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ValueError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("FIREBASE_STORAGE_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "DEFAULT_ENDPOINT",
    "Settings",
    "StorageSettings",
    "LoggingSettings",
    "get_settings",
]
