"""
Configuration for the Ci client.

Settings come from the environment (prefix ``CIMEDIA_``) or a ``.env`` file.
Credentials live in a separate YAML file, and a Session is the immutable
result of authenticating with them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

SIZE_THRESHOLD = 5 * 1024 * 1024
CHUNK_SIZE = 10 * 1024 * 1024

_WORKSPACE_ID = re.compile(r"^[0-9a-f]{32}$")


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Client settings with validation."""

    model_config = SettingsConfigDict(
        env_prefix="CIMEDIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoints
    api_base_url: str = "https://api.cimediacloud.com"
    io_base_url: str = "https://io.cimediacloud.com"
    timeout: float = Field(300.0, gt=0, le=3600.0)  # seconds, per request

    # Upload settings
    multipart_threshold: int = Field(SIZE_THRESHOLD, ge=0)
    multipart_threshold_inclusive: bool = True
    chunk_size: int = Field(CHUNK_SIZE, ge=1)

    # Listing
    page_window: int = Field(5, ge=1)  # small so windowing problems are easy to spot
    list_limit: int = Field(50, ge=0)

    download_url_ttl: float = Field(3 * 60 * 60, ge=0)

    credentials_path: Optional[Path] = None

    log_level: LogLevel = LogLevel.INFO
    log_serialize: bool = False

    @field_validator("api_base_url", "io_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base URL must start with http:// or https://")
        return v.rstrip("/")

    def get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of configuration (without secrets)."""
        return {
            "api_base_url": self.api_base_url,
            "io_base_url": self.io_base_url,
            "timeout": self.timeout,
            "multipart_threshold": self.multipart_threshold,
            "multipart_threshold_inclusive": self.multipart_threshold_inclusive,
            "chunk_size": self.chunk_size,
            "page_window": self.page_window,
            "log_level": self.log_level.value,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance with validation."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"invalid settings: {e}")


class Credentials(BaseModel):
    """Account credentials, usually read from a YAML file."""

    username: str
    password: SecretStr
    client_id: str
    client_secret: SecretStr
    workspace_id: str

    @field_validator("workspace_id")
    @classmethod
    def validate_workspace_id(cls, v: str) -> str:
        if not _WORKSPACE_ID.match(v):
            raise ValueError("workspace_id must be 32 lowercase hex characters")
        return v

    @model_validator(mode="after")
    def validate_not_blank(self) -> "Credentials":
        for name in ("username", "client_id"):
            if not getattr(self, name).strip():
                raise ValueError(f"{name} must not be blank")
        return self

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Credentials":
        """Load credentials from a YAML mapping.

        Raises OSError if the file cannot be read and ConfigurationError if its
        contents are not valid credentials.
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"unreadable credentials file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"credentials file {path} must hold a mapping")
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid credentials in {path}: {e}")


def load_credentials(settings: Settings) -> Credentials:
    if settings.credentials_path is None:
        raise ConfigurationError("no credentials given and CIMEDIA_CREDENTIALS_PATH is not set")
    return Credentials.from_yaml(settings.credentials_path)


@dataclass(frozen=True)
class Session:
    """Authenticated context shared by every component of one client."""

    access_token: str = field(repr=False)
    workspace_id: str
