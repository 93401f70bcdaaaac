"""
Application settings — JSON configuration file merged with environment overrides.
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from docstore.errors import ConfigError

_DURATION = re.compile(r"^\s*(\d+)\s*([smh]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600}


def parse_duration(value: str) -> int:
    """Convert ``"30s"`` / ``"10m"`` / ``"1h"`` into seconds."""
    match = _DURATION.match(str(value))
    if not match:
        raise ConfigError(f"cannot parse duration '{value}'")
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClaimSettings(_Section):
    name: str = "docstore"
    url: str = "http://localhost:3000"
    roles: List[str] = Field(default_factory=lambda: ["User"])


class SecuritySettings(_Section):
    jwt_issuer: str = "login.example.com"
    jwt_secret: str = "change-me-in-production"
    cookie_name: str = "login_token"
    login_redirect: str = "http://localhost:3000/login"
    claim: ClaimSettings = Field(default_factory=ClaimSettings)
    cache_duration: str = "10m"

    @field_validator("cache_duration")
    @classmethod
    def _valid_duration(cls, v: str) -> str:
        parse_duration(v)
        return v

    @property
    def cache_seconds(self) -> int:
        return parse_duration(self.cache_duration)


class DatabaseSettings(_Section):
    connection_string: str = "sqlite:///./data/docstore.db"
    echo: bool = False


class LoggingSettings(_Section):
    file_path: Optional[str] = None
    log_level: str = "INFO"
    rolling_file_max_bytes: int = 10 * 1024 * 1024
    rolling_file_backups: int = 5


class FileServerSettings(_Section):
    path: Optional[str] = None
    url_path: str = "/ui"
    spa_index_file: str = "index.html"


class UploadSettings(_Section):
    allowed_file_types: List[str] = Field(default_factory=lambda: ["pdf", "png", "jpg", "jpeg"])
    max_upload_size: int = 20 * 1024 * 1024
    upload_path: str = "./data/uploads"


class FileStoreSettings(_Section):
    region: str = "eu-central-1"
    bucket: str = "docstore"
    key: Optional[str] = None
    secret: Optional[str] = None
    endpoint_url: Optional[str] = None


class AppSettings(_Section):
    name: str = "docstore"
    version: str = "2.0.0"
    build: str = "1-local"
    request_timeout_seconds: float = 30.0


class Settings(BaseSettings):
    app: AppSettings = Field(default_factory=AppSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    file_server: FileServerSettings = Field(default_factory=FileServerSettings, alias="fileServer")
    upload: UploadSettings = Field(default_factory=UploadSettings)
    filestore: FileStoreSettings = Field(default_factory=FileStoreSettings)

    model_config = SettingsConfigDict(
        env_prefix="DOCSTORE_",
        env_nested_delimiter="__",
        env_file=".env",
        populate_by_name=True,
        extra="ignore",
    )


def load_settings(path: str | Path) -> Settings:
    """Read the JSON configuration file; environment fills whatever it leaves out."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"could not open config file '{path}'") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config file '{path}' is not valid JSON: {e}") from e
    try:
        return Settings(**raw)
    except (ValidationError, ConfigError) as e:
        raise ConfigError(f"invalid configuration in '{path}': {e}") from e
