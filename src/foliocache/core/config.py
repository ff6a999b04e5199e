# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

import json
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FOLIOCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Cache backend
    cache_backend: str = "redis"  # "redis", "memory" or "none"
    redis_url: str = ""  # e.g. "redis://:secret@cache:6379/0"; overrides host/port when set
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0
    redis_tls: bool = False
    redis_connect_timeout: float = 10.0
    redis_op_timeout: float = 0.25
    redis_reconnect_max_attempts: int = 10

    # TTL classes (seconds)
    ttl_short: int = 300
    ttl_medium: int = 3600
    ttl_long: int = 86400
    ttl_week: int = 604800

    # Per content type key prefix overrides, e.g. "blog=posts:,sns=social:"
    key_prefixes: Annotated[dict[str, str], NoDecode] = {}

    @field_validator("key_prefixes", mode="before")
    @classmethod
    def _parse_key_prefixes(cls, v: object) -> dict[str, str]:
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("{"):
                return json.loads(v)
            pairs = [p.split("=", 1) for p in v.split(",") if "=" in p]
            return {k.strip(): p.strip() for k, p in pairs if k.strip()}
        return v if isinstance(v, dict) else {}

    single_flight: bool = False
    warm_on_startup: bool = True

    # Bundled JSON content source
    content_dir: Path = Path("data")

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v if isinstance(v, list) else []

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    return Settings()
