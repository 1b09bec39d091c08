from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - STORE_BACKEND: 'memory' (default) or 'rest'
    - STORE_URL: base URL of the hosted store (required for 'rest')
    - STORE_ANON_KEY: anon API key sent with table and auth requests
    - STORE_SERVICE_KEY: service key used for object storage uploads
    - STORE_TIMEOUT: request timeout in seconds (default: 30)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level (default: INFO)
    """

    store_backend: str
    store_url: str
    store_anon_key: str
    store_service_key: str
    store_timeout: float
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value)
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return application settings, read from the environment once per process."""
    backend = _get_env("STORE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "rest"}:
        backend = "memory"

    return Settings(
        store_backend=backend,
        store_url=_get_env("STORE_URL", "").strip().rstrip("/"),
        store_anon_key=_get_env("STORE_ANON_KEY", ""),
        store_service_key=_get_env("STORE_SERVICE_KEY", ""),
        store_timeout=_parse_float(_get_env("STORE_TIMEOUT", "30"), 30.0),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
