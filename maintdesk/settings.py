# maintdesk/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _str(name: str, default: str | None = None, *, required: bool = False) -> str:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        if required:
            raise RuntimeError(f"Missing required env var: {name}")
        if default is None:
            return ""
        return default
    return v.strip()


def _int(name: str, default: int | None = None, *, required: bool = False) -> int:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        if required:
            raise RuntimeError(f"Missing required env var: {name}")
        if default is None:
            raise RuntimeError(f"Missing env var (no default): {name}")
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Invalid int env var {name}={v!r}") from e


def _float(name: str, default: float | None = None, *, required: bool = False) -> float:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        if required:
            raise RuntimeError(f"Missing required env var: {name}")
        if default is None:
            raise RuntimeError(f"Missing env var (no default): {name}")
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Invalid float env var {name}={v!r}") from e


@dataclass(frozen=True, slots=True)
class Settings:
    # Runtime
    ENV: str
    LOG_LEVEL: str

    # REST API
    API_BASE_URL: str
    API_TOKEN: str
    API_HTTP_TIMEOUT_S: float
    API_HTTP_RETRIES: int
    API_RETRY_MIN_DELAY_S: float
    API_RETRY_MAX_DELAY_S: float

    # List pages
    SEARCH_DEBOUNCE_MS: int
    DEFAULT_PER_PAGE: int

    # MCP
    MCP_HOST: str
    MCP_PORT: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Runtime
    env = _str("ENV", "dev")
    log_level = _str("LOG_LEVEL", "INFO")

    # REST API
    api_base_url = _str("API_BASE_URL", "http://localhost:8000").rstrip("/")
    api_token = _str("API_TOKEN", "")
    api_timeout = _float("API_HTTP_TIMEOUT_S", 30.0)
    api_retries = _int("API_HTTP_RETRIES", 3)
    api_min_delay = _float("API_RETRY_MIN_DELAY_S", 0.5)
    api_max_delay = _float("API_RETRY_MAX_DELAY_S", 5.0)

    if api_retries < 1:
        raise RuntimeError(f"API_HTTP_RETRIES must be >= 1, got {api_retries}")

    # List pages
    debounce_ms = _int("SEARCH_DEBOUNCE_MS", 300)
    per_page = _int("DEFAULT_PER_PAGE", 15)

    # MCP
    mcp_host = _str("MCP_HOST", "0.0.0.0")
    mcp_port = _int("MCP_PORT", 4010)

    return Settings(
        ENV=env,
        LOG_LEVEL=log_level,

        API_BASE_URL=api_base_url,
        API_TOKEN=api_token,
        API_HTTP_TIMEOUT_S=api_timeout,
        API_HTTP_RETRIES=api_retries,
        API_RETRY_MIN_DELAY_S=api_min_delay,
        API_RETRY_MAX_DELAY_S=api_max_delay,

        SEARCH_DEBOUNCE_MS=debounce_ms,
        DEFAULT_PER_PAGE=per_page,

        MCP_HOST=mcp_host,
        MCP_PORT=mcp_port,
    )
