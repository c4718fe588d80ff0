from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Central configuration (env driven). Read once at startup."""

    def __init__(self) -> None:
        # Judge0 / remote execution
        self.judge0_api_url: str = (os.getenv("JUDGE0_BASE_URL") or os.getenv("JUDGE0_URL") or "").strip()
        self.judge0_timeout_s: float = _env_float("JUDGE0_TIMEOUT_S", 30.0)
        self.judge0_poll_interval_ms: int = max(0, _env_int("JUDGE0_POLL_INTERVAL_MS", 500))
        self.judge0_max_poll_attempts: int = max(1, _env_int("JUDGE0_MAX_POLL_ATTEMPTS", 30))
        self.judge0_encoding: str = (os.getenv("JUDGE0_ENCODING") or "plain").strip().lower()
        self.judge0_use_wait: bool = _env_bool("JUDGE0_USE_WAIT", False)
        self.judge0_batch_concurrency: int = max(1, _env_int("JUDGE0_BATCH_CONCURRENCY", 4))
        self.metadata_cache_seconds: int = _env_int("METADATA_CACHE_SECONDS", 3600)
        self.read_cache_disabled: bool = _env_bool("READ_CACHE_DISABLED", False)
        # App meta
        self.app_name: str = "Code Runner Backend"
        self.debug: bool = _env_bool("DEBUG", False)
        self.log_level: str = (os.getenv("LOG_LEVEL") or ("DEBUG" if self.debug else "INFO")).upper()
        self.allow_origins: list[str] = [
            o.strip().rstrip("/")
            for o in os.getenv("ALLOW_ORIGINS", _DEFAULT_ORIGINS).split(",")
            if o.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
