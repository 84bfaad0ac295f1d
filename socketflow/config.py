"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env(*names: str, default: str = "") -> str:
    for name in names:
        raw = os.getenv(name)
        if raw is not None and str(raw).strip():
            return str(raw).strip()
    return default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass
class Settings:
    log_level: str = field(default_factory=lambda: _env("SOCKETFLOW_LOG_LEVEL", "LOG_LEVEL", default="INFO").upper())
    # "human", "json" or "auto"
    log_format: str = field(default_factory=lambda: _env("SOCKETFLOW_LOG_FORMAT", "LOG_FORMAT", default="auto").lower())
    host: str = field(default_factory=lambda: _env("HOST", default="127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8080))


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
