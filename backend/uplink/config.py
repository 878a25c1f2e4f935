"""Runtime settings, read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .record import TrailingPolicy

load_dotenv(Path(__file__).resolve().parent / ".env")

DEFAULT_PORT = 6


@dataclass
class Settings:
    port: int = DEFAULT_PORT
    trailing: TrailingPolicy = TrailingPolicy.IGNORE
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    backend_base: str = "http://localhost:8000"


def _split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def load_settings() -> Settings:
    """Load settings from the environment; unset variables keep their defaults."""

    trailing_raw = os.getenv("UPLINK_TRAILING", TrailingPolicy.IGNORE.value).strip().lower()
    try:
        trailing = TrailingPolicy(trailing_raw)
    except ValueError:
        raise ValueError(f"UPLINK_TRAILING must be 'ignore' or 'reject', got {trailing_raw!r}") from None

    port = _env_int("UPLINK_PORT", DEFAULT_PORT)
    if not 1 <= port <= 223:
        raise ValueError(f"UPLINK_PORT must be an application port in 1..223, got {port}")

    return Settings(
        port=port,
        trailing=trailing,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        cors_origins=_split_list(os.getenv("CORS_ORIGINS", "http://localhost:5173")),
        backend_base=os.getenv("BACKEND_BASE", "http://localhost:8000").rstrip("/"),
    )
