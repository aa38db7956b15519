"""Application configuration accessors.

Centralizes environment variable parsing & defaults so the app factory,
the store and the collaborator clients read settings from one place.
"""
from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

DEFAULT_SECRET_KEY = "dev-secret-change-me"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CONTENT_API_URL = "https://cdn.contentful.com"
DEFAULT_CONTENT_ENVIRONMENT = "master"
DEFAULT_CONTENT_TIMEOUT = 10


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def secret_key() -> str:
    return _raw_env("RENTEASE_SECRET_KEY", DEFAULT_SECRET_KEY)  # type: ignore[return-value]


def data_path() -> str:
    return _raw_env("RENTEASE_DATA_PATH", str(BASE_DIR / "data.pkl"))  # type: ignore[return-value]


def storage_dir() -> str:
    return _raw_env("RENTEASE_STORAGE_DIR", str(BASE_DIR / "media"))  # type: ignore[return-value]


def log_level_name() -> str:
    return (_raw_env("RENTEASE_LOG_LEVEL", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()


def is_test_env() -> bool:
    return _raw_env("APP_ENV") == "test"


def content_settings() -> dict:
    """Connection settings for the headless content API."""
    try:
        timeout = int(_raw_env("CONTENT_TIMEOUT", str(DEFAULT_CONTENT_TIMEOUT)))  # type: ignore[arg-type]
    except ValueError:
        timeout = DEFAULT_CONTENT_TIMEOUT
    return {
        "space_id": (_raw_env("CONTENT_SPACE_ID") or "").strip(),
        "access_token": (_raw_env("CONTENT_ACCESS_TOKEN") or "").strip(),
        "environment": _raw_env("CONTENT_ENVIRONMENT", DEFAULT_CONTENT_ENVIRONMENT),
        "base_url": (_raw_env("CONTENT_API_URL", DEFAULT_CONTENT_API_URL) or "").rstrip("/"),
        "timeout": timeout,
    }


def flask_settings() -> dict:
    """Values loaded into ``app.config`` by the app factory."""
    return {
        "SECRET_KEY": secret_key(),
        "DATA_PATH": data_path(),
        "STORAGE_DIR": storage_dir(),
        "MAX_CONTENT_LENGTH": 16 * 1024 * 1024,
    }
