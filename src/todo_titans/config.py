# src/todo_titans/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the offline backend needs none).
- Paths default to a gitignored local directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

BACKEND_FIREBASE = "firebase"
BACKEND_MEMORY = "memory"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Backend selection ----
    backend: str

    # ---- Firebase ----
    firebase_api_key: str
    firebase_database_url: str
    auth_base_url: str
    token_base_url: str
    http_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path

    # ---- Home screen ----
    strip_days: int

    @property
    def firebase_configured(self) -> bool:
        return bool(self.firebase_api_key.strip() and self.firebase_database_url.strip())

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo-titans").strip() or "todo-titans"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        firebase_api_key = _env(_k("FIREBASE_API_KEY"), "").strip()
        firebase_database_url = _env(_k("FIREBASE_DATABASE_URL"), "").strip().rstrip("/")

        # Without an API key there is nothing to talk to, so default to the offline backend.
        default_backend = BACKEND_FIREBASE if firebase_api_key else BACKEND_MEMORY
        backend = _env(_k("BACKEND"), default_backend).strip().lower()
        if backend not in (BACKEND_FIREBASE, BACKEND_MEMORY):
            backend = default_backend

        auth_base_url = _env(
            _k("AUTH_BASE_URL"), "https://identitytoolkit.googleapis.com/v1"
        ).rstrip("/")
        token_base_url = _env(_k("TOKEN_BASE_URL"), "https://securetoken.googleapis.com/v1").rstrip("/")
        http_timeout_seconds = max(1.0, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 15.0))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")

        strip_days = max(1, _env_int(_k("STRIP_DAYS"), 7))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend=backend,
            firebase_api_key=firebase_api_key,
            firebase_database_url=firebase_database_url,
            auth_base_url=auth_base_url,
            token_base_url=token_base_url,
            http_timeout_seconds=http_timeout_seconds,
            data_dir=data_dir,
            session_path=session_path,
            strip_days=strip_days,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
