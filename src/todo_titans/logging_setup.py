# src/todo_titans/logging_setup.py

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

LOG_FILE_NAME = "todo.log"

# Realtime Database calls carry the ID token as ?auth=..., Identity Toolkit calls the API key as ?key=...
_SECRET_PARAM_RE = re.compile(r"([?&](?:auth|key|refresh_token)=)[^&\s\"']+")


def redact_secrets(text: str) -> str:
    return _SECRET_PARAM_RE.sub(r"\1***", text)


class _SecretFilter(logging.Filter):
    """Masks credentials in query strings (httpx logs every request URL at INFO)."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        clean = redact_secrets(msg)
        if clean != msg:
            record.msg = clean
            record.args = None
        return True


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console shares the terminal with the prompt, so:
    - todo_titans logs pass, except backends.* below WARNING (one line per request otherwise)
    - captured Python warnings only at ERROR+
    - everything third-party only at WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("todo_titans.backends."):
            return record.levelno >= logging.WARNING
        if name.startswith("todo_titans."):
            return True
        if name == "py.warnings":
            return record.levelno >= logging.ERROR
        return record.levelno >= logging.WARNING


def _formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install two handlers on the root logger:
    - stderr: filtered for the interactive console
    - <log_dir>/todo.log: everything at `file_level`, credentials masked

    Idempotent: existing root handlers are replaced. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    secrets = _SecretFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_formatter())
    console.addFilter(_ConsoleNoiseFilter())
    console.addFilter(secrets)
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(_formatter())
    file_handler.addFilter(secrets)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    logging.getLogger("httpx").setLevel(logging.INFO)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return log_file
