# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

from todo_titans.logging_setup import redact_secrets, setup_logging


def test_redact_secrets_masks_tokens_and_keys() -> None:
    url = 'HTTP Request: GET https://db.test/Tasks.json?auth=eyJhbGc&orderBy=%22userId%22 "HTTP/1.1 200 OK"'
    assert redact_secrets(url) == (
        'HTTP Request: GET https://db.test/Tasks.json?auth=***&orderBy=%22userId%22 "HTTP/1.1 200 OK"'
    )
    assert redact_secrets("POST https://a.test/v1/accounts:signUp?key=AIza123") == (
        "POST https://a.test/v1/accounts:signUp?key=***"
    )
    assert redact_secrets("nothing to hide") == "nothing to hide"


def test_file_log_never_contains_the_token(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path, console_level=logging.CRITICAL)
        logging.getLogger("httpx").info("HTTP Request: %s %s", "GET", "https://db.test/Tasks.json?auth=secret-token")
        for h in root.handlers:
            h.flush()
        text = log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])

    assert "auth=***" in text
    assert "secret-token" not in text
