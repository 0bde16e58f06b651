# src/todo_titans/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires a concrete backend (Firebase REST or the offline demo) into AppState.
"""

from __future__ import annotations

import logging

from ..backends.firebase import (
    FirebaseProfileRepo,
    FirebaseSession,
    FirebaseTaskStore,
    create_http_client,
)
from ..backends.memory import create_demo_backend
from ..config import BACKEND_FIREBASE, BACKEND_MEMORY, Settings, get_settings
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_app_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if settings.backend == BACKEND_FIREBASE:
        if settings.firebase_configured:
            client = create_http_client(settings)
            session = FirebaseSession(settings, client)
            logger.info("Using Firebase backend db=%s", settings.firebase_database_url)
            return AppState(
                settings=settings,
                backend_name=BACKEND_FIREBASE,
                session=session,
                tasks=FirebaseTaskStore(settings, client, session.id_token),
                profiles=FirebaseProfileRepo(settings, client, session.id_token),
                http_client=client,
            )
        # Fallback for demos / local runs without external services.
        logger.warning(
            "Firebase backend selected but TODO_FIREBASE_API_KEY / TODO_FIREBASE_DATABASE_URL "
            "are not set; using the offline demo backend."
        )

    backend = create_demo_backend()
    return AppState(
        settings=settings,
        backend_name=BACKEND_MEMORY,
        session=backend.session,
        tasks=backend.tasks,
        profiles=backend.profile_repo,
    )


async def close_app_state(state: AppState) -> None:
    if state.http_client is not None:
        await state.http_client.aclose()
