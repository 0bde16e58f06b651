# src/todo_titans/core/state.py

from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..config import Settings
from .ports import ProfileRepo, SessionService, TaskStoreClient


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Settings

    backend_name: str
    session: SessionService
    tasks: TaskStoreClient
    profiles: ProfileRepo

    # Only set for network backends; closed on shutdown.
    http_client: httpx.AsyncClient | None = None
