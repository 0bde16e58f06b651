# src/todo_titans/backends/firebase.py

from __future__ import annotations

"""
Firebase adapters over the public REST APIs (httpx.AsyncClient).

- FirebaseSession: Identity Toolkit sign-in / sign-up / password reset,
  Secure Token refresh, session persisted to a local JSON file.
- FirebaseTaskStore: Realtime Database under /Tasks, live query via the
  REST streaming endpoint (Server-Sent Events).
- FirebaseProfileRepo: one-shot read of /users/<uid>.

All failures are mapped onto core.errors; nothing here retries.
"""

import contextlib
import json
import logging
import os
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

import httpx

from ..config import Settings
from ..core.errors import AuthError, ProfileNotFound, StoreError
from ..core.ports import UserProfile
from ..tasks.task_models import Task, tasks_from_children

logger = logging.getLogger(__name__)

TASKS_ROOT = "Tasks"
USERS_ROOT = "users"

# Refresh the id token this many seconds before it actually expires.
TOKEN_SKEW_SECONDS = 60.0

class TokenProvider(Protocol):
    def __call__(self, *, force_refresh: bool = False) -> Awaitable[str]: ...


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    timeout = httpx.Timeout(settings.http_timeout_seconds, connect=min(5.0, settings.http_timeout_seconds))
    return httpx.AsyncClient(timeout=timeout)


def _error_code(resp: httpx.Response) -> str:
    """
    Pull the error code out of a Firebase error body.

    Identity Toolkit: {"error": {"message": "INVALID_PASSWORD", ...}}
    Secure Token / RTDB: {"error": "..."} (plus "error_description" sometimes)
    """
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return str(err.get("message") or f"HTTP {resp.status_code}")
    if isinstance(err, str) and err:
        return err
    return f"HTTP {resp.status_code}"


def _load_json(path: Path) -> dict[str, Any]:
    val = json.loads(path.read_text("utf-8"))
    if isinstance(val, dict):
        return val
    raise ValueError("Expected JSON object")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        # Holds a refresh token; keep it private on disk.
        os.chmod(path, 0o600)


@dataclass(slots=True)
class SessionData:
    user_id: str
    id_token: str
    refresh_token: str
    expires_at: float


class FirebaseSession:
    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._api_key = settings.firebase_api_key
        self._auth_base = settings.auth_base_url
        self._token_base = settings.token_base_url
        self._session_path = Path(settings.session_path)
        self._client = client
        self._clock = clock
        self._data: SessionData | None = self._restore()

    # ---- persistence ----

    def _restore(self) -> SessionData | None:
        if not self._session_path.exists():
            return None
        try:
            raw = _load_json(self._session_path)
            data = SessionData(
                user_id=str(raw["user_id"]),
                id_token=str(raw["id_token"]),
                refresh_token=str(raw["refresh_token"]),
                expires_at=float(raw.get("expires_at", 0.0)),
            )
            if not data.user_id or not data.refresh_token:
                raise ValueError("session file is missing required fields")
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to restore session from %s: %r", self._session_path, e)
            return None
        logger.info("Session restored for user=%s", data.user_id)
        return data

    def _save(self, data: SessionData) -> None:
        self._data = data
        try:
            _atomic_write_json(self._session_path, asdict(data))
        except OSError as e:
            # The in-memory session still works for this run.
            logger.error("Failed to write session file %s: %r", self._session_path, e)

    def _forget(self) -> None:
        self._data = None
        try:
            self._session_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            # Signed out for this run only; the next start would restore the file.
            logger.error("Failed to remove session file %s: %r", self._session_path, e)

    # ---- transport ----

    async def _post(self, url: str, *, json_body: dict[str, Any] | None = None, form: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            resp = await self._client.post(url, params={"key": self._api_key}, json=json_body, data=form)
        except httpx.HTTPError as e:
            raise AuthError("Network error while contacting the sign-in service.") from e
        if resp.status_code >= 400:
            code = _error_code(resp)
            logger.debug("Auth call failed url=%s status=%s code=%s", url, resp.status_code, code)
            raise AuthError.from_code(code)
        try:
            body = resp.json()
        except ValueError as e:
            raise AuthError("Malformed response from the sign-in service.") from e
        if not isinstance(body, dict):
            raise AuthError("Malformed response from the sign-in service.")
        return body

    def _accept_credentials(self, body: dict[str, Any]) -> str:
        uid = str(body.get("localId") or "")
        if not uid:
            raise AuthError("Malformed response from the sign-in service.")
        self._save(
            SessionData(
                user_id=uid,
                id_token=str(body.get("idToken") or ""),
                refresh_token=str(body.get("refreshToken") or ""),
                expires_at=self._clock() + float(body.get("expiresIn") or 3600),
            )
        )
        return uid

    # ---- SessionService ----

    def current_user(self) -> str | None:
        return self._data.user_id if self._data else None

    async def sign_in(self, email: str, password: str) -> str:
        body = await self._post(
            f"{self._auth_base}/accounts:signInWithPassword",
            json_body={"email": email, "password": password, "returnSecureToken": True},
        )
        uid = self._accept_credentials(body)
        logger.info("Signed in user=%s", uid)
        return uid

    async def sign_up(self, email: str, password: str) -> str:
        body = await self._post(
            f"{self._auth_base}/accounts:signUp",
            json_body={"email": email, "password": password, "returnSecureToken": True},
        )
        uid = self._accept_credentials(body)
        logger.info("Signed up user=%s", uid)
        return uid

    async def send_password_reset(self, email: str) -> None:
        await self._post(
            f"{self._auth_base}/accounts:sendOobCode",
            json_body={"requestType": "PASSWORD_RESET", "email": email},
        )
        logger.info("Password reset requested")

    async def sign_out(self) -> None:
        # Firebase ID tokens are stateless; signing out only drops the local session.
        uid = self.current_user()
        self._forget()
        logger.info("Signed out user=%s", uid)

    async def id_token(self, *, force_refresh: bool = False) -> str:
        """
        A valid ID token for database calls, refreshed when close to expiry.

        force_refresh skips the cached token (the database revoked it early).
        """
        data = self._data
        if data is None:
            raise AuthError("Not signed in.")
        if not force_refresh and data.id_token and data.expires_at - TOKEN_SKEW_SECONDS > self._clock():
            return data.id_token

        try:
            body = await self._post(
                f"{self._token_base}/token",
                form={"grant_type": "refresh_token", "refresh_token": data.refresh_token},
            )
        except AuthError as e:
            if e.code is not None:
                # The refresh token was rejected; the stored session is useless now.
                logger.warning("Token refresh rejected (%s); clearing session", e.code)
                self._forget()
            raise

        self._save(
            SessionData(
                user_id=str(body.get("user_id") or data.user_id),
                id_token=str(body.get("id_token") or ""),
                refresh_token=str(body.get("refresh_token") or data.refresh_token),
                expires_at=self._clock() + float(body.get("expires_in") or 3600),
            )
        )
        logger.debug("ID token refreshed user=%s", data.user_id)
        return self._data.id_token if self._data else ""


# ---- Realtime Database ----


async def iter_sse(lines: AsyncIterator[str]) -> AsyncIterator[tuple[str, str]]:
    """Fold a text/event-stream line iterator into (event, data) pairs."""
    event = ""
    data: list[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if event or data:
                yield event or "message", "\n".join(data)
            event, data = "", []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
    if event or data:
        yield event or "message", "\n".join(data)


def _set_at(root: dict[str, Any], parts: list[str], value: Any) -> None:
    node = root
    for p in parts[:-1]:
        child = node.get(p)
        if not isinstance(child, dict):
            if value is None:
                return
            child = {}
            node[p] = child
        node = child
    if value is None:
        node.pop(parts[-1], None)
    else:
        node[parts[-1]] = value


def apply_stream_event(children: dict[str, Any], event: str, path: str, data: Any) -> None:
    """
    Apply one `put` / `patch` event to the locally mirrored query result.

    put:   replace the node at `path` (null deletes it)
    patch: merge each key of `data` under `path` (null values delete)
    """
    parts = [p for p in (path or "/").split("/") if p]
    if event == "put":
        if not parts:
            children.clear()
            if isinstance(data, dict):
                children.update(data)
            return
        _set_at(children, parts, data)
        return
    if event == "patch" and isinstance(data, dict):
        for key, value in data.items():
            _set_at(children, parts + [p for p in str(key).split("/") if p], value)


def _rtdb_error(what: str, resp: httpx.Response) -> StoreError:
    return StoreError(f"{what} failed: {_error_code(resp)}")


class _RealtimeDatabase:
    def __init__(self, settings: Settings, client: httpx.AsyncClient, token_provider: TokenProvider) -> None:
        self._base = settings.firebase_database_url
        self._client = client
        self._token_provider = token_provider

    def _url(self, *parts: str) -> str:
        return f"{self._base}/{'/'.join(parts)}.json"

    async def _auth_params(self, *, force_refresh: bool = False) -> dict[str, str]:
        try:
            return {"auth": await self._token_provider(force_refresh=force_refresh)}
        except AuthError as e:
            raise StoreError(str(e)) from e


class FirebaseTaskStore(_RealtimeDatabase):
    async def upsert(self, task_id: str, task: Task) -> None:
        if not task_id:
            raise StoreError("Task id is required")
        params = await self._auth_params()
        try:
            resp = await self._client.put(self._url(TASKS_ROOT, task_id), params=params, json=task.to_wire())
        except httpx.HTTPError as e:
            raise StoreError("Network error while saving the task.") from e
        if resp.status_code >= 400:
            raise _rtdb_error("Save", resp)
        logger.debug("PUT task_id=%s", task_id)

    async def delete(self, task_id: str) -> None:
        if not task_id:
            raise StoreError("Task id is required")
        params = await self._auth_params()
        try:
            resp = await self._client.delete(self._url(TASKS_ROOT, task_id), params=params)
        except httpx.HTTPError as e:
            raise StoreError("Network error while deleting the task.") from e
        if resp.status_code >= 400:
            raise _rtdb_error("Delete", resp)
        logger.debug("DELETE task_id=%s", task_id)

    async def watch(self, owner_id: str) -> AsyncIterator[list[Task]]:
        """
        Live query over the streaming endpoint.

        `auth_revoked` (the ID token expired mid-stream) reopens the stream with a
        freshly refreshed token; the new stream starts with a full `put` of the
        result set. A second revocation before any data arrives, a failed refresh,
        `cancel` or the server closing the stream end the query with StoreError.
        """
        # RTDB query parameters are JSON literals.
        query = {"orderBy": json.dumps("userId"), "equalTo": json.dumps(owner_id)}
        headers = {"Accept": "text/event-stream"}
        # The stream is long-lived; only connecting is bounded.
        timeout = httpx.Timeout(None, connect=10.0)

        children: dict[str, Any] = {}
        force_refresh = False
        while True:
            params = await self._auth_params(force_refresh=force_refresh)
            params.update(query)
            revoked = False
            try:
                async with self._client.stream(
                    "GET", self._url(TASKS_ROOT), params=params, headers=headers, timeout=timeout
                ) as resp:
                    if resp.status_code >= 400:
                        await resp.aread()
                        raise _rtdb_error("Task query", resp)
                    logger.info("Task stream open owner=%s", owner_id)

                    async for event, raw in iter_sse(resp.aiter_lines()):
                        if event in ("put", "patch"):
                            try:
                                payload = json.loads(raw)
                            except ValueError:
                                logger.warning("Skipping malformed %s event: %r", event, raw[:200])
                                continue
                            if not isinstance(payload, dict):
                                continue
                            force_refresh = False
                            apply_stream_event(children, event, str(payload.get("path") or "/"), payload.get("data"))
                            yield tasks_from_children(children)
                        elif event == "keep-alive":
                            continue
                        elif event == "cancel":
                            raise StoreError("The database cancelled the task query.")
                        elif event == "auth_revoked":
                            if force_refresh:
                                raise StoreError("Credentials expired; sign in again.")
                            revoked = True
                            break
                        else:
                            logger.debug("Ignoring stream event %r", event)
            except httpx.HTTPError as e:
                raise StoreError("Task stream failed.") from e

            if not revoked:
                raise StoreError("Task stream closed by the server.")
            logger.info("Task stream token revoked owner=%s; reopening with a fresh token", owner_id)
            force_refresh = True


class FirebaseProfileRepo(_RealtimeDatabase):
    async def get_once(self, user_id: str) -> UserProfile:
        params = await self._auth_params()
        try:
            resp = await self._client.get(self._url(USERS_ROOT, user_id), params=params)
        except httpx.HTTPError as e:
            raise StoreError("Network error while reading the profile.") from e
        if resp.status_code >= 400:
            raise _rtdb_error("Profile read", resp)
        try:
            body = resp.json()
        except ValueError as e:
            raise StoreError("Malformed profile record.") from e
        if not isinstance(body, dict):
            raise ProfileNotFound(user_id)
        return UserProfile(
            user_id=user_id,
            first_name=str(body.get("firstName") or ""),
            last_name=str(body.get("lastName") or ""),
        )
