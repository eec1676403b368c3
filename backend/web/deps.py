"""
Request-scoped dependencies shared by the route modules.

The progress repository and the client storage backend are process-wide and
swappable (tests call `set_repo` / `set_client_storage_backend`). Everything
tied to one browser (client storage view, auth context) is built per request
by the client-context middleware and read back from `request.state`.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import Request

from backend.identity_access.client_storage import ClientStorage, MemoryStorageBackend
from backend.identity_access.context import AuthContext
from backend.identity_access.stores import Session
from backend.progress.repo_memory import InMemoryProgressRepo
from backend.progress.service import ProgressService

REPO: Any = InMemoryProgressRepo()
SERVICE = ProgressService(REPO)
CLIENT_STORAGE_BACKEND: Any = MemoryStorageBackend()


def set_repo(repo: Any) -> None:
    """Swap the progress repository (wiring at startup, fakes in tests)."""
    global REPO, SERVICE
    REPO = repo
    SERVICE = ProgressService(repo)


def set_client_storage_backend(backend: Any) -> None:
    global CLIENT_STORAGE_BACKEND
    CLIENT_STORAGE_BACKEND = backend


def get_service() -> ProgressService:
    return SERVICE


def get_client_storage(request: Request) -> ClientStorage:
    return request.state.client_storage


def get_auth_context(request: Request) -> AuthContext:
    return request.state.auth


def current_session(request: Request) -> Optional[Session]:
    auth = getattr(request.state, "auth", None)
    return auth.session if auth is not None else None


def require_session(request: Request) -> Session:
    """Session of the caller; the guard middleware has already enforced presence."""
    session = current_session(request)
    if session is None:
        raise RuntimeError("route reached without a session")
    return session
