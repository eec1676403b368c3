"""
Durable per-client key/value storage (the server-side stand-in for a browser's
localStorage).

Why:
    Identity and a few per-browser conveniences (stored files, flash notices)
    belong to one client context, identified by an opaque random cookie. The
    web layer resolves that cookie to a `ClientStorage` view and hands it to
    the session store; nothing else knows which backend is in use.

Backends:
    - `MemoryStorageBackend`: process-local dict, for dev and tests.
    - `JsonFileStorageBackend`: single JSON document on disk, survives restarts.
    - `client_storage_db.DBStorageBackend`: Postgres via psycopg3 (production).

All values are strings; callers serialize JSON themselves, exactly like the
browser API this mirrors.
"""
from __future__ import annotations

import json
import logging
import os
import secrets
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger("dpt.identity_access")


def new_client_id() -> str:
    """Return a fresh opaque client-context id (URL-safe, 32 chars)."""
    return secrets.token_urlsafe(24)


class StorageBackend(Protocol):
    def read(self, client_id: str, key: str) -> Optional[str]: ...

    def write(self, client_id: str, key: str, value: str) -> None: ...

    def delete(self, client_id: str, key: str) -> None: ...

    def keys(self, client_id: str) -> List[str]: ...


class ClientStorage:
    """Key/value view bound to exactly one client context."""

    def __init__(self, backend: StorageBackend, client_id: str) -> None:
        if not client_id:
            raise ValueError("client_id required")
        self._backend = backend
        self.client_id = client_id

    def get_item(self, key: str) -> Optional[str]:
        return self._backend.read(self.client_id, key)

    def set_item(self, key: str, value: str) -> None:
        self._backend.write(self.client_id, key, value)

    def remove_item(self, key: str) -> None:
        self._backend.delete(self.client_id, key)

    def keys(self) -> List[str]:
        return self._backend.keys(self.client_id)


class MemoryStorageBackend:
    """Process-local storage. Lost on restart; never use in production."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def client(self, client_id: str) -> ClientStorage:
        return ClientStorage(self, client_id)

    def read(self, client_id: str, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(client_id, {}).get(key)

    def write(self, client_id: str, key: str, value: str) -> None:
        with self._lock:
            self._data.setdefault(client_id, {})[key] = value

    def delete(self, client_id: str, key: str) -> None:
        with self._lock:
            bucket = self._data.get(client_id)
            if bucket is not None:
                bucket.pop(key, None)
                if not bucket:
                    self._data.pop(client_id, None)

    def keys(self, client_id: str) -> List[str]:
        with self._lock:
            return sorted(self._data.get(client_id, {}).keys())


class JsonFileStorageBackend:
    """Keeps all client contexts in one JSON file.

    Writes go to a temporary sibling first and are moved into place with
    `os.replace`, so a crash never leaves a half-written document behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def client(self, client_id: str) -> ClientStorage:
        return ClientStorage(self, client_id)

    def _load(self) -> Dict[str, Dict[str, str]]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("client storage file %s is corrupt; starting empty", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Dict[str, str]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self._path)

    def read(self, client_id: str, key: str) -> Optional[str]:
        with self._lock:
            value = self._load().get(client_id, {}).get(key)
        return value if isinstance(value, str) else None

    def write(self, client_id: str, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data.setdefault(client_id, {})[key] = value
            self._save(data)

    def delete(self, client_id: str, key: str) -> None:
        with self._lock:
            data = self._load()
            bucket = data.get(client_id)
            if bucket is None or key not in bucket:
                return
            bucket.pop(key, None)
            if not bucket:
                data.pop(client_id, None)
            self._save(data)

    def keys(self, client_id: str) -> List[str]:
        with self._lock:
            return sorted(self._load().get(client_id, {}).keys())


__all__ = [
    "ClientStorage",
    "StorageBackend",
    "MemoryStorageBackend",
    "JsonFileStorageBackend",
    "new_client_id",
]
