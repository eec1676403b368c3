"""Blob storage interface for meeting minutes and publication files."""
from __future__ import annotations

import threading
from typing import Dict, List, Protocol, Tuple


class BlobStorageProtocol(Protocol):
    """Protocol describing the blob store used for uploaded documents."""

    def put_object(self, *, key: str, body: bytes, content_type: str) -> None: ...

    def get_object(self, *, key: str) -> bytes: ...

    def delete_object(self, *, key: str) -> None: ...

    def public_url(self, *, key: str) -> str | None: ...

    def list_objects(self, *, prefix: str = "", search: str = "") -> List[str]: ...


class MemoryBlobStorage:
    """Process-local blob store. Objects have no public URL; callers stream bytes."""

    def __init__(self) -> None:
        self._objects: Dict[str, Tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def put_object(self, *, key: str, body: bytes, content_type: str) -> None:
        with self._lock:
            self._objects[key.lstrip("/")] = (bytes(body), content_type)

    def get_object(self, *, key: str) -> bytes:
        with self._lock:
            try:
                return self._objects[key.lstrip("/")][0]
            except KeyError:
                raise KeyError(key) from None

    def content_type(self, key: str) -> str:
        with self._lock:
            entry = self._objects.get(key.lstrip("/"))
        return entry[1] if entry else "application/octet-stream"

    def delete_object(self, *, key: str) -> None:
        with self._lock:
            self._objects.pop(key.lstrip("/"), None)

    def public_url(self, *, key: str) -> str | None:
        return None

    def list_objects(self, *, prefix: str = "", search: str = "") -> List[str]:
        with self._lock:
            keys = sorted(self._objects)
        return [k for k in keys if k.startswith(prefix) and search in k.rsplit("/", 1)[-1]]


__all__ = ["BlobStorageProtocol", "MemoryBlobStorage"]
