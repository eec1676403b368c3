"""
Files a student keeps in their own client context ("Stored Files").

Entries live in durable client storage under `storedFiles` as JSON
`{file_name: {"data": <data URL>, "dateAdded": <ISO timestamp>}}`. A corrupt
document is treated as empty rather than breaking the page.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import math
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from backend.identity_access.client_storage import ClientStorage

logger = logging.getLogger("dpt.progress")

STORED_FILES_KEY = "storedFiles"

_IMAGE_EXTS = frozenset({"jpg", "jpeg", "png", "gif", "svg", "webp"})
_DOC_EXTS = frozenset({"doc", "docx"})


@dataclass(frozen=True)
class StoredFile:
    name: str
    data: str
    date_added: str

    @property
    def size(self) -> int:
        return approximate_size(self.data)

    @property
    def kind(self) -> str:
        return file_type(self.name)


def approximate_size(data: str) -> int:
    """Bytes represented by base64 text (4 characters carry 3 bytes)."""
    return math.ceil(len(data) * 3 / 4)


def format_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    return f"{num_bytes / (1024 * 1024):.2f} MB"


def file_type(file_name: str) -> str:
    """Classify by extension: image, pdf, doc or other."""
    ext = os.path.splitext(file_name)[1].lower().lstrip(".")
    if ext in _IMAGE_EXTS:
        return "image"
    if ext == "pdf":
        return "pdf"
    if ext in _DOC_EXTS:
        return "doc"
    return "other"


def to_data_url(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


def from_data_url(data: str) -> Tuple[str, bytes]:
    """Return (content type, raw bytes); raises ValueError for anything else."""
    header, sep, payload = data.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("not a base64 data URL")
    content_type = header[len("data:"):-len(";base64")] or "application/octet-stream"
    try:
        return content_type, base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("invalid base64 payload") from exc


class StoredFileStore:
    def __init__(self, storage: ClientStorage) -> None:
        self._storage = storage

    def _load(self) -> Dict[str, Dict[str, str]]:
        raw = self._storage.get_item(STORED_FILES_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("stored files document is corrupt for client %s", self._storage.client_id)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, files: Dict[str, Dict[str, str]]) -> None:
        self._storage.set_item(STORED_FILES_KEY, json.dumps(files))

    def get(self, file_name: str) -> Optional[StoredFile]:
        entry = self._load().get(file_name)
        if not isinstance(entry, dict):
            return None
        return StoredFile(name=file_name, data=str(entry.get("data", "")), date_added=str(entry.get("dateAdded", "")))

    def get_all(self) -> List[StoredFile]:
        items = []
        for name, entry in self._load().items():
            if isinstance(entry, dict):
                items.append(StoredFile(name=name, data=str(entry.get("data", "")), date_added=str(entry.get("dateAdded", ""))))
        return sorted(items, key=lambda f: f.date_added, reverse=True)

    def store(self, file_name: str, data: str) -> StoredFile:
        """Store (or overwrite) `file_name`."""
        files = self._load()
        added = datetime.now(timezone.utc).isoformat()
        files[file_name] = {"data": data, "dateAdded": added}
        self._save(files)
        return StoredFile(name=file_name, data=data, date_added=added)

    def delete(self, file_name: str) -> bool:
        files = self._load()
        if file_name not in files:
            return False
        del files[file_name]
        self._save(files)
        return True

    def rename(self, old_name: str, new_name: str) -> bool:
        """Move an entry; refuses a missing source or an existing target."""
        files = self._load()
        if old_name not in files or not new_name or new_name in files:
            return False
        files[new_name] = files.pop(old_name)
        self._save(files)
        return True

    def total_size(self) -> int:
        return sum(approximate_size(str(e.get("data", ""))) for e in self._load().values() if isinstance(e, dict))


__all__ = [
    "StoredFile",
    "StoredFileStore",
    "STORED_FILES_KEY",
    "approximate_size",
    "format_size",
    "file_type",
    "to_data_url",
    "from_data_url",
]
