"""
Flash notices (toasts) kept in the client's durable storage.

A handler pushes a notice before redirecting (Post/Redirect/Get); the next
rendered page pops and shows it exactly once.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import List

from backend.identity_access.client_storage import ClientStorage

logger = logging.getLogger("dpt.web")

NOTICES_KEY = "notices"
_MAX_PENDING = 5


@dataclass(frozen=True)
class Notice:
    kind: str  # "success" | "error"
    title: str
    message: str = ""


def push_notice(storage: ClientStorage, kind: str, title: str, message: str = "") -> None:
    pending = _load(storage)
    pending.append({"kind": kind, "title": title, "message": message})
    storage.set_item(NOTICES_KEY, json.dumps(pending[-_MAX_PENDING:]))


def pop_notices(storage: ClientStorage) -> List[Notice]:
    pending = _load(storage)
    if pending:
        storage.remove_item(NOTICES_KEY)
    return [
        Notice(kind=str(n.get("kind", "success")), title=str(n.get("title", "")), message=str(n.get("message", "")))
        for n in pending
    ]


def _load(storage: ClientStorage) -> list:
    raw = storage.get_item(NOTICES_KEY)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("dropping corrupt notices for client %s", storage.client_id)
        return []
    return [n for n in data if isinstance(n, dict)] if isinstance(data, list) else []
