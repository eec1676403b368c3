"""
Session store: who is logged in for one client context.

The session is mirrored to durable client storage under the key `user` as
JSON `{"name", "role", "id"}`. There is no credential check; the record is a
convenience identity, not a security boundary.
"""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from .client_storage import ClientStorage
from .domain import ALLOWED_ROLES, normalize_role

logger = logging.getLogger("dpt.identity_access")

SESSION_KEY = "user"


class MalformedSessionError(ValueError):
    """Persisted session data exists but cannot be turned into a Session."""


def new_subject_id() -> str:
    return f"user-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class Session:
    display_name: str
    role: str
    subject_id: str

    def to_json(self) -> str:
        return json.dumps({"name": self.display_name, "role": self.role, "id": self.subject_id})


def parse_session(raw: str) -> tuple[Session, bool]:
    """Parse a persisted session record.

    Returns the session and whether the subject id had to be generated
    (records written before ids existed only carry name and role).
    Raises MalformedSessionError for anything else.
    """
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedSessionError("session record is not valid JSON") from exc
    if not isinstance(data, dict):
        raise MalformedSessionError("session record is not an object")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MalformedSessionError("session record has no name")
    role = normalize_role(data.get("role"))
    if role is None:
        raise MalformedSessionError("session record has an unknown role")
    subject_id = data.get("id")
    backfilled = not isinstance(subject_id, str) or not subject_id.strip()
    if backfilled:
        subject_id = new_subject_id()
    return Session(display_name=name.strip(), role=role, subject_id=subject_id), backfilled


class SessionStore:
    """login / logout / restore against one client's durable storage."""

    def __init__(self, storage: ClientStorage) -> None:
        self._storage = storage

    def login(self, display_name: str, role: str) -> Session:
        canonical = normalize_role(role)
        if canonical is None:
            raise ValueError(f"role must be one of {sorted(ALLOWED_ROLES)}")
        # restore() rejects blank names.
        name = (display_name or "").strip() or canonical.title()
        session = Session(display_name=name, role=canonical, subject_id=new_subject_id())
        self._storage.set_item(SESSION_KEY, session.to_json())
        logger.info("session started role=%s subject=%s", session.role, session.subject_id)
        return session

    def logout(self) -> None:
        self._storage.remove_item(SESSION_KEY)

    def restore(self) -> Optional[Session]:
        raw = self._storage.get_item(SESSION_KEY)
        if raw is None:
            return None
        try:
            session, backfilled = parse_session(raw)
        except MalformedSessionError as exc:
            logger.warning("discarding malformed session for client %s: %s", self._storage.client_id, exc)
            self._storage.remove_item(SESSION_KEY)
            return None
        if backfilled:
            # Keep the generated id stable for later requests.
            self._storage.set_item(SESSION_KEY, session.to_json())
        return session


__all__ = ["Session", "SessionStore", "MalformedSessionError", "SESSION_KEY", "parse_session", "new_subject_id"]
