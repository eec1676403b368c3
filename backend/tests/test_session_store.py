"""
Session store: login / logout / restore against durable client storage.

Each test uses a fresh MemoryStorageBackend; "a fresh context" means a new
SessionStore over the same backend and client id, like a page reload.
"""
from __future__ import annotations

import json
import logging

import pytest

from backend.identity_access.client_storage import MemoryStorageBackend
from backend.identity_access.stores import (
    SESSION_KEY,
    MalformedSessionError,
    SessionStore,
    parse_session,
)


@pytest.fixture
def backend():
    return MemoryStorageBackend()


def _store(backend, client_id: str = "client-1") -> SessionStore:
    return SessionStore(backend.client(client_id))


def test_login_then_restore_in_fresh_context(backend):
    session = _store(backend).login("Jane", "coordinator")

    restored = _store(backend).restore()

    assert restored is not None
    assert restored.role == "coordinator"
    assert restored.display_name == "Jane"
    assert restored.subject_id == session.subject_id


def test_login_persists_name_role_and_id(backend):
    session = _store(backend).login("Abhay Kumar", "student")

    raw = json.loads(backend.client("client-1").get_item(SESSION_KEY))

    assert raw == {"name": "Abhay Kumar", "role": "student", "id": session.subject_id}
    assert session.subject_id.startswith("user-")


def test_each_login_generates_a_new_subject_id(backend):
    store = _store(backend)
    first = store.login("Jane", "student")
    second = store.login("Jane", "student")
    assert first.subject_id != second.subject_id


def test_logout_then_restore_yields_none(backend):
    store = _store(backend)
    store.login("Jane", "supervisor")
    store.logout()

    assert _store(backend).restore() is None
    assert backend.client("client-1").get_item(SESSION_KEY) is None


def test_logout_without_session_is_harmless(backend):
    _store(backend).logout()
    assert _store(backend).restore() is None


def test_legacy_record_without_id_gets_stable_generated_id(backend):
    storage = backend.client("client-1")
    storage.set_item(SESSION_KEY, json.dumps({"name": "X", "role": "student"}))

    first = _store(backend).restore()
    second = _store(backend).restore()

    assert first is not None and first.subject_id
    assert second is not None and second.subject_id == first.subject_id
    assert json.loads(storage.get_item(SESSION_KEY))["id"] == first.subject_id


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '"just a string"',
        json.dumps({"role": "student"}),
        json.dumps({"name": "  ", "role": "student"}),
        json.dumps({"name": "X", "role": "admin"}),
    ],
)
def test_malformed_record_restores_to_none_and_is_cleared(backend, raw, caplog):
    storage = backend.client("client-1")
    storage.set_item(SESSION_KEY, raw)

    with caplog.at_level(logging.WARNING, logger="dpt.identity_access"):
        assert _store(backend).restore() is None

    assert storage.get_item(SESSION_KEY) is None
    assert "malformed session" in caplog.text


def test_parse_session_raises_for_malformed_record():
    with pytest.raises(MalformedSessionError):
        parse_session("null")


def test_login_rejects_unknown_role(backend):
    with pytest.raises(ValueError):
        _store(backend).login("Jane", "dean")
    assert backend.client("client-1").get_item(SESSION_KEY) is None


def test_sessions_are_isolated_per_client(backend):
    _store(backend, "a").login("Jane", "student")
    assert _store(backend, "b").restore() is None


@pytest.mark.parametrize("name", ["", "   ", None])
def test_login_with_blank_name_still_succeeds(backend, name):
    session = _store(backend).login(name, "supervisor")
    assert session.display_name == "Supervisor"
    assert _store(backend).restore() == session
