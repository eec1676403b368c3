"""
Wiring: settings select the progress repository and the client storage.

Notes:
    A minimal fake `supabase` module is placed in `sys.modules` so the
    Supabase branch can be exercised without network access.
"""
from __future__ import annotations

import sys
import types
from dataclasses import replace

import pytest

from backend.identity_access.client_storage import JsonFileStorageBackend, MemoryStorageBackend
from backend.progress.repo_memory import InMemoryProgressRepo
from backend.progress.repo_rest import RestProgressRepo
from backend.progress.repo_supabase import SupabaseProgressRepo
from backend.web.config import AppSettings
from backend.web.wiring import build_client_storage_backend, build_progress_repo


def test_memory_is_the_default():
    assert isinstance(build_progress_repo(AppSettings()), InMemoryProgressRepo)
    assert isinstance(build_client_storage_backend(AppSettings()), MemoryStorageBackend)


def test_rest_backend_uses_base_url():
    repo = build_progress_repo(AppSettings(progress_backend="rest", api_base_url="https://api.example.edu/api/"))
    try:
        assert isinstance(repo, RestProgressRepo)
        assert repo.base_url == "https://api.example.edu/api"
    finally:
        repo.close()


def test_unconfigured_supabase_falls_back_in_dev():
    assert isinstance(build_progress_repo(AppSettings(progress_backend="supabase")), InMemoryProgressRepo)


def test_unconfigured_supabase_aborts_in_prod():
    with pytest.raises(SystemExit):
        build_progress_repo(AppSettings(environment="prod", progress_backend="supabase"))


def test_supabase_backend_builds_client(monkeypatch: pytest.MonkeyPatch):
    created = {}

    def create_client(url, key):
        created["args"] = (url, key)
        return types.SimpleNamespace(storage=types.SimpleNamespace(from_=lambda bucket: None))

    monkeypatch.setitem(sys.modules, "supabase", types.SimpleNamespace(create_client=create_client))
    settings = replace(
        AppSettings(),
        progress_backend="supabase",
        supabase_url="https://x.supabase.co",
        supabase_service_key="service-key",
        storage_bucket="phd-files",
    )
    repo = build_progress_repo(settings)
    assert isinstance(repo, SupabaseProgressRepo)
    assert repo.storage.bucket == "phd-files"
    assert created["args"] == ("https://x.supabase.co", "service-key")


def test_file_client_storage(tmp_path):
    backend = build_client_storage_backend(
        AppSettings(client_storage_backend="file", client_storage_path=str(tmp_path / "cs.json"))
    )
    assert isinstance(backend, JsonFileStorageBackend)


def test_unknown_client_storage_falls_back_to_memory():
    assert isinstance(build_client_storage_backend(AppSettings(client_storage_backend="redis")), MemoryStorageBackend)
