"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend, put the repository root on
sys.path so `backend.*` imports resolve, and hand every test a fresh
in-memory progress repository and client storage backend.
"""
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Keep env-driven toggles from leaking between tests.

    Tests that need prod semantics set `DPT_ENV` themselves; everything else
    runs with development defaults.
    """
    for var in (
        "DPT_ENV",
        "DPT_TRUST_PROXY",
        "PROGRESS_BACKEND",
        "CLIENT_STORAGE_BACKEND",
        "DATABASE_URL",
        "DPT_CONFINE_SUPERVISOR",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_progress_state():
    """Fresh seeded repository and empty client storage per test."""
    from backend.identity_access.client_storage import MemoryStorageBackend
    from backend.progress.repo_memory import InMemoryProgressRepo
    from backend.web import deps

    deps.set_repo(InMemoryProgressRepo())
    deps.set_client_storage_backend(MemoryStorageBackend())
    yield


@pytest.fixture
def app():
    from backend.web import main

    return main.app
