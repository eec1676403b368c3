"""
Wiring helpers that turn settings into collaborator instances.

Why:
    `main` should not know how a Supabase client or a psycopg-backed store is
    built. These helpers pick the implementation named by the settings, log
    the choice, and fall back to the in-memory variants in development when
    a remote collaborator is not configured.

Security:
    The Supabase client is built with the service role key; it never leaves
    the server.
"""
from __future__ import annotations

import logging

from backend.identity_access.client_storage import JsonFileStorageBackend, MemoryStorageBackend
from backend.progress.repo_memory import InMemoryProgressRepo
from backend.progress.repo_rest import RestProgressRepo
from backend.progress.repo_supabase import SupabaseProgressRepo

from .config import AppSettings

logger = logging.getLogger("dpt.web")


def build_progress_repo(settings: AppSettings):
    """Return the progress repository selected by PROGRESS_BACKEND."""
    backend = settings.progress_backend
    if backend == "rest":
        logger.info("Progress backend wired: REST %s", settings.api_base_url)
        return RestProgressRepo(settings.api_base_url, timeout=settings.api_timeout)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            if settings.is_prod:
                raise SystemExit("PROGRESS_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
            logger.warning("Supabase not configured; falling back to in-memory progress repo")
            return InMemoryProgressRepo()
        from supabase import create_client

        client = create_client(settings.supabase_url, settings.supabase_service_key)
        logger.info("Progress backend wired: Supabase (bucket=%s)", settings.storage_bucket)
        return SupabaseProgressRepo(client, bucket=settings.storage_bucket)
    if backend != "memory":
        logger.warning("Unknown PROGRESS_BACKEND=%s; using in-memory repo", backend)
    return InMemoryProgressRepo()


def build_client_storage_backend(settings: AppSettings):
    """Return the durable client storage selected by CLIENT_STORAGE_BACKEND."""
    backend = settings.client_storage_backend
    if backend == "db":
        from backend.identity_access.client_storage_db import DBStorageBackend

        logger.info("Client storage wired: Postgres")
        return DBStorageBackend(settings.database_url or None)
    if backend == "file":
        logger.info("Client storage wired: JSON file %s", settings.client_storage_path)
        return JsonFileStorageBackend(settings.client_storage_path)
    if backend != "memory":
        logger.warning("Unknown CLIENT_STORAGE_BACKEND=%s; using memory", backend)
    return MemoryStorageBackend()


__all__ = ["build_progress_repo", "build_client_storage_backend"]
