"""
Configuration and startup security checks for the progress tracker.

Why: Programme data (minutes, publications, exam requests) must not end up in
a throw-away process store or travel over plain HTTP in production. This
module reads the environment once into `AppSettings` and offers a single
guard that aborts insecure production start-ups while development stays
permissive.

Permissions: The caller needs no special privileges. Functions only read
environment variables; the guard raises `SystemExit` on fatal
misconfiguration.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DISPLAY_NAME = "Bharath Nayak Bhukya"


def _is_prod_like(env: str) -> bool:
    return (env or "").lower() in {"prod", "production", "stage", "staging"}


def _flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppSettings:
    environment: str = "dev"
    progress_backend: str = "memory"
    api_base_url: str = "http://localhost:8080/api"
    api_timeout: float = 10.0
    supabase_url: str = ""
    supabase_service_key: str = ""
    storage_bucket: str = "files"
    client_storage_backend: str = "memory"
    client_storage_path: str = ".tmp/client_storage.json"
    database_url: str = ""
    default_display_name: str = DEFAULT_DISPLAY_NAME
    confine_supervisor: bool = True

    @property
    def is_prod(self) -> bool:
        return _is_prod_like(self.environment)


def load_settings() -> AppSettings:
    try:
        timeout = float(os.getenv("PHD_API_TIMEOUT", "10") or 10)
    except ValueError:
        timeout = 10.0
    return AppSettings(
        environment=(os.getenv("DPT_ENV", "dev") or "dev").strip().lower(),
        progress_backend=(os.getenv("PROGRESS_BACKEND", "memory") or "memory").strip().lower(),
        api_base_url=(os.getenv("PHD_API_BASE_URL") or "http://localhost:8080/api").strip(),
        api_timeout=timeout,
        supabase_url=(os.getenv("SUPABASE_URL") or "").strip(),
        supabase_service_key=(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip(),
        storage_bucket=(os.getenv("SUPABASE_STORAGE_BUCKET") or "files").strip(),
        client_storage_backend=(os.getenv("CLIENT_STORAGE_BACKEND", "memory") or "memory").strip().lower(),
        client_storage_path=(os.getenv("CLIENT_STORAGE_PATH") or ".tmp/client_storage.json").strip(),
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        default_display_name=(os.getenv("DPT_DEFAULT_DISPLAY_NAME") or "").strip() or DEFAULT_DISPLAY_NAME,
        confine_supervisor=_flag("DPT_CONFINE_SUPERVISOR", True),
    )


def ensure_secure_config_on_startup(settings: AppSettings | None = None) -> None:
    """Fail fast on insecure production configuration.

    Checks (prod-like environments only):
    - Client storage must be durable (`file` or `db`), never `memory`.
    - DATABASE_URL must not explicitly disable TLS.
    - The REST collaborator must be reached over https.
    - The Supabase collaborator needs a real service role key.
    """
    cfg = settings or load_settings()
    if not cfg.is_prod:
        return  # dev/test remain permissive

    # 1) Sessions must survive restarts and scale across instances
    if cfg.client_storage_backend == "memory":
        raise SystemExit(
            "Refusing to start: CLIENT_STORAGE_BACKEND=memory is not allowed in production. Use file or db."
        )
    if cfg.client_storage_backend == "db" and not cfg.database_url:
        raise SystemExit("Refusing to start: CLIENT_STORAGE_BACKEND=db requires DATABASE_URL.")

    # 2) Postgres TLS: basic guard to avoid explicit disable
    if "sslmode=disable" in cfg.database_url:
        raise SystemExit(
            "Refusing to start: DATABASE_URL contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )

    # 3) Collaborators
    if cfg.progress_backend == "memory":
        raise SystemExit(
            "Refusing to start: PROGRESS_BACKEND=memory is not allowed in production. Configure rest or supabase."
        )
    if cfg.progress_backend == "rest" and not cfg.api_base_url.lower().startswith("https://"):
        raise SystemExit("Refusing to start: PHD_API_BASE_URL must use https in production.")
    if cfg.progress_backend == "supabase":
        key = cfg.supabase_service_key
        if not cfg.supabase_url or not key or key.upper() in {"DUMMY_DO_NOT_USE", "CHANGE_ME"}:
            raise SystemExit(
                "Refusing to start: SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY are unset or placeholders in production."
            )
