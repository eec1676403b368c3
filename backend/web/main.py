"PhD Progress Tracker"
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from backend.identity_access.client_storage import new_client_id
from backend.identity_access.context import AuthContext
from backend.identity_access.domain import home_for
from backend.identity_access.guard import evaluate
from backend.identity_access.stores import SessionStore


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via DPT_ENABLE_DOTENV (default true outside
      pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("DPT_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()

from backend.web import deps
from backend.web.auth_utils import CLIENT_COOKIE_MAX_AGE, CLIENT_COOKIE_NAME, cookie_opts
from backend.web.config import ensure_secure_config_on_startup, load_settings
from backend.web.route_targets import resolve_target
from backend.web.wiring import build_client_storage_backend, build_progress_repo

# --- App & Settings Setup -------------------------------------------------------

logger = logging.getLogger("dpt.web")
SETTINGS = load_settings()

# Minimal production safety checks (fail-fast on insecure config)
ensure_secure_config_on_startup(SETTINGS)

deps.set_repo(build_progress_repo(SETTINGS))
deps.set_client_storage_backend(build_client_storage_backend(SETTINGS))

app = FastAPI(title="PhD Progress Tracker", description="Doctoral progress portals", version="0.1.0")

# --- Static Files & Routers -----------------------------------------------------

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

from backend.web.routes.auth import auth_router
from backend.web.routes.coordinator import coordinator_router
from backend.web.routes.pages import NO_STORE, render_page
from backend.web.routes.stored_files import stored_files_router
from backend.web.routes.student import student_router
from backend.web.routes.supervisor import supervisor_router

# --- Guard --------------------------------------------------------------------

PUBLIC_PATHS = ("/login", "/logout", "/health", "/favicon.ico")


def _is_public_path(path: str) -> bool:
    return path.startswith("/static/") or path in PUBLIC_PATHS


@app.middleware("http")
async def route_guard(request: Request, call_next):
    """Apply the route guard to every page request.

    Runs inside `client_context`, so `request.state.auth` is always set for
    non-static paths.
    """
    path = request.url.path
    if _is_public_path(path):
        return await call_next(request)

    auth: AuthContext = request.state.auth
    session = auth.session
    if path.startswith("/api/"):
        if session is None:
            headers = {"Cache-Control": "private, no-store", "Vary": "Origin"}
            return JSONResponse({"error": "unauthenticated"}, status_code=401, headers=headers)
        return await call_next(request)

    target = resolve_target(path)
    if target is None:
        # Unknown page: anonymous callers still go to /login, others get the 404 page.
        if session is None:
            return RedirectResponse(url="/login", status_code=302, headers=dict(NO_STORE))
        return await call_next(request)

    decision = evaluate(session, target, path, confine_supervisor=SETTINGS.confine_supervisor)
    if not decision.allowed:
        logger.debug("guard %s: %s -> %s", decision.state.value, path, decision.redirect_to)
        return RedirectResponse(url=decision.redirect_to, status_code=302, headers=dict(NO_STORE))
    return await call_next(request)


@app.middleware("http")
async def client_context(request: Request, call_next):
    """Attach the caller's client storage and Auth Context to the request.

    The client context is the `dpt_client` cookie; a browser without one gets
    a fresh id, which is set on whatever response the request produces.
    """
    if request.url.path.startswith("/static/"):
        return await call_next(request)

    client_id = request.cookies.get(CLIENT_COOKIE_NAME)
    is_new = not client_id
    if is_new:
        client_id = new_client_id()
    storage = deps.CLIENT_STORAGE_BACKEND.client(client_id)
    auth = AuthContext(SessionStore(storage))
    auth.subscribe(
        lambda session: logger.info(
            "session changed client=%s role=%s", client_id[:8], session.role if session else None
        )
    )
    request.state.client_storage = storage
    request.state.auth = auth

    response = await call_next(request)
    if is_new:
        response.set_cookie(
            CLIENT_COOKIE_NAME,
            client_id,
            max_age=CLIENT_COOKIE_MAX_AGE,
            path="/",
            **cookie_opts(SETTINGS.environment),
        )
    return response


# --- Security Headers Middleware ----------------------------------------------


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if SETTINGS.is_prod:
        # Harden CSP in production: avoid 'unsafe-inline' to reduce XSS surface.
        csp = (
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            "img-src 'self' data:; font-src 'self' data:; frame-src 'self'; frame-ancestors 'self';"
        )
    else:
        csp = (
            "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; font-src 'self' data:; frame-src 'self'; frame-ancestors 'self';"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    if SETTINGS.is_prod:
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


# --- Operations & API -----------------------------------------------------------


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)


class SessionInfo(BaseModel):
    name: str
    role: str
    id: str = Field(..., min_length=1)


@app.get("/api/me", response_model=SessionInfo)
async def api_me(request: Request):
    """Current Session as JSON; the guard middleware answers 401 without one."""
    session = deps.require_session(request)
    info = SessionInfo(name=session.display_name, role=session.role, id=session.subject_id)
    return JSONResponse(info.model_dump(), headers=dict(NO_STORE))


@app.exception_handler(404)
async def not_found(request: Request, exc) -> Response:
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": "not_found"}, status_code=404, headers=dict(NO_STORE))
    auth = getattr(request.state, "auth", None)
    if auth is None or auth.session is None:
        return HTMLResponse("Not Found", status_code=404)
    home = home_for(auth.session.role)
    content = f"""
    <section class="not-found">
        <h1>Page not found</h1>
        <p>The page you are looking for does not exist.</p>
        <p><a class="btn btn-primary" href="{home}">Back to the dashboard</a></p>
    </section>"""
    return render_page(request, "Not found", content, status_code=404)


app.include_router(auth_router)
app.include_router(student_router)
app.include_router(stored_files_router)
app.include_router(supervisor_router)
app.include_router(coordinator_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.web.main:app",
        host=os.getenv("DPT_HOST", "127.0.0.1"),
        port=int(os.getenv("DPT_PORT", "8000")),
        reload=not SETTINGS.is_prod,
    )
