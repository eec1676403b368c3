"""
Sign-in and sign-out routes (router-only module).

Why:
    There is no identity provider: the visitor chooses a portal role and a
    display name, and the Auth Context of the caller's client context
    persists that choice. Keeping these endpoints in their own router lets
    tests mount them without the portal pages.

Notes:
    - `/login` and `/logout` are public paths; the guard middleware never
      redirects them.
    - Both POSTs require a same-origin request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from backend.identity_access.context import AuthContext
from backend.identity_access.domain import LOGIN_PATH, home_for, normalize_role
from backend.web import deps
from backend.web.components import LoginForm

from .pages import NO_STORE, redirect_with_notice, render_page
from .security import _is_same_origin, cross_site_forbidden

auth_router = APIRouter(tags=["Auth"])
logger = logging.getLogger("dpt.web")


def _default_display_name() -> str:
    from backend.web.main import SETTINGS

    return SETTINGS.default_display_name


def _login_page(request: Request, *, selected_role: str = "", error: str | None = None, status_code: int = 200):
    form = LoginForm(_default_display_name(), selected_role=selected_role, error=error)
    content = f"""
    <section class="login-panel">
        <h1>PhD Progress Tracker</h1>
        <p class="login-lead">Choose the portal you want to open.</p>
        {form.render()}
    </section>"""
    return render_page(request, "Sign in", content, status_code=status_code, show_nav=False)


@auth_router.get("/login")
async def login_page(request: Request, auth: AuthContext = Depends(deps.get_auth_context)):
    """Show the role picker; an existing session goes straight to its home."""
    if auth.session is not None:
        return RedirectResponse(url=home_for(auth.session.role), status_code=302, headers=dict(NO_STORE))
    return _login_page(request)


@auth_router.post("/login")
async def login_submit(request: Request, auth: AuthContext = Depends(deps.get_auth_context)):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    role = normalize_role(form.get("role"))
    if role is None:
        return _login_page(request, error="Role Required: please select a role to continue.", status_code=400)
    raw_name = form.get("display_name")
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    session = auth.login(name or _default_display_name(), role)
    return redirect_with_notice(request, home_for(session.role), "success", f"Welcome, {session.display_name}")


@auth_router.post("/logout")
async def logout(request: Request, auth: AuthContext = Depends(deps.get_auth_context)):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    auth.logout()
    return redirect_with_notice(request, LOGIN_PATH, "success", "Signed out")
