"""
Sign-in / sign-out flow and the guard middleware, end to end over ASGI.

Requirements:
- Pages without a session → 302 to /login
- /api/* without a session → 401 JSON
- Allowlist: /login, /health, /static/*, /favicon.ico are not redirected
- Wrong-role pages redirect to the caller's own home, never to /login
"""
from __future__ import annotations

import pytest

from portal_helpers import login, me, portal_client

pytestmark = pytest.mark.anyio("asyncio")


async def test_page_without_session_redirects_to_login(app):
    async with portal_client(app) as client:
        r = await client.get("/", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login"


async def test_unknown_page_without_session_redirects_to_login(app):
    async with portal_client(app) as client:
        r = await client.get("/no-such-page", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login"


async def test_api_without_session_returns_401(app):
    async with portal_client(app) as client:
        r = await client.get("/api/me")
    assert r.status_code == 401
    assert r.json() == {"error": "unauthenticated"}
    assert r.headers.get("Cache-Control") == "private, no-store"


async def test_allowlisted_paths_are_not_redirected(app):
    async with portal_client(app) as client:
        r_login = await client.get("/login", follow_redirects=False)
        r_health = await client.get("/health")
        r_static = await client.get("/static/does-not-exist.css", follow_redirects=False)
        r_favicon = await client.get("/favicon.ico", follow_redirects=False)
    assert r_login.status_code == 200
    assert r_health.json() == {"status": "healthy"}
    assert r_static.status_code == 404
    assert r_favicon.status_code != 302


async def test_first_visit_sets_client_cookie(app):
    async with portal_client(app) as client:
        r = await client.get("/login")
    cookie = r.headers.get("set-cookie", "")
    assert cookie.startswith("dpt_client=")
    assert "httponly" in cookie.lower()
    assert "samesite=lax" in cookie.lower()


async def test_login_page_lists_roles_and_default_name(app):
    async with portal_client(app) as client:
        r = await client.get("/login")
    assert 'name="role"' in r.text
    assert 'value="coordinator"' in r.text
    assert "Bharath Nayak Bhukya" in r.text


@pytest.mark.parametrize(
    "role,home",
    [("student", "/"), ("supervisor", "/supervisor"), ("coordinator", "/coordinator")],
)
async def test_login_redirects_to_role_home(app, role, home):
    async with portal_client(app) as client:
        r = await login(client, role, "Jane")
        assert r.headers["location"] == home
        data = await me(client)
        page = await client.get(home)
    assert data["name"] == "Jane"
    assert data["role"] == role
    assert data["id"].startswith("user-")
    assert page.status_code == 200
    assert "Welcome, Jane" in page.text
    assert page.headers.get("Cache-Control") == "private, no-store"


async def test_login_without_role_shows_role_required(app):
    async with portal_client(app) as client:
        r = await client.post("/login", data={"display_name": "Jane"})
        after = await client.get("/api/me")
    assert r.status_code == 400
    assert "Role Required" in r.text
    assert after.status_code == 401


async def test_login_with_blank_name_uses_default(app):
    async with portal_client(app) as client:
        await login(client, "student", "   ")
        data = await me(client)
    assert data["name"] == "Bharath Nayak Bhukya"


async def test_logged_in_visit_to_login_goes_home(app):
    async with portal_client(app) as client:
        await login(client, "coordinator")
        r = await client.get("/login", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/coordinator"


async def test_logout_clears_session(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await client.post("/logout", follow_redirects=False)
        after = await client.get("/", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    assert after.headers["location"] == "/login"


async def test_session_survives_across_requests_but_not_across_clients(app):
    async with portal_client(app) as first:
        await login(first, "coordinator")
        assert (await me(first))["role"] == "coordinator"
    async with portal_client(app) as second:
        r = await second.get("/api/me")
    assert r.status_code == 401


async def test_student_on_supervisor_page_lands_on_student_home(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await client.get("/supervisor", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/"


async def test_coordinator_sub_path_inherits_required_role(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await client.get("/coordinator/swayam-courses", follow_redirects=False)
    assert r.headers["location"] == "/"


async def test_supervisor_is_confined_to_supervisor_portal(app):
    async with portal_client(app) as client:
        await login(client, "supervisor")
        r_root = await client.get("/", follow_redirects=False)
        r_coord = await client.get("/coordinator", follow_redirects=False)
    assert r_root.headers["location"] == "/supervisor"
    assert r_coord.headers["location"] == "/supervisor"


async def test_supervisor_confinement_can_be_switched_off(app, monkeypatch: pytest.MonkeyPatch):
    from dataclasses import replace

    from backend.web import main

    monkeypatch.setattr(main, "SETTINGS", replace(main.SETTINGS, confine_supervisor=False))
    async with portal_client(app) as client:
        await login(client, "supervisor")
        r = await client.get("/", follow_redirects=False)
    assert r.status_code == 200


async def test_coordinator_may_open_student_dashboard(app):
    async with portal_client(app) as client:
        await login(client, "coordinator")
        r = await client.get("/", follow_redirects=False)
    assert r.status_code == 200


async def test_unknown_page_with_session_renders_not_found(app):
    async with portal_client(app) as client:
        await login(client, "coordinator")
        r = await client.get("/no-such-page")
    assert r.status_code == 404
    assert "Page not found" in r.text
    assert 'href="/coordinator"' in r.text


async def test_malformed_stored_session_is_treated_as_logged_out(app):
    from backend.web import deps

    async with portal_client(app) as client:
        await login(client, "student")
        client_id = client.cookies.get("dpt_client")
        deps.CLIENT_STORAGE_BACKEND.client(client_id).set_item("user", "{oops")
        r = await client.get("/", follow_redirects=False)
    assert r.headers["location"] == "/login"


async def test_cross_site_post_is_refused(app):
    async with portal_client(app) as client:
        r = await client.post(
            "/login",
            data={"display_name": "Jane", "role": "student"},
            headers={"Origin": "http://evil.example"},
        )
    assert r.status_code == 403


async def test_same_origin_post_is_accepted(app):
    async with portal_client(app) as client:
        r = await client.post(
            "/login",
            data={"display_name": "Jane", "role": "student"},
            headers={"Origin": "http://test"},
            follow_redirects=False,
        )
    assert r.status_code == 303


async def test_security_headers_present(app):
    async with portal_client(app) as client:
        r = await client.get("/login")
    assert "default-src 'self'" in r.headers["Content-Security-Policy"]
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"
