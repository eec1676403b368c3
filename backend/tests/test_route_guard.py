"""
Route guard decision matrix plus navigation table resolution.
"""
from __future__ import annotations

import pytest

from backend.identity_access.guard import GuardState, RouteTarget, evaluate
from backend.identity_access.stores import Session
from backend.web.route_targets import resolve_target, sidebar_entries

ROLES = ("student", "supervisor", "coordinator")
REQUIRED = (None, "student", "supervisor", "coordinator")
HOMES = {"student": "/", "supervisor": "/supervisor", "coordinator": "/coordinator"}


def _session(role: str) -> Session:
    return Session(display_name="Jane", role=role, subject_id="user-1")


@pytest.mark.parametrize("required", REQUIRED)
def test_no_session_always_redirects_to_login(required):
    decision = evaluate(None, RouteTarget("/x", required))
    assert decision.state is GuardState.UNAUTHENTICATED
    assert decision.redirect_to == "/login"
    assert not decision.allowed


@pytest.mark.parametrize("role", ROLES)
@pytest.mark.parametrize("required", REQUIRED)
def test_symmetric_matrix_without_supervisor_confinement(role, required):
    decision = evaluate(_session(role), RouteTarget("/page", required), confine_supervisor=False)

    should_redirect = required is not None and required != role
    assert decision.allowed is not should_redirect
    if should_redirect:
        assert decision.state is GuardState.ROLE_MISMATCH
        assert decision.redirect_to == HOMES[role]
    elif required is None:
        assert decision.state is GuardState.NO_ROLE_REQUIREMENT
    else:
        assert decision.state is GuardState.ROLE_MATCH


def test_student_on_supervisor_page_lands_on_student_home():
    decision = evaluate(_session("student"), RouteTarget("/supervisor", "supervisor"))
    assert decision.redirect_to == "/"


def test_coordinator_on_supervisor_page_lands_on_coordinator_home():
    decision = evaluate(_session("coordinator"), RouteTarget("/supervisor/exams", "supervisor"))
    assert decision.redirect_to == "/coordinator"


@pytest.mark.parametrize("path", ["/", "/dc-meeting", "/coordinator", "/stored-files"])
def test_supervisor_is_confined_to_supervisor_prefix(path):
    target = resolve_target(path)
    decision = evaluate(_session("supervisor"), target, path)
    assert decision.state is GuardState.ROLE_MISMATCH
    assert decision.redirect_to == "/supervisor"


def test_supervisor_confinement_does_not_match_lookalike_prefix():
    decision = evaluate(_session("supervisor"), RouteTarget("/supervisors"), "/supervisors")
    assert decision.redirect_to == "/supervisor"


def test_supervisor_inside_own_portal_renders():
    decision = evaluate(_session("supervisor"), resolve_target("/supervisor/dc-meetings"), "/supervisor/dc-meetings")
    assert decision.state is GuardState.ROLE_MATCH


def test_coordinator_may_open_student_pages():
    decision = evaluate(_session("coordinator"), resolve_target("/"), "/")
    assert decision.state is GuardState.NO_ROLE_REQUIREMENT


def test_resolve_target_prefers_longest_prefix():
    target = resolve_target("/supervisor/dc-meetings/7/approve")
    assert target.path == "/supervisor/dc-meetings"
    assert target.required_role == "supervisor"


def test_resolve_target_root_matches_only_exactly():
    assert resolve_target("/") is not None
    assert resolve_target("/unknown-page") is None


def test_resolve_target_ignores_trailing_slash():
    assert resolve_target("/coordinator/").path == "/coordinator"


def test_sidebar_entries_are_per_portal():
    paths = [e.path for e in sidebar_entries("coordinator")]
    assert paths[0] == "/coordinator"
    assert all(p.startswith("/coordinator") for p in paths)
