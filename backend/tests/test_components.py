"""
Portal UI components: status badges, sidebar, layout notices and forms.
"""
from __future__ import annotations

import pytest

from backend.identity_access.stores import Session
from backend.progress.domain import StudentSummary
from backend.web.components import (
    ActionButton,
    DataTable,
    Layout,
    LoginForm,
    Navigation,
    StatCard,
    StatusBadge,
    StudentProgressCard,
    badge_color,
)
from backend.web.notices import Notice


@pytest.mark.parametrize(
    "status,color",
    [
        ("Passed", "green"),
        ("failed", "red"),
        ("Pending", "yellow"),
        ("Pending Approval", "yellow"),
        ("Approved", "blue"),
        ("Needs Modification", "gray"),
        ("Published", "gray"),
        ("", "gray"),
        (None, "gray"),
    ],
)
def test_badge_color(status, color):
    assert badge_color(status) == color


def test_status_badge_escapes_text():
    html = StatusBadge("<b>Approved</b>").render()
    assert "status-badge--gray" in html
    assert "&lt;b&gt;" in html


def test_navigation_lists_only_own_portal():
    html = Navigation(Session("Jane", "supervisor", "user-1"), "/supervisor/exams").render()
    assert 'href="/supervisor/dc-meetings"' in html
    assert 'href="/coordinator"' not in html
    assert 'href="/dc-meeting"' not in html
    assert "Supervisor Portal" in html
    assert 'action="/logout"' in html


def test_navigation_marks_single_active_link():
    html = Navigation(Session("Jane", "student", "user-1"), "/dc-meeting").render()
    assert html.count('aria-current="page"') == 1
    assert '<a href="/dc-meeting" class="sidebar-link active" aria-current="page">' in html


def test_navigation_dashboard_not_active_on_sub_pages():
    html = Navigation(Session("Jane", "coordinator", "user-1"), "/coordinator/exam-dates").render()
    assert '<a href="/coordinator/exam-dates" class="sidebar-link active" aria-current="page">' in html
    assert '<a href="/coordinator" class="sidebar-link">' in html


def test_navigation_without_session_shows_sign_in():
    html = Navigation(None, "/login").render()
    assert 'href="/login"' in html
    assert "Logout" not in html


def test_layout_renders_notices_with_roles():
    html = Layout(
        "Dashboard",
        "<p>content</p>",
        Session("Jane", "student", "user-1"),
        notices=[Notice("success", "Saved"), Notice("error", "Upload failed", "Too <big>")],
    ).render()
    assert "<title>Dashboard - PhD Progress Tracker</title>" in html
    assert 'role="status"' in html
    assert 'role="alert"' in html
    assert "Too &lt;big&gt;" in html
    assert "<p>content</p>" in html


def test_layout_without_nav_has_no_sidebar():
    html = Layout("Sign in", "<p>x</p>", None, show_nav=False).render()
    assert "sidebar" not in html.split("<body", 1)[1].split(">", 1)[0]
    assert '<aside class="sidebar"' not in html


def test_student_progress_card_clamps_and_rounds():
    html = StudentProgressCard(StudentSummary(id="s", name="Abhay", progress=87)).render()
    assert "87% complete" in html
    assert "progress-85" in html
    assert 'aria-valuenow="87"' in html

    over = StudentProgressCard(StudentSummary(id="s", name="Abhay", progress=140)).render()
    assert "100% complete" in over


def test_stat_card_links_when_href_given():
    html = StatCard("Publications", 3, href="/publications", hint="1 published").render()
    assert html.startswith('<a href="/publications"')
    assert "1 published" in html


def test_data_table_empty_state():
    assert "Nothing here" in DataTable(["A"], [], empty_text="Nothing here").render()


def test_action_button_carries_hidden_fields():
    html = ActionButton("/supervisor/exams/1/approve", "Approve", hidden={"next": "/supervisor"}).render()
    assert 'method="post"' in html
    assert 'type="hidden" name="next" value="/supervisor"' in html


def test_login_form_preselects_role():
    html = LoginForm("Jane", selected_role="supervisor", error="Role Required").render()
    assert 'value="supervisor" id="role-supervisor" checked' in html
    assert "Role Required" in html
