"""
Supervisor portal routes (required role: supervisor).

The dashboard shows the roster with progress bars and the first pending
DC-meeting approvals. The other pages review all meetings, validate
publications and decide re-examination requests.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.progress.domain import REQUEST_PENDING
from backend.progress.errors import ProgressError
from backend.web import deps
from backend.web.components import (
    ActionButton,
    DataTable,
    ModificationForm,
    StatCard,
    StatusBadge,
    StudentProgressCard,
)
from backend.web.components.base import Component
from backend.web.notices import Notice

from .pages import download_response, failure_redirect, fetch, form_text, redirect_with_notice, render_page
from .security import _is_same_origin, cross_site_forbidden

supervisor_router = APIRouter(prefix="/supervisor", tags=["Supervisor"])
logger = logging.getLogger("dpt.web")

esc = Component.escape

PENDING_PREVIEW = 3
_RETURN_PATHS = ("/supervisor", "/supervisor/students", "/supervisor/dc-meetings")


def _return_to(form, default: str) -> str:
    candidate = form_text(form, "next")
    return candidate if candidate in _RETURN_PATHS else default


def _overview(request: Request, title: str) -> HTMLResponse:
    service = deps.get_service()
    problems: List[Notice] = []
    students = fetch(problems, service.repo.list_students, [], "students")
    pending, total = fetch(problems, lambda: service.pending_meetings(PENDING_PREVIEW), ([], 0), "DC meetings")
    here = request.url.path

    roster = "".join(StudentProgressCard(s).render() for s in students) or '<p class="empty-state">No students assigned.</p>'
    rows = [
        [
            esc(m.student_name),
            esc(m.date),
            StatusBadge(m.status).render(),
            ActionButton(
                f"/supervisor/dc-meetings/{m.id}/approve", "Approve", variant="primary", hidden={"next": here}
            ).render(),
        ]
        for m in pending
    ]
    more = ""
    if total > len(pending):
        more = f'<p class="more-link"><a href="/supervisor/dc-meetings">View all {total} pending meetings</a></p>'
    content = f"""
    <div class="page-header"><h1>{esc(title)}</h1></div>
    <section class="stat-grid">
        {StatCard("Students", len(students), icon="👥", href="/supervisor/students").render()}
        {StatCard("Pending approvals", total, icon="📅", href="/supervisor/dc-meetings").render()}
    </section>
    <section class="card">
        <h2>Pending DC meeting approvals</h2>
        {DataTable(["Student", "Date", "Status", ""], rows, empty_text="Nothing waiting for approval.").render()}
        {more}
    </section>
    <section class="card">
        <h2>Students</h2>
        <div class="student-grid">{roster}</div>
    </section>"""
    return render_page(request, title, content, problems=problems)


@supervisor_router.get("", response_class=HTMLResponse)
async def supervisor_dashboard(request: Request):
    return _overview(request, "Supervisor Dashboard")


@supervisor_router.get("/students", response_class=HTMLResponse)
async def supervisor_students(request: Request):
    return _overview(request, "Students")


# --- DC meetings ---------------------------------------------------------------


@supervisor_router.get("/dc-meetings", response_class=HTMLResponse)
async def supervisor_meetings(request: Request):
    problems: List[Notice] = []
    meetings = fetch(problems, deps.get_service().repo.list_meetings, [], "DC meetings")
    rows = []
    for m in meetings:
        minutes = (
            f'<a href="/supervisor/dc-meetings/{esc(m.id)}/file">{esc(m.minutes_file_name)}</a>'
            if m.minutes_file_name
            else '<span class="muted">No file</span>'
        )
        actions = ActionButton(
            f"/supervisor/dc-meetings/{m.id}/approve", "Approve", variant="primary",
            hidden={"next": "/supervisor/dc-meetings"},
        ).render() + ModificationForm(m.id).render()
        rows.append(
            [esc(m.student_name), esc(m.date), StatusBadge(m.status).render(), minutes,
             esc(m.modification_note or ""), actions]
        )
    content = f"""
    <div class="page-header"><h1>DC Meetings</h1></div>
    <section class="card">
        {DataTable(["Student", "Date", "Status", "Minutes", "Note", "Actions"], rows,
                   empty_text="No DC meetings submitted yet.").render()}
    </section>"""
    return render_page(request, "DC Meetings", content, problems=problems)


@supervisor_router.post("/dc-meetings/{meeting_id}/approve")
async def supervisor_meeting_approve(request: Request, meeting_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    back = _return_to(form, "/supervisor/dc-meetings")
    try:
        deps.get_service().approve_meeting(meeting_id)
    except ProgressError as exc:
        return failure_redirect(request, back, "Approval failed", exc)
    return redirect_with_notice(request, back, "success", "Meeting approved")


@supervisor_router.post("/dc-meetings/{meeting_id}/modify")
async def supervisor_meeting_modify(request: Request, meeting_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    try:
        deps.get_service().request_meeting_changes(meeting_id, form_text(form, "note"))
    except ProgressError as exc:
        return failure_redirect(request, "/supervisor/dc-meetings", "Request failed", exc)
    return redirect_with_notice(
        request, "/supervisor/dc-meetings", "success", "Modification requested", "The student has been asked to revise."
    )


@supervisor_router.get("/dc-meetings/{meeting_id}/file")
async def supervisor_meeting_file(request: Request, meeting_id: str):
    try:
        download = deps.get_service().repo.get_meeting_file(meeting_id)
    except ProgressError as exc:
        return failure_redirect(request, "/supervisor/dc-meetings", "Download failed", exc)
    return download_response(download)


# --- publications --------------------------------------------------------------


@supervisor_router.get("/publications", response_class=HTMLResponse)
async def supervisor_publications(request: Request):
    problems: List[Notice] = []
    publications = fetch(problems, deps.get_service().repo.list_publications, [], "publications")
    rows = []
    for p in publications:
        file_link = (
            f'<a href="/supervisor/publications/{esc(p.id)}/file">{esc(p.file_name)}</a>' if p.file_name else ""
        )
        toggle = ActionButton(
            f"/supervisor/publications/{p.id}/validate",
            "Withdraw validation" if p.validated else "Validate",
            variant="secondary" if p.validated else "primary",
            hidden={"validated": "false" if p.validated else "true"},
        ).render()
        rows.append([esc(p.student_name), esc(p.title), esc(p.venue), StatusBadge(p.status).render(), file_link, toggle])
    content = f"""
    <div class="page-header"><h1>Publications</h1></div>
    <section class="card">
        {DataTable(["Student", "Title", "Venue", "Status", "File", ""], rows,
                   empty_text="No publications uploaded yet.").render()}
    </section>"""
    return render_page(request, "Publications", content, problems=problems)


@supervisor_router.post("/publications/{publication_id}/validate")
async def supervisor_publication_validate(request: Request, publication_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    validated = form_text(form, "validated").lower() != "false"
    try:
        deps.get_service().set_publication_validated(publication_id, validated)
    except ProgressError as exc:
        return failure_redirect(request, "/supervisor/publications", "Update failed", exc)
    title = "Publication validated" if validated else "Validation withdrawn"
    return redirect_with_notice(request, "/supervisor/publications", "success", title)


@supervisor_router.get("/publications/{publication_id}/file")
async def supervisor_publication_file(request: Request, publication_id: str):
    try:
        download = deps.get_service().repo.get_publication_file(publication_id)
    except ProgressError as exc:
        return failure_redirect(request, "/supervisor/publications", "Download failed", exc)
    return download_response(download)


# --- exams ---------------------------------------------------------------------


@supervisor_router.get("/exams", response_class=HTMLResponse)
async def supervisor_exams(request: Request):
    problems: List[Notice] = []
    requests = fetch(problems, deps.get_service().reviewable_exam_requests, [], "re-exam requests")
    rows = []
    for r in requests:
        actions = ""
        if r.status == REQUEST_PENDING:
            actions = (
                ActionButton(f"/supervisor/exams/{r.id}/approve", "Approve", variant="primary").render()
                + ActionButton(f"/supervisor/exams/{r.id}/reject", "Reject", variant="danger").render()
            )
        rows.append(
            [esc(r.student_name), esc(r.exam_name), esc(r.exam_date), esc(r.reason), StatusBadge(r.status).render(), actions]
        )
    content = f"""
    <div class="page-header"><h1>Re-examination Requests</h1></div>
    <section class="card">
        {DataTable(["Student", "Exam", "Date", "Reason", "Status", ""], rows,
                   empty_text="No requests waiting for a decision.").render()}
    </section>"""
    return render_page(request, "Exams", content, problems=problems)


async def _decide(request: Request, request_id: str, approve: bool):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    try:
        deps.get_service().decide_exam_request(request_id, approve)
    except ProgressError as exc:
        return failure_redirect(request, "/supervisor/exams", "Decision failed", exc)
    return redirect_with_notice(
        request, "/supervisor/exams", "success", "Request approved" if approve else "Request rejected"
    )


@supervisor_router.post("/exams/{request_id}/approve")
async def supervisor_exam_approve(request: Request, request_id: str):
    return await _decide(request, request_id, True)


@supervisor_router.post("/exams/{request_id}/reject")
async def supervisor_exam_reject(request: Request, request_id: str):
    return await _decide(request, request_id, False)
