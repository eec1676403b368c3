"""
Student portal routes: dashboard, DC meetings, publications, SWAYAM courses
and exams.

Every page reads the caller's own records from the progress repository;
writes go through `ProgressService` and finish with Post/Redirect/Get.
Student pages carry no role requirement, so coordinators may open them too;
the supervisor is kept inside its own portal by the guard middleware.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.progress.domain import EXAM_PASSED, EXAM_PENDING, REQUEST_PENDING
from backend.progress.errors import NotFound, ProgressError
from backend.progress.service import course_names
from backend.web import deps
from backend.web.components import (
    ActionButton,
    Announcement,
    AnnouncementList,
    DataTable,
    ExamRequestForm,
    MeetingUploadForm,
    PublicationUploadForm,
    StatCard,
    StatusBadge,
)
from backend.web.components.base import Component
from backend.web.notices import Notice

from .pages import download_response, failure_redirect, fetch, form_text, read_upload, redirect_with_notice, render_page
from .security import _is_same_origin, cross_site_forbidden

student_router = APIRouter(tags=["Student"])
logger = logging.getLogger("dpt.web")

esc = Component.escape

ANNOUNCEMENTS = (
    Announcement(
        title="Research symposium on March 15th",
        date="2025-02-28",
        author="Dr. Research Coordinator",
        body="All doctoral candidates are invited to present a poster of their current work.",
    ),
    Announcement(
        title="Journal publication deadline April 10th",
        date="2025-03-01",
        author="Academic Office",
        body="Submit accepted or under-review papers before the deadline to have them counted this term.",
    ),
)


def _can_see_all(role: str) -> bool:
    return role in ("supervisor", "coordinator")


@student_router.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    session = deps.require_session(request)
    repo = deps.get_service().repo
    problems: List[Notice] = []
    meetings = fetch(problems, lambda: repo.list_meetings_for_student(session.subject_id), [], "DC meetings")
    publications = fetch(
        problems, lambda: repo.list_publications_for_student(session.subject_id), [], "publications"
    )
    exams = fetch(problems, lambda: repo.list_exams(session.subject_id), [], "exams")

    passed = sum(1 for e in exams if e.status == EXAM_PASSED)
    pending = sum(1 for e in exams if e.status == EXAM_PENDING)
    validated = sum(1 for p in publications if p.validated)
    stats = "".join(
        [
            StatCard("DC meetings", len(meetings), icon="📅", href="/dc-meeting").render(),
            StatCard("Publications", len(publications), icon="📄", href="/publications",
                     hint=f"{validated} published").render(),
            StatCard("Exams passed", passed, icon="📝", href="/exams", hint=f"{pending} pending").render(),
        ]
    )

    if meetings:
        latest = meetings[0]
        latest_html = (
            f'<p class="latest-meeting">{esc(latest.date)} {StatusBadge(latest.status).render()}</p>'
        )
        if latest.modification_note:
            latest_html += f'<p class="meeting-note">{esc(latest.modification_note)}</p>'
    else:
        latest_html = '<p class="empty-state">No DC meeting submitted yet.</p>'

    exam_rows = [[esc(e.name), esc(e.date), StatusBadge(e.status).render()] for e in exams]
    content = f"""
    <div class="page-header">
        <h1>Welcome, {esc(session.display_name)}</h1>
        <p class="page-lead">Your research progress at a glance.</p>
    </div>
    <section class="stat-grid" aria-label="Research overview">{stats}</section>
    <div class="dashboard-columns">
        <section class="card">
            <h2>Exam status</h2>
            {DataTable(["Exam", "Date", "Status"], exam_rows, empty_text="No exams scheduled.").render()}
        </section>
        <section class="card">
            <h2>Latest DC meeting</h2>
            {latest_html}
        </section>
        <section class="card">
            <h2>Announcements</h2>
            {AnnouncementList(ANNOUNCEMENTS).render()}
        </section>
    </div>"""
    return render_page(request, "Dashboard", content, problems=problems)


# --- DC meetings ---------------------------------------------------------------


@student_router.get("/dc-meeting", response_class=HTMLResponse)
async def dc_meeting_page(request: Request):
    session = deps.require_session(request)
    service = deps.get_service()
    problems: List[Notice] = []
    meetings = fetch(problems, lambda: service.repo.list_meetings_for_student(session.subject_id), [], "DC meetings")
    rows = []
    for m in meetings:
        minutes = (
            f'<a href="/dc-meeting/{esc(m.id)}/file">{esc(m.minutes_file_name)}</a>'
            if m.minutes_file_name
            else '<span class="muted">No file</span>'
        )
        rows.append([esc(m.date), StatusBadge(m.status).render(), minutes, esc(m.modification_note or "")])
    content = f"""
    <div class="page-header"><h1>DC Meeting</h1></div>
    <section class="card">
        <h2>Submit meeting minutes</h2>
        {MeetingUploadForm(max_size_mb=service.uploads.max_size_mb).render()}
    </section>
    <section class="card">
        <h2>Your meetings</h2>
        {DataTable(["Date", "Status", "Minutes", "Supervisor note"], rows,
                   empty_text="No DC meetings submitted yet.").render()}
    </section>"""
    return render_page(request, "DC Meeting", content, problems=problems)


@student_router.post("/dc-meeting/upload")
async def dc_meeting_upload(request: Request):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    session = deps.require_session(request)
    form = await request.form()
    upload = await read_upload(form, "file")
    try:
        deps.get_service().submit_meeting(
            student_id=session.subject_id,
            student_name=session.display_name,
            date=form_text(form, "date"),
            upload=upload,
        )
    except ProgressError as exc:
        return failure_redirect(request, "/dc-meeting", "Upload failed", exc)
    return redirect_with_notice(request, "/dc-meeting", "success", "Meeting submitted", "Waiting for supervisor approval.")


@student_router.get("/dc-meeting/{meeting_id}/file")
async def dc_meeting_file(request: Request, meeting_id: str):
    session = deps.require_session(request)
    repo = deps.get_service().repo
    try:
        if not _can_see_all(session.role):
            own = {m.id for m in repo.list_meetings_for_student(session.subject_id)}
            if meeting_id not in own:
                raise NotFound("No minutes file available")
        download = repo.get_meeting_file(meeting_id)
    except ProgressError as exc:
        return failure_redirect(request, "/dc-meeting", "Download failed", exc)
    return download_response(download)


# --- publications --------------------------------------------------------------


@student_router.get("/publications", response_class=HTMLResponse)
async def publications_page(request: Request):
    session = deps.require_session(request)
    service = deps.get_service()
    problems: List[Notice] = []
    publications = fetch(
        problems, lambda: service.repo.list_publications_for_student(session.subject_id), [], "publications"
    )
    rows = []
    for p in publications:
        file_link = (
            f'<a href="/publications/{esc(p.id)}/file">{esc(p.file_name)}</a>' if p.file_name else ""
        )
        rows.append([esc(p.title), esc(p.venue), esc(p.authors), StatusBadge(p.status).render(), file_link])
    content = f"""
    <div class="page-header"><h1>Publications</h1></div>
    <section class="card">
        <h2>Upload a publication</h2>
        {PublicationUploadForm(max_size_mb=service.uploads.max_size_mb).render()}
    </section>
    <section class="card">
        <h2>Your publications</h2>
        {DataTable(["Title", "Venue", "Authors", "Status", "File"], rows,
                   empty_text="No publications uploaded yet.").render()}
    </section>"""
    return render_page(request, "Publications", content, problems=problems)


@student_router.post("/publications/upload")
async def publications_upload(request: Request):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    session = deps.require_session(request)
    form = await request.form()
    upload = await read_upload(form, "file")
    try:
        deps.get_service().submit_publication(
            student_id=session.subject_id,
            student_name=session.display_name,
            title=form_text(form, "title"),
            venue=form_text(form, "venue"),
            authors=form_text(form, "authors"),
            upload=upload,
        )
    except ProgressError as exc:
        return failure_redirect(request, "/publications", "Upload failed", exc)
    return redirect_with_notice(request, "/publications", "success", "Publication uploaded", "It is now under review.")


@student_router.get("/publications/{publication_id}/file")
async def publication_file(request: Request, publication_id: str):
    session = deps.require_session(request)
    repo = deps.get_service().repo
    try:
        if not _can_see_all(session.role):
            own = {p.id for p in repo.list_publications_for_student(session.subject_id)}
            if publication_id not in own:
                raise NotFound("Publication file not found")
        download = repo.get_publication_file(publication_id)
    except ProgressError as exc:
        return failure_redirect(request, "/publications", "Download failed", exc)
    return download_response(download)


# --- SWAYAM courses ------------------------------------------------------------


@student_router.get("/courses", response_class=HTMLResponse)
async def courses_page(request: Request, q: str = ""):
    session = deps.require_session(request)
    service = deps.get_service()
    problems: List[Notice] = []
    courses = fetch(problems, lambda: service.search_courses(q), [], "courses")
    registrations = fetch(problems, lambda: service.repo.list_registrations(session.subject_id), [], "registrations")
    registered = {r.course_id for r in registrations}

    course_rows = []
    for c in courses:
        if c.id in registered:
            action = '<span class="muted">Registered</span>'
        else:
            action = ActionButton(f"/courses/{c.id}/register", "Register", variant="primary").render()
        course_rows.append([esc(c.name), esc(c.provider), esc(c.duration), esc(c.description), action])

    all_names = course_names(fetch(problems, service.repo.list_courses, [], "courses")) if q else course_names(courses)
    registration_rows = [
        [esc(all_names.get(r.course_id, r.course_id)), esc(r.registered_at or ""), StatusBadge(r.status).render()]
        for r in registrations
    ]
    content = f"""
    <div class="page-header"><h1>SWAYAM Courses</h1></div>
    <form method="get" action="/courses" class="search-form" role="search">
        <label for="course-search" class="sr-only">Search courses</label>
        <input type="search" id="course-search" name="q" value="{esc(q)}" placeholder="Search by name or provider">
        <button type="submit" class="btn btn-secondary">Search</button>
    </form>
    <section class="card">
        <h2>Available courses</h2>
        {DataTable(["Course", "Provider", "Duration", "Description", ""], course_rows,
                   empty_text="No courses match your search.").render()}
    </section>
    <section class="card">
        <h2>Your registrations</h2>
        {DataTable(["Course", "Registered", "Status"], registration_rows,
                   empty_text="You have not registered for any course yet.").render()}
    </section>"""
    return render_page(request, "Courses", content, problems=problems)


@student_router.post("/courses/{course_id}/register")
async def course_register(request: Request, course_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    session = deps.require_session(request)
    try:
        deps.get_service().register_course(
            course_id=course_id, student_id=session.subject_id, student_name=session.display_name
        )
    except ProgressError as exc:
        return failure_redirect(request, "/courses", "Registration failed", exc)
    return redirect_with_notice(request, "/courses", "success", "Registration submitted", "Waiting for coordinator approval.")


# --- exams ---------------------------------------------------------------------


@student_router.get("/exams", response_class=HTMLResponse)
async def exams_page(request: Request):
    session = deps.require_session(request)
    repo = deps.get_service().repo
    problems: List[Notice] = []
    exams = fetch(problems, lambda: repo.list_exams(session.subject_id), [], "exams")
    requests = fetch(problems, lambda: repo.list_exam_requests(session.subject_id), [], "re-exam requests")
    dates = fetch(problems, repo.list_exam_dates, [], "exam dates")

    exam_rows = [[esc(e.name), esc(e.date), StatusBadge(e.status).render()] for e in exams]
    request_rows = [
        [esc(r.exam_name), esc(r.exam_date), esc(r.reason), StatusBadge(r.status).render()] for r in requests
    ]
    date_rows = [[esc(d.course), esc(d.date), esc(d.time), esc(d.venue)] for d in dates]
    open_requests = sum(1 for r in requests if r.status == REQUEST_PENDING)
    content = f"""
    <div class="page-header"><h1>Exams</h1></div>
    <section class="card">
        <h2>Your exams</h2>
        {DataTable(["Exam", "Date", "Status"], exam_rows, empty_text="No exams scheduled.").render()}
    </section>
    <section class="card">
        <h2>Upcoming exam dates</h2>
        {DataTable(["Course", "Date", "Time", "Venue"], date_rows, empty_text="No exam dates announced.").render()}
    </section>
    <section class="card">
        <h2>Request a re-examination</h2>
        {ExamRequestForm().render()}
    </section>
    <section class="card">
        <h2>Your requests <span class="count">{open_requests} open</span></h2>
        {DataTable(["Exam", "Date", "Reason", "Status"], request_rows, empty_text="No requests yet.").render()}
    </section>"""
    return render_page(request, "Exams", content, problems=problems)


@student_router.post("/exams/requests")
async def exam_request_submit(request: Request):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    session = deps.require_session(request)
    form = await request.form()
    try:
        deps.get_service().request_reexam(
            student_id=session.subject_id,
            student_name=session.display_name,
            exam_name=form_text(form, "exam_name"),
            exam_date=form_text(form, "exam_date"),
            reason=form_text(form, "reason"),
        )
    except ProgressError as exc:
        return failure_redirect(request, "/exams", "Request failed", exc)
    return redirect_with_notice(request, "/exams", "success", "Request submitted")
