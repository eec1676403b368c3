"""
Coordinator portal routes (required role: coordinator).

Overview counts, the publication register, exam results, the SWAYAM course
catalogue with registration approval, and exam date announcements.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.progress.domain import (
    REGISTRATION_APPROVED,
    REGISTRATION_PENDING,
    REGISTRATION_REJECTED,
)
from backend.progress.errors import ProgressError
from backend.progress.service import course_names
from backend.web import deps
from backend.web.components import ActionButton, CourseForm, DataTable, ExamDateForm, StatCard, StatusBadge
from backend.web.components.base import Component
from backend.web.notices import Notice

from .pages import failure_redirect, fetch, form_text, redirect_with_notice, render_page
from .security import _is_same_origin, cross_site_forbidden

coordinator_router = APIRouter(prefix="/coordinator", tags=["Coordinator"])
logger = logging.getLogger("dpt.web")

esc = Component.escape

COURSES_PATH = "/coordinator/swayam-courses"


@coordinator_router.get("", response_class=HTMLResponse)
async def coordinator_dashboard(request: Request):
    repo = deps.get_service().repo
    problems: List[Notice] = []
    publications = fetch(problems, repo.list_publications, [], "publications")
    results = fetch(problems, repo.list_exam_results, [], "exam results")
    courses = fetch(problems, repo.list_courses, [], "courses")
    registrations = fetch(problems, repo.list_registrations, [], "registrations")
    dates = fetch(problems, repo.list_exam_dates, [], "exam dates")

    waiting = sum(1 for r in registrations if r.status == REGISTRATION_PENDING)
    validated = sum(1 for p in publications if p.validated)
    cards = "".join(
        [
            StatCard("Publications", len(publications), icon="📄", href="/coordinator/publications",
                     hint=f"{validated} published").render(),
            StatCard("Exam results", len(results), icon="🎓", href="/coordinator/exam-results").render(),
            StatCard("SWAYAM courses", len(courses), icon="📚", href=COURSES_PATH,
                     hint=f"{waiting} registrations waiting").render(),
            StatCard("Exam dates", len(dates), icon="🗓", href="/coordinator/exam-dates").render(),
        ]
    )
    content = f"""
    <div class="page-header"><h1>Coordinator Dashboard</h1></div>
    <section class="stat-grid">{cards}</section>"""
    return render_page(request, "Coordinator Dashboard", content, problems=problems)


@coordinator_router.get("/publications", response_class=HTMLResponse)
async def coordinator_publications(request: Request):
    problems: List[Notice] = []
    publications = fetch(problems, deps.get_service().repo.list_publications, [], "publications")
    rows = [
        [esc(p.student_name), esc(p.title), esc(p.venue), esc(p.authors), StatusBadge(p.status).render()]
        for p in publications
    ]
    content = f"""
    <div class="page-header"><h1>Publications</h1></div>
    <section class="card">
        {DataTable(["Student", "Title", "Venue", "Authors", "Status"], rows,
                   empty_text="No publications recorded.").render()}
    </section>"""
    return render_page(request, "Publications", content, problems=problems)


@coordinator_router.get("/exam-results", response_class=HTMLResponse)
async def coordinator_exam_results(request: Request):
    problems: List[Notice] = []
    results = fetch(problems, deps.get_service().repo.list_exam_results, [], "exam results")
    sections = []
    for result in results:
        rows = [
            [esc(c.code), esc(c.name), esc(c.grade), StatusBadge(c.status).render()] for c in result.courses
        ]
        sections.append(
            f"""
    <section class="card">
        <h2>{esc(result.student_name)} <span class="muted">{esc(result.term)}</span></h2>
        {DataTable(["Code", "Course", "Grade", "Status"], rows, empty_text="No courses graded.").render()}
    </section>"""
        )
    body = "".join(sections) or '<p class="empty-state">No exam results available.</p>'
    content = f'<div class="page-header"><h1>Exam Results</h1></div>{body}'
    return render_page(request, "Exam Results", content, problems=problems)


# --- SWAYAM courses ------------------------------------------------------------


@coordinator_router.get("/swayam-courses", response_class=HTMLResponse)
async def coordinator_courses(request: Request, q: str = ""):
    service = deps.get_service()
    problems: List[Notice] = []
    courses = fetch(problems, lambda: service.search_courses(q), [], "courses")
    registrations = fetch(problems, service.repo.list_registrations, [], "registrations")
    names = course_names(fetch(problems, service.repo.list_courses, [], "courses")) if q else course_names(courses)

    course_blocks = []
    for c in courses:
        delete = ActionButton(f"{COURSES_PATH}/{c.id}/delete", "Delete", variant="danger").render()
        course_blocks.append(
            f"""
        <details class="course-item">
            <summary><strong>{esc(c.name)}</strong> <span class="muted">{esc(c.provider)}
            {esc(c.duration)}</span></summary>
            <p>{esc(c.description)}</p>
            {CourseForm(f"{COURSES_PATH}/{c.id}", course=c, submit_label="Save changes").render()}
            {delete}
        </details>"""
        )
    course_list = "".join(course_blocks) or '<p class="empty-state">No courses match your search.</p>'

    registration_rows = []
    for r in registrations:
        actions = ""
        if r.status == REGISTRATION_PENDING:
            actions = (
                ActionButton(f"{COURSES_PATH}/registrations/{r.id}/status", "Approve", variant="primary",
                             hidden={"status": REGISTRATION_APPROVED}).render()
                + ActionButton(f"{COURSES_PATH}/registrations/{r.id}/status", "Reject", variant="danger",
                               hidden={"status": REGISTRATION_REJECTED}).render()
            )
        registration_rows.append(
            [esc(r.student_name), esc(names.get(r.course_id, r.course_id)), StatusBadge(r.status).render(), actions]
        )

    content = f"""
    <div class="page-header"><h1>SWAYAM Courses</h1></div>
    <form method="get" action="{COURSES_PATH}" class="search-form" role="search">
        <label for="course-search" class="sr-only">Search courses</label>
        <input type="search" id="course-search" name="q" value="{esc(q)}" placeholder="Search by name or provider">
        <button type="submit" class="btn btn-secondary">Search</button>
    </form>
    <section class="card">
        <h2>Add a course</h2>
        {CourseForm(COURSES_PATH).render()}
    </section>
    <section class="card">
        <h2>Catalogue</h2>
        {course_list}
    </section>
    <section class="card">
        <h2>Student registrations</h2>
        {DataTable(["Student", "Course", "Status", ""], registration_rows,
                   empty_text="No registrations yet.").render()}
    </section>"""
    return render_page(request, "SWAYAM Courses", content, problems=problems)


@coordinator_router.post("/swayam-courses")
async def coordinator_course_create(request: Request):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    try:
        course = deps.get_service().add_course(
            name=form_text(form, "name"),
            provider=form_text(form, "provider"),
            duration=form_text(form, "duration"),
            description=form_text(form, "description"),
        )
    except ProgressError as exc:
        return failure_redirect(request, COURSES_PATH, "Could not add course", exc)
    return redirect_with_notice(request, COURSES_PATH, "success", "Course added", course.name)


@coordinator_router.post("/swayam-courses/{course_id}")
async def coordinator_course_update(request: Request, course_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    try:
        deps.get_service().update_course(
            course_id,
            name=form_text(form, "name"),
            provider=form_text(form, "provider"),
            duration=form_text(form, "duration"),
            description=form_text(form, "description"),
        )
    except ProgressError as exc:
        return failure_redirect(request, COURSES_PATH, "Could not update course", exc)
    return redirect_with_notice(request, COURSES_PATH, "success", "Course updated")


@coordinator_router.post("/swayam-courses/{course_id}/delete")
async def coordinator_course_delete(request: Request, course_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    try:
        deps.get_service().delete_course(course_id)
    except ProgressError as exc:
        return failure_redirect(request, COURSES_PATH, "Could not delete course", exc)
    return redirect_with_notice(request, COURSES_PATH, "success", "Course deleted")


@coordinator_router.post("/swayam-courses/registrations/{registration_id}/status")
async def coordinator_registration_status(request: Request, registration_id: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    status = form_text(form, "status")
    try:
        deps.get_service().set_registration_status(registration_id, status)
    except ProgressError as exc:
        return failure_redirect(request, COURSES_PATH, "Could not update registration", exc)
    return redirect_with_notice(request, COURSES_PATH, "success", f"Registration {status.lower()}")


# --- exam dates ----------------------------------------------------------------


@coordinator_router.get("/exam-dates", response_class=HTMLResponse)
async def coordinator_exam_dates(request: Request):
    problems: List[Notice] = []
    dates = fetch(problems, deps.get_service().repo.list_exam_dates, [], "exam dates")
    rows = [[esc(d.course), esc(d.date), esc(d.time), esc(d.venue)] for d in dates]
    content = f"""
    <div class="page-header"><h1>Exam Dates</h1></div>
    <section class="card">
        <h2>Announce an exam date</h2>
        {ExamDateForm().render()}
    </section>
    <section class="card">
        <h2>Announced dates</h2>
        {DataTable(["Course", "Date", "Time", "Venue"], rows, empty_text="No exam dates announced.").render()}
    </section>"""
    return render_page(request, "Exam Dates", content, problems=problems)


@coordinator_router.post("/exam-dates")
async def coordinator_exam_date_create(request: Request):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    try:
        deps.get_service().announce_exam_date(
            course=form_text(form, "course"),
            date=form_text(form, "date"),
            time=form_text(form, "time"),
            venue=form_text(form, "venue"),
        )
    except ProgressError as exc:
        return failure_redirect(request, "/coordinator/exam-dates", "Could not announce date", exc)
    return redirect_with_notice(request, "/coordinator/exam-dates", "success", "Exam date announced")
