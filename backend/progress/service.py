"""
Progress use cases independent of the web adapters.

Required-field checks and the cross-record rules (duplicate registrations,
courses still in use) live here so every collaborator behaves the same. The
repositories only persist.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import date as _date
from typing import List, Optional, Sequence, Tuple

from .domain import (
    DEFAULT_PROVIDER,
    EXAM_PASSED,
    MEETING_APPROVED,
    MEETING_NEEDS_MODIFICATION,
    MEETING_PENDING,
    REGISTRATION_PENDING,
    REGISTRATION_STATUSES,
    REQUEST_APPROVED,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    CourseRegistration,
    DCMeeting,
    ExamDate,
    ExamRequest,
    Publication,
    SwayamCourse,
    Upload,
)
from .errors import ProgressError, RemoteRejection, ValidationFailure
from .repo import ProgressRepoProtocol

logger = logging.getLogger("dpt.progress")

COURSE_IN_USE = "This course is registered by students and cannot be deleted"
COURSE_CHECK_FAILED = "Could not verify if course is in use"


@dataclass
class UploadSettings:
    """Limits for minutes and publication uploads."""

    accepted_extensions: Tuple[str, ...] = (".pdf", ".doc", ".docx")
    max_size_bytes: int = 5 * 1024 * 1024

    @property
    def max_size_mb(self) -> int:
        return self.max_size_bytes // (1024 * 1024)


def _required(value: Optional[str], field_name: str, message: str = "Please fill all fields") -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationFailure(message, field=field_name)
    return cleaned


def _iso_date(value: Optional[str], field_name: str) -> str:
    cleaned = _required(value, field_name)
    try:
        return _date.fromisoformat(cleaned).isoformat()
    except ValueError:
        raise ValidationFailure("Please enter a valid date", field=field_name) from None


@dataclass
class ProgressService:
    repo: ProgressRepoProtocol
    uploads: UploadSettings = field(default_factory=UploadSettings)

    # --- uploads ---------------------------------------------------------------

    def check_upload(self, upload: Optional[Upload]) -> Upload:
        if upload is None or not upload.file_name or upload.size == 0:
            raise ValidationFailure("Please select a file to upload", field="file")
        ext = os.path.splitext(upload.file_name)[1].lower()
        if ext not in self.uploads.accepted_extensions:
            allowed = ", ".join(self.uploads.accepted_extensions)
            raise ValidationFailure(f"Only {allowed} files are accepted", field="file")
        if upload.size > self.uploads.max_size_bytes:
            raise ValidationFailure(f"File exceeds the {self.uploads.max_size_mb}MB limit.", field="file")
        return upload

    # --- DC meetings -----------------------------------------------------------

    def submit_meeting(self, *, student_id: str, student_name: str, date: str, upload: Optional[Upload]) -> DCMeeting:
        meeting_date = _iso_date(date, "date")
        checked = self.check_upload(upload)
        meeting = self.repo.create_meeting(
            student_id=student_id, student_name=student_name, date=meeting_date, upload=checked
        )
        logger.info("dc meeting submitted id=%s student=%s", meeting.id, student_id)
        return meeting

    def pending_meetings(self, limit: Optional[int] = None) -> Tuple[List[DCMeeting], int]:
        """Return (first `limit` pending meetings, total pending)."""
        pending = [m for m in self.repo.list_meetings() if m.status == MEETING_PENDING]
        shown = pending if limit is None else pending[:limit]
        return shown, len(pending)

    def approve_meeting(self, meeting_id: str) -> DCMeeting:
        return self.repo.set_meeting_status(meeting_id, MEETING_APPROVED)

    def request_meeting_changes(self, meeting_id: str, note: Optional[str]) -> DCMeeting:
        cleaned = _required(note, "note", "Please provide modification details")
        return self.repo.set_meeting_status(meeting_id, MEETING_NEEDS_MODIFICATION, note=cleaned)

    # --- publications ----------------------------------------------------------

    def submit_publication(
        self,
        *,
        student_id: str,
        student_name: str,
        title: str,
        venue: str,
        authors: str = "",
        upload: Optional[Upload],
    ) -> Publication:
        clean_title = _required(title, "title")
        clean_venue = _required(venue, "venue")
        checked = self.check_upload(upload)
        return self.repo.create_publication(
            student_id=student_id,
            student_name=student_name,
            title=clean_title,
            venue=clean_venue,
            authors=(authors or "").strip(),
            upload=checked,
        )

    def set_publication_validated(self, publication_id: str, validated: bool) -> Publication:
        publication = self.repo.set_publication_validated(publication_id, validated)
        logger.info("publication %s validated=%s", publication_id, validated)
        return publication

    # --- SWAYAM courses --------------------------------------------------------

    def search_courses(self, query: Optional[str] = None) -> List[SwayamCourse]:
        courses = self.repo.list_courses()
        needle = (query or "").strip().lower()
        if not needle:
            return courses
        return [c for c in courses if needle in c.name.lower() or needle in (c.provider or "").lower()]

    def add_course(self, *, name: str, provider: str = "", duration: str = "", description: str = "") -> SwayamCourse:
        return self.repo.create_course(
            name=_required(name, "name", "Course name is required"),
            provider=(provider or "").strip() or DEFAULT_PROVIDER,
            duration=(duration or "").strip(),
            description=(description or "").strip(),
        )

    def update_course(
        self, course_id: str, *, name: str, provider: str = "", duration: str = "", description: str = ""
    ) -> SwayamCourse:
        return self.repo.update_course(
            course_id,
            name=_required(name, "name", "Course name is required"),
            provider=(provider or "").strip() or DEFAULT_PROVIDER,
            duration=(duration or "").strip(),
            description=(description or "").strip(),
        )

    def delete_course(self, course_id: str) -> None:
        try:
            registrations = self.repo.registrations_for_course(course_id)
        except ProgressError as exc:
            logger.warning("course usage check failed for %s: %s", course_id, exc.message)
            raise RemoteRejection(COURSE_CHECK_FAILED) from exc
        if registrations:
            raise RemoteRejection(COURSE_IN_USE, status_code=409)
        self.repo.delete_course(course_id)

    def register_course(self, *, course_id: str, student_id: str, student_name: str) -> CourseRegistration:
        existing = self.repo.list_registrations(student_id)
        if any(r.course_id == course_id for r in existing):
            names = {c.id: c.name for c in self.repo.list_courses()}
            raise ValidationFailure(
                f"You are already registered for {names.get(course_id, 'this course')}", field="course_id"
            )
        return self.repo.create_registration(
            course_id=course_id, student_id=student_id, student_name=student_name, status=REGISTRATION_PENDING
        )

    def set_registration_status(self, registration_id: str, status: str) -> CourseRegistration:
        if status not in REGISTRATION_STATUSES:
            raise ValidationFailure("Unknown registration status", field="status")
        return self.repo.set_registration_status(registration_id, status)

    # --- exams -----------------------------------------------------------------

    def request_reexam(
        self, *, student_id: str, student_name: str, exam_name: str, exam_date: str, reason: str
    ) -> ExamRequest:
        return self.repo.create_exam_request(
            student_id=student_id,
            student_name=student_name,
            exam_name=_required(exam_name, "exam_name"),
            exam_date=_iso_date(exam_date, "exam_date"),
            reason=_required(reason, "reason"),
        )

    def reviewable_exam_requests(self) -> List[ExamRequest]:
        """Requests a supervisor still acts on or has signed off as passed."""
        return [r for r in self.repo.list_exam_requests() if r.status in (REQUEST_PENDING, EXAM_PASSED)]

    def decide_exam_request(self, request_id: str, approve: bool) -> ExamRequest:
        return self.repo.set_exam_request_status(request_id, REQUEST_APPROVED if approve else REQUEST_REJECTED)

    def announce_exam_date(self, *, course: str, date: str, time: str, venue: str) -> ExamDate:
        return self.repo.create_exam_date(
            course=_required(course, "course"),
            date=_iso_date(date, "date"),
            time=_required(time, "time"),
            venue=_required(venue, "venue"),
        )


def course_names(courses: Sequence[SwayamCourse]) -> dict[str, str]:
    return {c.id: c.name for c in courses}


__all__ = ["ProgressService", "UploadSettings", "COURSE_IN_USE", "COURSE_CHECK_FAILED", "course_names"]
