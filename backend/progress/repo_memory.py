"""
In-memory progress repository for development and tests.

Seeded with the sample roster, courses and exam schedule the portals show
before a real backend is connected. Files are kept in a `MemoryBlobStorage`
and streamed back on download.
"""
from __future__ import annotations

import mimetypes
import os
from dataclasses import replace
from typing import Dict, List, Optional
from uuid import uuid4

from .domain import (
    EXAM_PASSED,
    EXAM_PENDING,
    MEETING_APPROVED,
    MEETING_PENDING,
    REQUEST_PENDING,
    RESULT_DRAFT,
    RESULT_PUBLISHED,
    CourseRegistration,
    CourseResult,
    DCMeeting,
    Exam,
    ExamDate,
    ExamRequest,
    ExamResult,
    FileDownload,
    Publication,
    StudentSummary,
    SwayamCourse,
    Upload,
    utcnow_iso,
)
from .errors import NotFound
from .storage import MemoryBlobStorage

_SAMPLE_STUDENT_ID = "student-abhay-kumar"
_SAMPLE_EXAMS = (
    ("Comprehensive Exam", "2024-02-25", EXAM_PASSED),
    ("Advanced Algorithms", "2024-03-10", EXAM_PENDING),
    ("Machine Learning", "2024-02-25", EXAM_PENDING),
)


def _new_id() -> str:
    return str(uuid4())


def _ext(file_name: str) -> str:
    return os.path.splitext(file_name)[1].lower()


class InMemoryProgressRepo:
    def __init__(self, *, seed: bool = True) -> None:
        self.blobs = MemoryBlobStorage()
        self.meetings: Dict[str, DCMeeting] = {}
        self.meeting_keys: Dict[str, str] = {}
        self.publications: Dict[str, Publication] = {}
        self.publication_keys: Dict[str, str] = {}
        self.courses: Dict[str, SwayamCourse] = {}
        self.registrations: Dict[str, CourseRegistration] = {}
        self.exams: Dict[str, List[Exam]] = {}
        self.exam_requests: Dict[str, ExamRequest] = {}
        self.exam_dates: Dict[str, ExamDate] = {}
        self.exam_results: List[ExamResult] = []
        self.students: List[StudentSummary] = []
        if seed:
            self._seed()

    def _seed(self) -> None:
        self.students = [
            StudentSummary(id=_SAMPLE_STUDENT_ID, name="Abhay Kumar", research_area="Machine Learning", progress=85),
            StudentSummary(id="student-adarsh-kharwar", name="Adarsh Kharwar", research_area="Distributed Systems", progress=60),
        ]
        for meeting in (
            DCMeeting(id=_new_id(), student_id=_SAMPLE_STUDENT_ID, student_name="Abhay Kumar",
                      date="2024-03-12", status=MEETING_PENDING, updated_at=utcnow_iso()),
            DCMeeting(id=_new_id(), student_id=_SAMPLE_STUDENT_ID, student_name="Abhay Kumar",
                      date="2024-01-20", status=MEETING_APPROVED, updated_at=utcnow_iso()),
        ):
            self.meetings[meeting.id] = meeting
        for idx, (name, provider, duration, description) in enumerate((
            ("Introduction to Machine Learning", "NPTEL", "12 weeks", "Learn the fundamentals of machine learning"),
            ("Advanced Database Systems", "IIT Bombay", "8 weeks", "Advanced concepts in database management"),
        )):
            course = SwayamCourse(
                id=_new_id(), name=name, provider=provider, duration=duration, description=description,
                created_at=f"2024-01-0{idx + 1}T00:00:00+00:00",
            )
            self.courses[course.id] = course
        request = ExamRequest(
            id=_new_id(), student_id=_SAMPLE_STUDENT_ID, student_name="Abhay Kumar",
            exam_name="Advanced Algorithms", exam_date="2024-03-10",
            reason="Medical emergency on the exam day", status=REQUEST_PENDING, submitted_at=utcnow_iso(),
        )
        self.exam_requests[request.id] = request
        for course, when, time, venue in (
            ("Advanced Algorithms", "2024-04-15", "10:00 AM", "Main Examination Hall"),
            ("Machine Learning", "2024-04-20", "2:00 PM", "Computer Science Department"),
        ):
            exam_date = ExamDate(id=_new_id(), course=course, date=when, time=time, venue=venue)
            self.exam_dates[exam_date.id] = exam_date
        self.exam_results = [
            ExamResult(student_id=_SAMPLE_STUDENT_ID, student_name="Abhay Kumar", term="Spring 2024", courses=[
                CourseResult(code="CS501", name="Advanced Algorithms", grade="A", status=RESULT_PUBLISHED),
                CourseResult(code="CS502", name="Machine Learning", grade="A-", status=RESULT_PUBLISHED),
            ]),
            ExamResult(student_id="student-adarsh-kharwar", student_name="Adarsh Kharwar", term="Spring 2024", courses=[
                CourseResult(code="CS501", name="Advanced Algorithms", grade="B+", status=RESULT_DRAFT),
            ]),
        ]

    # --- DC meetings -------------------------------------------------------------

    def list_meetings(self) -> List[DCMeeting]:
        return sorted(self.meetings.values(), key=lambda m: m.date, reverse=True)

    def list_meetings_for_student(self, student_id: str) -> List[DCMeeting]:
        return [m for m in self.list_meetings() if m.student_id == student_id]

    def create_meeting(self, *, student_id: str, student_name: str, date: str, upload: Upload) -> DCMeeting:
        mid = _new_id()
        key = f"dc-meetings/{mid}{_ext(upload.file_name)}"
        self.blobs.put_object(key=key, body=upload.content, content_type=upload.content_type)
        meeting = DCMeeting(
            id=mid,
            student_id=student_id,
            student_name=student_name,
            date=date,
            status=MEETING_PENDING,
            minutes_file_name=upload.file_name,
            updated_at=utcnow_iso(),
        )
        self.meetings[mid] = meeting
        self.meeting_keys[mid] = key
        return meeting

    def set_meeting_status(self, meeting_id: str, status: str, *, note: Optional[str] = None) -> DCMeeting:
        current = self.meetings.get(meeting_id)
        if current is None:
            raise NotFound("DC meeting not found")
        updated = replace(current, status=status, modification_note=note, updated_at=utcnow_iso())
        self.meetings[meeting_id] = updated
        return updated

    def get_meeting_file(self, meeting_id: str) -> FileDownload:
        meeting = self.meetings.get(meeting_id)
        key = self.meeting_keys.get(meeting_id)
        if meeting is None or key is None:
            raise NotFound("No minutes file available")
        return FileDownload(
            file_name=meeting.minutes_file_name,
            content_type=self.blobs.content_type(key),
            content=self.blobs.get_object(key=key),
        )

    # --- publications ----------------------------------------------------------

    def list_publications(self) -> List[Publication]:
        return sorted(self.publications.values(), key=lambda p: p.uploaded_at or "", reverse=True)

    def list_publications_for_student(self, student_id: str) -> List[Publication]:
        return [p for p in self.list_publications() if p.student_id == student_id]

    def create_publication(
        self,
        *,
        student_id: str,
        student_name: str,
        title: str,
        venue: str,
        authors: str,
        upload: Upload,
    ) -> Publication:
        pid = _new_id()
        key = f"publications/{pid}{_ext(upload.file_name)}"
        self.blobs.put_object(key=key, body=upload.content, content_type=upload.content_type)
        publication = Publication(
            id=pid,
            student_id=student_id,
            student_name=student_name,
            title=title,
            venue=venue,
            authors=authors,
            file_name=upload.file_name,
            validated=False,
            uploaded_at=utcnow_iso(),
        )
        self.publications[pid] = publication
        self.publication_keys[pid] = key
        return publication

    def set_publication_validated(self, publication_id: str, validated: bool) -> Publication:
        current = self.publications.get(publication_id)
        if current is None:
            raise NotFound("Publication not found")
        updated = replace(current, validated=validated)
        self.publications[publication_id] = updated
        return updated

    def get_publication_file(self, publication_id: str) -> FileDownload:
        publication = self.publications.get(publication_id)
        key = self.publication_keys.get(publication_id)
        if publication is None or key is None:
            raise NotFound("Publication file not found")
        content_type = mimetypes.guess_type(publication.file_name)[0] or self.blobs.content_type(key)
        return FileDownload(file_name=publication.file_name, content_type=content_type, content=self.blobs.get_object(key=key))

    # --- SWAYAM courses ------------------------------------------------------------

    def list_courses(self) -> List[SwayamCourse]:
        return sorted(self.courses.values(), key=lambda c: c.created_at or "", reverse=True)

    def create_course(self, *, name: str, provider: str, duration: str, description: str) -> SwayamCourse:
        course = SwayamCourse(
            id=_new_id(), name=name, provider=provider, duration=duration, description=description, created_at=utcnow_iso()
        )
        self.courses[course.id] = course
        return course

    def update_course(
        self, course_id: str, *, name: str, provider: str, duration: str, description: str
    ) -> SwayamCourse:
        current = self.courses.get(course_id)
        if current is None:
            raise NotFound("Course not found")
        updated = replace(current, name=name, provider=provider, duration=duration, description=description)
        self.courses[course_id] = updated
        return updated

    def delete_course(self, course_id: str) -> None:
        if self.courses.pop(course_id, None) is None:
            raise NotFound("Course not found")

    def registrations_for_course(self, course_id: str) -> List[CourseRegistration]:
        return [r for r in self.registrations.values() if r.course_id == course_id]

    def list_registrations(self, student_id: Optional[str] = None) -> List[CourseRegistration]:
        items = list(self.registrations.values())
        if student_id is not None:
            items = [r for r in items if r.student_id == student_id]
        return items

    def create_registration(
        self, *, course_id: str, student_id: str, student_name: str, status: str
    ) -> CourseRegistration:
        if course_id not in self.courses:
            raise NotFound("Course not found")
        registration = CourseRegistration(
            id=_new_id(),
            course_id=course_id,
            student_id=student_id,
            student_name=student_name,
            status=status,
            registered_at=utcnow_iso(),
        )
        self.registrations[registration.id] = registration
        return registration

    def set_registration_status(self, registration_id: str, status: str) -> CourseRegistration:
        current = self.registrations.get(registration_id)
        if current is None:
            raise NotFound("Registration not found")
        updated = replace(current, status=status)
        self.registrations[registration_id] = updated
        return updated

    # --- exams -------------------------------------------------------------------

    def list_exams(self, student_id: str) -> List[Exam]:
        # Every student starts from the programme's standard exam plan.
        if student_id not in self.exams:
            self.exams[student_id] = [
                Exam(id=_new_id(), student_id=student_id, name=name, date=when, status=status)
                for name, when, status in _SAMPLE_EXAMS
            ]
        return list(self.exams[student_id])

    def list_exam_requests(self, student_id: Optional[str] = None) -> List[ExamRequest]:
        items = sorted(self.exam_requests.values(), key=lambda r: r.submitted_at or "", reverse=True)
        if student_id is not None:
            items = [r for r in items if r.student_id == student_id]
        return items

    def create_exam_request(
        self, *, student_id: str, student_name: str, exam_name: str, exam_date: str, reason: str
    ) -> ExamRequest:
        request = ExamRequest(
            id=_new_id(),
            student_id=student_id,
            student_name=student_name,
            exam_name=exam_name,
            exam_date=exam_date,
            reason=reason,
            status=REQUEST_PENDING,
            submitted_at=utcnow_iso(),
        )
        self.exam_requests[request.id] = request
        return request

    def set_exam_request_status(self, request_id: str, status: str) -> ExamRequest:
        current = self.exam_requests.get(request_id)
        if current is None:
            raise NotFound("Exam request not found")
        updated = replace(current, status=status)
        self.exam_requests[request_id] = updated
        return updated

    def list_exam_dates(self) -> List[ExamDate]:
        return sorted(self.exam_dates.values(), key=lambda d: d.date)

    def create_exam_date(self, *, course: str, date: str, time: str, venue: str) -> ExamDate:
        exam_date = ExamDate(id=_new_id(), course=course, date=date, time=time, venue=venue)
        self.exam_dates[exam_date.id] = exam_date
        return exam_date

    def list_exam_results(self) -> List[ExamResult]:
        return list(self.exam_results)

    def list_students(self) -> List[StudentSummary]:
        return list(self.students)


__all__ = ["InMemoryProgressRepo"]
