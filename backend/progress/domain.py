"""
Progress domain records and status vocabularies.

Dates are ISO `YYYY-MM-DD` strings, timestamps ISO-8601 UTC strings; the
collaborators store them in exactly that form.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

MEETING_PENDING = "Pending Approval"
MEETING_APPROVED = "Approved"
MEETING_NEEDS_MODIFICATION = "Needs Modification"
MEETING_STATUSES = (MEETING_PENDING, MEETING_APPROVED, MEETING_NEEDS_MODIFICATION)

PUBLICATION_PUBLISHED = "Published"
PUBLICATION_UNDER_REVIEW = "Under Review"

REGISTRATION_PENDING = "Pending"
REGISTRATION_APPROVED = "Approved"
REGISTRATION_REJECTED = "Rejected"
REGISTRATION_REGISTERED = "Registered"
REGISTRATION_STATUSES = (
    REGISTRATION_PENDING,
    REGISTRATION_APPROVED,
    REGISTRATION_REJECTED,
    REGISTRATION_REGISTERED,
)

REQUEST_PENDING = "Pending"
REQUEST_APPROVED = "Approved"
REQUEST_REJECTED = "Rejected"
REQUEST_STATUSES = (REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED)

EXAM_PASSED = "Passed"
EXAM_PENDING = "Pending"

RESULT_PUBLISHED = "Published"
RESULT_DRAFT = "Draft"

DEFAULT_PROVIDER = "SWAYAM"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class DCMeeting:
    id: str
    student_id: str
    student_name: str
    date: str
    status: str = MEETING_PENDING
    minutes_file_name: str = ""
    minutes_file_url: Optional[str] = None
    modification_note: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Publication:
    id: str
    student_id: str
    student_name: str
    title: str
    venue: str
    authors: str = ""
    file_name: str = ""
    file_url: Optional[str] = None
    validated: bool = False
    uploaded_at: Optional[str] = None

    @property
    def status(self) -> str:
        return PUBLICATION_PUBLISHED if self.validated else PUBLICATION_UNDER_REVIEW


@dataclass
class SwayamCourse:
    id: str
    name: str
    provider: str = DEFAULT_PROVIDER
    duration: str = ""
    description: str = ""
    created_at: Optional[str] = None


@dataclass
class CourseRegistration:
    id: str
    course_id: str
    student_id: str
    status: str = REGISTRATION_PENDING
    student_name: str = ""
    registered_at: Optional[str] = None


@dataclass
class Exam:
    id: str
    student_id: str
    name: str
    date: str
    status: str = EXAM_PENDING


@dataclass
class ExamRequest:
    id: str
    student_id: str
    student_name: str
    exam_name: str
    exam_date: str
    reason: str
    status: str = REQUEST_PENDING
    submitted_at: Optional[str] = None


@dataclass
class ExamDate:
    id: str
    course: str
    date: str
    time: str
    venue: str


@dataclass
class CourseResult:
    code: str
    name: str
    grade: str
    status: str = RESULT_DRAFT


@dataclass
class ExamResult:
    student_id: str
    student_name: str
    term: str = ""
    courses: List[CourseResult] = field(default_factory=list)


@dataclass
class StudentSummary:
    id: str
    name: str
    research_area: str = ""
    progress: int = 0


@dataclass
class Upload:
    """An uploaded file as received from a form."""

    file_name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FileDownload:
    """Either inline bytes or a URL the browser can be redirected to."""

    file_name: str
    content_type: str = "application/octet-stream"
    content: Optional[bytes] = None
    url: Optional[str] = None
