"""Repository contract shared by the memory, REST and Supabase collaborators."""
from __future__ import annotations

from typing import List, Optional, Protocol

from .domain import (
    CourseRegistration,
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
)


class ProgressRepoProtocol(Protocol):
    # DC meetings
    def list_meetings(self) -> List[DCMeeting]: ...

    def list_meetings_for_student(self, student_id: str) -> List[DCMeeting]: ...

    def create_meeting(self, *, student_id: str, student_name: str, date: str, upload: Upload) -> DCMeeting: ...

    def set_meeting_status(self, meeting_id: str, status: str, *, note: Optional[str] = None) -> DCMeeting: ...

    def get_meeting_file(self, meeting_id: str) -> FileDownload: ...

    # Publications
    def list_publications(self) -> List[Publication]: ...

    def list_publications_for_student(self, student_id: str) -> List[Publication]: ...

    def create_publication(
        self,
        *,
        student_id: str,
        student_name: str,
        title: str,
        venue: str,
        authors: str,
        upload: Upload,
    ) -> Publication: ...

    def set_publication_validated(self, publication_id: str, validated: bool) -> Publication: ...

    def get_publication_file(self, publication_id: str) -> FileDownload: ...

    # SWAYAM courses and registrations
    def list_courses(self) -> List[SwayamCourse]: ...

    def create_course(self, *, name: str, provider: str, duration: str, description: str) -> SwayamCourse: ...

    def update_course(
        self, course_id: str, *, name: str, provider: str, duration: str, description: str
    ) -> SwayamCourse: ...

    def delete_course(self, course_id: str) -> None: ...

    def registrations_for_course(self, course_id: str) -> List[CourseRegistration]: ...

    def list_registrations(self, student_id: Optional[str] = None) -> List[CourseRegistration]: ...

    def create_registration(
        self, *, course_id: str, student_id: str, student_name: str, status: str
    ) -> CourseRegistration: ...

    def set_registration_status(self, registration_id: str, status: str) -> CourseRegistration: ...

    # Exams
    def list_exams(self, student_id: str) -> List[Exam]: ...

    def list_exam_requests(self, student_id: Optional[str] = None) -> List[ExamRequest]: ...

    def create_exam_request(
        self, *, student_id: str, student_name: str, exam_name: str, exam_date: str, reason: str
    ) -> ExamRequest: ...

    def set_exam_request_status(self, request_id: str, status: str) -> ExamRequest: ...

    def list_exam_dates(self) -> List[ExamDate]: ...

    def create_exam_date(self, *, course: str, date: str, time: str, venue: str) -> ExamDate: ...

    def list_exam_results(self) -> List[ExamResult]: ...

    # Roster
    def list_students(self) -> List[StudentSummary]: ...


__all__ = ["ProgressRepoProtocol"]
