"""
REST collaborator client (the programme's Spring API).

JSON over HTTP below a configurable base URL (default
`http://localhost:8080/api`). Uploads are multipart; everything else is JSON.

Error mapping:
    - transport errors (connect, DNS, timeout) -> NetworkFailure
    - any non-2xx answer -> RemoteRejection with the body's `message` or the
      reason phrase
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .domain import (
    PUBLICATION_PUBLISHED,
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
)
from .errors import NetworkFailure, RemoteRejection

logger = logging.getLogger("dpt.progress")

DEFAULT_BASE_URL = "http://localhost:8080/api"


def _s(value: Any) -> str:
    return "" if value is None else str(value)


def _meeting(d: Dict[str, Any]) -> DCMeeting:
    return DCMeeting(
        id=_s(d.get("id")),
        student_id=_s(d.get("studentId")),
        student_name=_s(d.get("studentName")),
        date=_s(d.get("date")),
        status=_s(d.get("status")),
        minutes_file_name=_s(d.get("minutes") or d.get("minutesFileName")),
        minutes_file_url=d.get("minutesFileUrl"),
        modification_note=d.get("modificationNote"),
        updated_at=d.get("updatedAt"),
    )


def _publication(d: Dict[str, Any]) -> Publication:
    validated = d.get("validated")
    if validated is None:
        validated = d.get("status") == PUBLICATION_PUBLISHED
    return Publication(
        id=_s(d.get("id")),
        student_id=_s(d.get("studentId")),
        student_name=_s(d.get("studentName")),
        title=_s(d.get("title")),
        venue=_s(d.get("venue")),
        authors=_s(d.get("authors")),
        file_name=_s(d.get("fileName")),
        file_url=d.get("fileUrl"),
        validated=bool(validated),
        uploaded_at=d.get("date") or d.get("uploadedAt"),
    )


def _course(d: Dict[str, Any]) -> SwayamCourse:
    return SwayamCourse(
        id=_s(d.get("id")),
        name=_s(d.get("name")),
        provider=_s(d.get("provider")),
        duration=_s(d.get("duration")),
        description=_s(d.get("description")),
        created_at=d.get("createdAt"),
    )


def _registration(d: Dict[str, Any]) -> CourseRegistration:
    return CourseRegistration(
        id=_s(d.get("id")),
        course_id=_s(d.get("courseId")),
        student_id=_s(d.get("studentId")),
        student_name=_s(d.get("studentName")),
        status=_s(d.get("status")),
        registered_at=d.get("registeredAt"),
    )


def _exam_request(d: Dict[str, Any]) -> ExamRequest:
    return ExamRequest(
        id=_s(d.get("id")),
        student_id=_s(d.get("studentId")),
        student_name=_s(d.get("studentName")),
        exam_name=_s(d.get("examName")),
        exam_date=_s(d.get("examDate")),
        reason=_s(d.get("reason")),
        status=_s(d.get("status")),
        submitted_at=d.get("submittedAt"),
    )


def _exam_date(d: Dict[str, Any]) -> ExamDate:
    return ExamDate(
        id=_s(d.get("id")), course=_s(d.get("course")), date=_s(d.get("date")),
        time=_s(d.get("time")), venue=_s(d.get("venue")),
    )


def _exam_result(d: Dict[str, Any]) -> ExamResult:
    courses = [
        CourseResult(code=_s(c.get("code")), name=_s(c.get("name")), grade=_s(c.get("grade")), status=_s(c.get("status")))
        for c in (d.get("courses") or [])
        if isinstance(c, dict)
    ]
    return ExamResult(
        student_id=_s(d.get("studentId") or d.get("id")),
        student_name=_s(d.get("studentName") or d.get("name")),
        term=_s(d.get("term")),
        courses=courses,
    )


class RestProgressRepo:
    """httpx-based client. Pass `client` to inject a preconfigured httpx.Client (tests)."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, *, timeout: float = 10.0, client: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    # --- transport -----------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("REST %s %s failed: %s", method, path, exc.__class__.__name__)
            raise NetworkFailure("Could not reach the progress service") from exc
        if response.is_success:
            return response
        message = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])
        logger.warning("REST %s %s rejected: %s", method, path, response.status_code)
        raise RemoteRejection(message, status_code=response.status_code)

    def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._request(method, path, **kwargs)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("REST %s %s returned a non-JSON body", method, path)
            raise RemoteRejection("Invalid response from the progress service", status_code=response.status_code) from exc

    def _list(self, path: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        data = self._json("GET", path, params=params)
        return [item for item in (data or []) if isinstance(item, dict)]

    def _download(self, path: str, fallback_name: str) -> FileDownload:
        response = self._request("GET", path)
        disposition = response.headers.get("content-disposition", "")
        file_name = fallback_name
        if "filename=" in disposition:
            file_name = disposition.split("filename=", 1)[1].strip().strip('"') or fallback_name
        return FileDownload(
            file_name=file_name,
            content_type=response.headers.get("content-type", "application/octet-stream"),
            content=response.content,
        )

    # --- DC meetings -------------------------------------------------------------

    def list_meetings(self) -> List[DCMeeting]:
        return [_meeting(d) for d in self._list("/dc-meetings")]

    def list_meetings_for_student(self, student_id: str) -> List[DCMeeting]:
        return [_meeting(d) for d in self._list(f"/dc-meetings/student/{student_id}")]

    def create_meeting(self, *, student_id: str, student_name: str, date: str, upload: Upload) -> DCMeeting:
        data = self._json(
            "POST",
            "/dc-meetings",
            data={"studentId": student_id, "studentName": student_name, "date": date},
            files={"file": (upload.file_name, upload.content, upload.content_type)},
        )
        return _meeting(data or {})

    def set_meeting_status(self, meeting_id: str, status: str, *, note: Optional[str] = None) -> DCMeeting:
        payload: Dict[str, Any] = {"status": status}
        if note:
            payload["modificationNote"] = note
        return _meeting(self._json("PUT", f"/dc-meetings/{meeting_id}/status", json=payload) or {})

    def get_meeting_file(self, meeting_id: str) -> FileDownload:
        return self._download(f"/dc-meetings/file/{meeting_id}", f"dc-meeting-{meeting_id}")

    # --- publications ----------------------------------------------------------

    def list_publications(self) -> List[Publication]:
        return [_publication(d) for d in self._list("/publications")]

    def list_publications_for_student(self, student_id: str) -> List[Publication]:
        return [_publication(d) for d in self._list(f"/publications/student/{student_id}")]

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
        data = self._json(
            "POST",
            "/publications",
            data={
                "title": title,
                "venue": venue,
                "authors": authors,
                "studentId": student_id,
                "studentName": student_name,
            },
            files={"file": (upload.file_name, upload.content, upload.content_type)},
        )
        return _publication(data or {})

    def set_publication_validated(self, publication_id: str, validated: bool) -> Publication:
        data = self._json("PUT", f"/publications/{publication_id}/validate", json={"validated": validated})
        return _publication(data or {})

    def get_publication_file(self, publication_id: str) -> FileDownload:
        return self._download(f"/publications/file/{publication_id}", f"publication-{publication_id}")

    # --- SWAYAM courses ------------------------------------------------------------

    def list_courses(self) -> List[SwayamCourse]:
        return [_course(d) for d in self._list("/swayam-courses")]

    def create_course(self, *, name: str, provider: str, duration: str, description: str) -> SwayamCourse:
        payload = {"name": name, "provider": provider, "duration": duration, "description": description}
        return _course(self._json("POST", "/swayam-courses", json=payload) or {})

    def update_course(
        self, course_id: str, *, name: str, provider: str, duration: str, description: str
    ) -> SwayamCourse:
        payload = {"name": name, "provider": provider, "duration": duration, "description": description}
        return _course(self._json("PUT", f"/swayam-courses/{course_id}", json=payload) or {})

    def delete_course(self, course_id: str) -> None:
        self._request("DELETE", f"/swayam-courses/{course_id}")

    def registrations_for_course(self, course_id: str) -> List[CourseRegistration]:
        return [_registration(d) for d in self._list(f"/student-courses/check/{course_id}")]

    def list_registrations(self, student_id: Optional[str] = None) -> List[CourseRegistration]:
        path = "/student-courses" if student_id is None else f"/student-courses/student/{student_id}"
        return [_registration(d) for d in self._list(path)]

    def create_registration(
        self, *, course_id: str, student_id: str, student_name: str, status: str
    ) -> CourseRegistration:
        payload = {"courseId": course_id, "studentId": student_id, "studentName": student_name, "status": status}
        return _registration(self._json("POST", "/student-courses", json=payload) or {})

    def set_registration_status(self, registration_id: str, status: str) -> CourseRegistration:
        data = self._json("PUT", f"/student-courses/{registration_id}/status", json={"status": status})
        return _registration(data or {})

    # --- exams -------------------------------------------------------------------

    def list_exams(self, student_id: str) -> List[Exam]:
        return [
            Exam(id=_s(d.get("id")), student_id=student_id, name=_s(d.get("name")), date=_s(d.get("date")), status=_s(d.get("status")))
            for d in self._list(f"/exams/student/{student_id}")
        ]

    def list_exam_requests(self, student_id: Optional[str] = None) -> List[ExamRequest]:
        path = "/exam-requests" if student_id is None else f"/exam-requests/student/{student_id}"
        return [_exam_request(d) for d in self._list(path)]

    def create_exam_request(
        self, *, student_id: str, student_name: str, exam_name: str, exam_date: str, reason: str
    ) -> ExamRequest:
        payload = {
            "studentId": student_id,
            "studentName": student_name,
            "examName": exam_name,
            "examDate": exam_date,
            "reason": reason,
        }
        return _exam_request(self._json("POST", "/exam-requests", json=payload) or {})

    def set_exam_request_status(self, request_id: str, status: str) -> ExamRequest:
        data = self._json("PUT", f"/exam-requests/{request_id}/status", json={"status": status})
        return _exam_request(data or {})

    def list_exam_dates(self) -> List[ExamDate]:
        return [_exam_date(d) for d in self._list("/exam-dates")]

    def create_exam_date(self, *, course: str, date: str, time: str, venue: str) -> ExamDate:
        payload = {"course": course, "date": date, "time": time, "venue": venue}
        return _exam_date(self._json("POST", "/exam-dates", json=payload) or {})

    def list_exam_results(self) -> List[ExamResult]:
        return [_exam_result(d) for d in self._list("/exam-results")]

    def list_students(self) -> List[StudentSummary]:
        return [
            StudentSummary(
                id=_s(d.get("id")),
                name=_s(d.get("name")),
                research_area=_s(d.get("researchArea")),
                progress=int(d.get("progress") or 0),
            )
            for d in self._list("/students")
        ]


__all__ = ["RestProgressRepo", "DEFAULT_BASE_URL"]
