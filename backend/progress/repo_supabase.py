"""
Supabase collaborator: PostgREST tables plus one storage bucket.

The client is duck-typed (`supabase.create_client(...)` in production, small
fakes in tests). Tables:

    dc_meetings, publications, swayam_courses, student_courses,
    exams, exam_requests, exam_dates, exam_results, students

Publications are structured rows keyed by an opaque id; their files live at
`publications/{id}.{ext}` in the bucket. Title, venue and validation state
are columns, never parsed back out of an object key.
"""
from __future__ import annotations

import logging
import mimetypes
import os
from typing import Any, Callable, Dict, List, Optional, TypeVar
from uuid import uuid4

import httpx

from .domain import (
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
from .errors import NetworkFailure, NotFound, ProgressError, RemoteRejection
from .storage import BlobStorageProtocol
from .storage_supabase import SupabaseBlobStorage

logger = logging.getLogger("dpt.progress")

T = TypeVar("T")

_MEETING_COLUMNS = (
    "id", "student_id", "student_name", "date", "status",
    "minutes_file_name", "minutes_file_url", "modification_note", "updated_at",
)
_PUBLICATION_COLUMNS = (
    "id", "student_id", "student_name", "title", "venue", "authors",
    "file_name", "file_url", "validated", "uploaded_at",
)
_LABELS = {
    "dc_meetings": "DC meeting",
    "publications": "Publication",
    "swayam_courses": "Course",
    "student_courses": "Registration",
    "exam_requests": "Exam request",
}


def _pick(row: Dict[str, Any], columns: tuple[str, ...]) -> Dict[str, Any]:
    return {c: row.get(c) for c in columns}


def _meeting(row: Dict[str, Any]) -> DCMeeting:
    data = _pick(row, _MEETING_COLUMNS)
    data["id"] = str(data["id"])
    data["minutes_file_name"] = data["minutes_file_name"] or ""
    return DCMeeting(**data)


def _publication(row: Dict[str, Any]) -> Publication:
    data = _pick(row, _PUBLICATION_COLUMNS)
    data["id"] = str(data["id"])
    data["authors"] = data["authors"] or ""
    data["file_name"] = data["file_name"] or ""
    data["validated"] = bool(data["validated"])
    return Publication(**data)


def _course(row: Dict[str, Any]) -> SwayamCourse:
    return SwayamCourse(
        id=str(row.get("id")),
        name=row.get("name") or "",
        provider=row.get("provider") or "",
        duration=row.get("duration") or "",
        description=row.get("description") or "",
        created_at=row.get("created_at"),
    )


def _registration(row: Dict[str, Any]) -> CourseRegistration:
    return CourseRegistration(
        id=str(row.get("id")),
        course_id=str(row.get("course_id")),
        student_id=str(row.get("student_id")),
        student_name=row.get("student_name") or "",
        status=row.get("status") or "",
        registered_at=row.get("created_at"),
    )


def _exam_request(row: Dict[str, Any]) -> ExamRequest:
    return ExamRequest(
        id=str(row.get("id")),
        student_id=str(row.get("student_id")),
        student_name=row.get("student_name") or "",
        exam_name=row.get("exam_name") or "",
        exam_date=row.get("exam_date") or "",
        reason=row.get("reason") or "",
        status=row.get("status") or "",
        submitted_at=row.get("submitted_at"),
    )


class SupabaseProgressRepo:
    def __init__(self, client: Any, *, bucket: str = "files", storage: BlobStorageProtocol | None = None) -> None:
        self._client = client
        self.storage = storage or SupabaseBlobStorage(client, bucket)

    # --- plumbing ----------------------------------------------------------------

    def _run(self, action: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except ProgressError:
            raise
        except httpx.TransportError as exc:
            logger.warning("supabase %s unreachable: %s", action, exc.__class__.__name__)
            raise NetworkFailure("Could not reach the storage service") from exc
        except Exception as exc:
            message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
            logger.warning("supabase %s failed: %s", action, message)
            raise RemoteRejection(f"Failed to {action}: {message}") from exc

    def _table(self, name: str) -> Any:
        return self._client.table(name)

    def _select(self, table: str, *, eq: Optional[Dict[str, Any]] = None, order: Optional[str] = None, desc: bool = False) -> List[Dict[str, Any]]:
        def _do() -> List[Dict[str, Any]]:
            query = self._table(table).select("*")
            for column, value in (eq or {}).items():
                query = query.eq(column, value)
            if order:
                query = query.order(order, desc=desc)
            return list(query.execute().data or [])

        return self._run(f"load {table.replace('_', ' ')}", _do)

    def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        def _do() -> Dict[str, Any]:
            data = self._table(table).insert(row).execute().data or []
            return data[0] if data else row

        return self._run(f"save {table.replace('_', ' ')}", _do)

    def _update(self, table: str, row_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        def _do() -> Dict[str, Any]:
            return list(self._table(table).update(fields).eq("id", row_id).execute().data or [])

        rows = self._run(f"update {table.replace('_', ' ')}", _do)
        if not rows:
            raise NotFound(f"{_LABELS.get(table, 'Record')} not found")
        return rows[0]

    def _store_file(self, prefix: str, record_id: str, upload: Upload) -> tuple[str, Optional[str]]:
        ext = os.path.splitext(upload.file_name)[1].lower()
        key = f"{prefix}/{record_id}{ext}"

        def _do() -> Optional[str]:
            self.storage.put_object(key=key, body=upload.content, content_type=upload.content_type)
            return self.storage.public_url(key=key)

        return key, self._run("upload file", _do)

    def _insert_with_file(self, table: str, row: Dict[str, Any], key: str) -> Dict[str, Any]:
        """Insert `row`; on failure remove the blob uploaded for it and re-raise."""
        try:
            return self._insert(table, row)
        except ProgressError:
            try:
                self.storage.delete_object(key=key)
            except Exception as exc:
                logger.warning("could not remove orphaned object %s: %s", key, exc)
            raise

    def _fetch_file(self, key: Optional[str], url: Optional[str], file_name: str) -> FileDownload:
        content_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
        if url:
            return FileDownload(file_name=file_name, content_type=content_type, url=url)
        if not key:
            raise NotFound("File not found")
        content = self._run("download file", lambda: self.storage.get_object(key=key))
        return FileDownload(file_name=file_name, content_type=content_type, content=content)

    # --- DC meetings -------------------------------------------------------------

    def list_meetings(self) -> List[DCMeeting]:
        return [_meeting(r) for r in self._select("dc_meetings", order="date", desc=True)]

    def list_meetings_for_student(self, student_id: str) -> List[DCMeeting]:
        rows = self._select("dc_meetings", eq={"student_id": student_id}, order="date", desc=True)
        return [_meeting(r) for r in rows]

    def create_meeting(self, *, student_id: str, student_name: str, date: str, upload: Upload) -> DCMeeting:
        mid = str(uuid4())
        key, url = self._store_file("dc-meetings", mid, upload)
        row = {
            "id": mid,
            "student_id": student_id,
            "student_name": student_name,
            "date": date,
            "status": "Pending Approval",
            "minutes_file_name": upload.file_name,
            "minutes_file_path": key,
            "minutes_file_url": url,
            "updated_at": utcnow_iso(),
        }
        return _meeting(self._insert_with_file("dc_meetings", row, key))

    def set_meeting_status(self, meeting_id: str, status: str, *, note: Optional[str] = None) -> DCMeeting:
        fields = {"status": status, "modification_note": note, "updated_at": utcnow_iso()}
        return _meeting(self._update("dc_meetings", meeting_id, fields))

    def get_meeting_file(self, meeting_id: str) -> FileDownload:
        rows = self._select("dc_meetings", eq={"id": meeting_id})
        if not rows:
            raise NotFound("DC meeting not found")
        row = rows[0]
        return self._fetch_file(row.get("minutes_file_path"), row.get("minutes_file_url"), row.get("minutes_file_name") or "minutes")

    # --- publications ----------------------------------------------------------

    def list_publications(self) -> List[Publication]:
        return [_publication(r) for r in self._select("publications", order="uploaded_at", desc=True)]

    def list_publications_for_student(self, student_id: str) -> List[Publication]:
        rows = self._select("publications", eq={"student_id": student_id}, order="uploaded_at", desc=True)
        return [_publication(r) for r in rows]

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
        pid = str(uuid4())
        key, url = self._store_file("publications", pid, upload)
        row = {
            "id": pid,
            "student_id": student_id,
            "student_name": student_name,
            "title": title,
            "venue": venue,
            "authors": authors,
            "file_name": upload.file_name,
            "file_path": key,
            "file_url": url,
            "validated": False,
            "uploaded_at": utcnow_iso(),
        }
        return _publication(self._insert_with_file("publications", row, key))

    def insert_publication_row(self, row: Dict[str, Any]) -> Publication:
        """Insert a fully prepared row (used by the legacy import tool)."""
        return _publication(self._insert("publications", row))

    def publication_exists(self, publication_id: str) -> bool:
        return bool(self._select("publications", eq={"id": publication_id}))

    def set_publication_validated(self, publication_id: str, validated: bool) -> Publication:
        return _publication(self._update("publications", publication_id, {"validated": validated}))

    def get_publication_file(self, publication_id: str) -> FileDownload:
        rows = self._select("publications", eq={"id": publication_id})
        if not rows:
            raise NotFound("Publication not found")
        row = rows[0]
        return self._fetch_file(row.get("file_path"), row.get("file_url"), row.get("file_name") or "publication")

    # --- SWAYAM courses ------------------------------------------------------------

    def list_courses(self) -> List[SwayamCourse]:
        return [_course(r) for r in self._select("swayam_courses", order="created_at", desc=True)]

    def create_course(self, *, name: str, provider: str, duration: str, description: str) -> SwayamCourse:
        row = {
            "id": str(uuid4()),
            "name": name,
            "provider": provider,
            "duration": duration,
            "description": description,
            "created_at": utcnow_iso(),
        }
        return _course(self._insert("swayam_courses", row))

    def update_course(
        self, course_id: str, *, name: str, provider: str, duration: str, description: str
    ) -> SwayamCourse:
        fields = {"name": name, "provider": provider, "duration": duration, "description": description}
        return _course(self._update("swayam_courses", course_id, fields))

    def delete_course(self, course_id: str) -> None:
        self._run("delete course", lambda: self._table("swayam_courses").delete().eq("id", course_id).execute())

    def registrations_for_course(self, course_id: str) -> List[CourseRegistration]:
        return [_registration(r) for r in self._select("student_courses", eq={"course_id": course_id})]

    def list_registrations(self, student_id: Optional[str] = None) -> List[CourseRegistration]:
        eq = {"student_id": student_id} if student_id is not None else None
        return [_registration(r) for r in self._select("student_courses", eq=eq)]

    def create_registration(
        self, *, course_id: str, student_id: str, student_name: str, status: str
    ) -> CourseRegistration:
        row = {
            "id": str(uuid4()),
            "course_id": course_id,
            "student_id": student_id,
            "student_name": student_name,
            "status": status,
            "created_at": utcnow_iso(),
        }
        return _registration(self._insert("student_courses", row))

    def set_registration_status(self, registration_id: str, status: str) -> CourseRegistration:
        return _registration(self._update("student_courses", registration_id, {"status": status}))

    # --- exams -------------------------------------------------------------------

    def list_exams(self, student_id: str) -> List[Exam]:
        rows = self._select("exams", eq={"student_id": student_id}, order="date")
        return [
            Exam(id=str(r.get("id")), student_id=student_id, name=r.get("name") or "", date=r.get("date") or "", status=r.get("status") or "")
            for r in rows
        ]

    def list_exam_requests(self, student_id: Optional[str] = None) -> List[ExamRequest]:
        eq = {"student_id": student_id} if student_id is not None else None
        return [_exam_request(r) for r in self._select("exam_requests", eq=eq, order="submitted_at", desc=True)]

    def create_exam_request(
        self, *, student_id: str, student_name: str, exam_name: str, exam_date: str, reason: str
    ) -> ExamRequest:
        row = {
            "id": str(uuid4()),
            "student_id": student_id,
            "student_name": student_name,
            "exam_name": exam_name,
            "exam_date": exam_date,
            "reason": reason,
            "status": "Pending",
            "submitted_at": utcnow_iso(),
        }
        return _exam_request(self._insert("exam_requests", row))

    def set_exam_request_status(self, request_id: str, status: str) -> ExamRequest:
        return _exam_request(self._update("exam_requests", request_id, {"status": status}))

    def list_exam_dates(self) -> List[ExamDate]:
        return [
            ExamDate(id=str(r.get("id")), course=r.get("course") or "", date=r.get("date") or "", time=r.get("time") or "", venue=r.get("venue") or "")
            for r in self._select("exam_dates", order="date")
        ]

    def create_exam_date(self, *, course: str, date: str, time: str, venue: str) -> ExamDate:
        row = {"id": str(uuid4()), "course": course, "date": date, "time": time, "venue": venue}
        r = self._insert("exam_dates", row)
        return ExamDate(id=str(r.get("id")), course=r.get("course") or course, date=r.get("date") or date, time=r.get("time") or time, venue=r.get("venue") or venue)

    def list_exam_results(self) -> List[ExamResult]:
        results: List[ExamResult] = []
        for r in self._select("exam_results", order="student_name"):
            courses = [
                CourseResult(code=c.get("code", ""), name=c.get("name", ""), grade=c.get("grade", ""), status=c.get("status", ""))
                for c in (r.get("courses") or [])
                if isinstance(c, dict)
            ]
            results.append(ExamResult(
                student_id=str(r.get("student_id")), student_name=r.get("student_name") or "", term=r.get("term") or "", courses=courses,
            ))
        return results

    def list_students(self) -> List[StudentSummary]:
        return [
            StudentSummary(id=str(r.get("id")), name=r.get("name") or "", research_area=r.get("research_area") or "", progress=int(r.get("progress") or 0))
            for r in self._select("students", order="name")
        ]


__all__ = ["SupabaseProgressRepo"]
