"""
ProgressService use cases against the in-memory repository.
"""
from __future__ import annotations

import pytest

from backend.progress.domain import Upload
from backend.progress.errors import NetworkFailure, NotFound, RemoteRejection, ValidationFailure
from backend.progress.repo_memory import InMemoryProgressRepo
from backend.progress.service import COURSE_CHECK_FAILED, COURSE_IN_USE, ProgressService, UploadSettings


@pytest.fixture
def service() -> ProgressService:
    return ProgressService(InMemoryProgressRepo(seed=False))


@pytest.fixture
def seeded() -> ProgressService:
    return ProgressService(InMemoryProgressRepo())


def _pdf(name: str = "minutes.pdf", size: int = 10) -> Upload:
    return Upload(name, "application/pdf", b"x" * size)


# --- uploads -------------------------------------------------------------------


@pytest.mark.parametrize("name", ["a.pdf", "A.PDF", "b.doc", "c.docx"])
def test_accepted_extensions(service, name):
    assert service.check_upload(_pdf(name)).file_name == name


@pytest.mark.parametrize(
    "upload,message",
    [
        (None, "Please select a file to upload"),
        (Upload("a.pdf", "application/pdf", b""), "Please select a file to upload"),
        (Upload("a.exe", "application/octet-stream", b"x"), "Only .pdf, .doc, .docx files are accepted"),
    ],
)
def test_rejected_uploads(service, upload, message):
    with pytest.raises(ValidationFailure) as exc:
        service.check_upload(upload)
    assert exc.value.message == message
    assert exc.value.field == "file"


def test_size_limit_is_inclusive(service):
    limit = 5 * 1024 * 1024
    service.check_upload(_pdf(size=limit))
    with pytest.raises(ValidationFailure, match="5MB"):
        service.check_upload(_pdf(size=limit + 1))


def test_custom_upload_limits():
    service = ProgressService(InMemoryProgressRepo(seed=False), UploadSettings((".txt",), 1024 * 1024))
    service.check_upload(Upload("n.txt", "text/plain", b"x"))
    with pytest.raises(ValidationFailure, match="1MB"):
        service.check_upload(Upload("n.txt", "text/plain", b"x" * (1024 * 1024 + 1)))


# --- DC meetings ---------------------------------------------------------------


def test_submit_meeting_normalizes_date(service):
    meeting = service.submit_meeting(student_id="s1", student_name="Jane", date=" 2024-05-02 ", upload=_pdf())
    assert meeting.date == "2024-05-02"
    assert meeting.status == "Pending Approval"


@pytest.mark.parametrize("date,message", [("", "Please fill all fields"), ("02/05/2024", "Please enter a valid date")])
def test_submit_meeting_rejects_bad_dates(service, date, message):
    with pytest.raises(ValidationFailure, match=message):
        service.submit_meeting(student_id="s1", student_name="Jane", date=date, upload=_pdf())


def test_pending_meetings_preview_and_total(service):
    for day in range(1, 6):
        service.submit_meeting(student_id="s1", student_name="Jane", date=f"2024-05-0{day}", upload=_pdf())
    first = service.repo.list_meetings()[0]
    service.approve_meeting(first.id)

    shown, total = service.pending_meetings(3)
    assert total == 4
    assert len(shown) == 3
    assert all(m.status == "Pending Approval" for m in shown)
    assert service.pending_meetings()[1] == 4


def test_request_meeting_changes_requires_note(service):
    meeting = service.submit_meeting(student_id="s1", student_name="Jane", date="2024-05-02", upload=_pdf())
    with pytest.raises(ValidationFailure, match="modification details"):
        service.request_meeting_changes(meeting.id, "   ")
    updated = service.request_meeting_changes(meeting.id, "Add signatures")
    assert updated.status == "Needs Modification"
    assert updated.modification_note == "Add signatures"


def test_approving_unknown_meeting_raises_not_found(service):
    with pytest.raises(NotFound):
        service.approve_meeting("missing")


# --- publications --------------------------------------------------------------


def test_publication_lifecycle(service):
    publication = service.submit_publication(
        student_id="s1", student_name="Jane", title=" Graphs ", venue="ICML", authors=" Jane ", upload=_pdf("p.pdf")
    )
    assert publication.title == "Graphs"
    assert publication.authors == "Jane"
    assert publication.status == "Under Review"
    assert service.set_publication_validated(publication.id, True).status == "Published"
    assert service.set_publication_validated(publication.id, False).status == "Under Review"


def test_publication_requires_venue(service):
    with pytest.raises(ValidationFailure) as exc:
        service.submit_publication(student_id="s1", student_name="Jane", title="T", venue=" ", upload=_pdf())
    assert exc.value.field == "venue"


# --- courses -------------------------------------------------------------------


def test_search_courses_is_case_insensitive_over_name_and_provider(seeded):
    assert [c.name for c in seeded.search_courses("nptel")] == ["Introduction to Machine Learning"]
    assert [c.name for c in seeded.search_courses("DATABASE")] == ["Advanced Database Systems"]
    assert len(seeded.search_courses("  ")) == 2


def test_add_course_trims_and_defaults_provider(service):
    course = service.add_course(name="  Cloud  ", provider="  ")
    assert course.name == "Cloud"
    assert course.provider == "SWAYAM"


def test_update_course_requires_name(seeded):
    course = seeded.repo.list_courses()[0]
    with pytest.raises(ValidationFailure, match="Course name is required"):
        seeded.update_course(course.id, name="")


def test_delete_course_in_use_is_refused(seeded):
    course = seeded.repo.list_courses()[0]
    seeded.register_course(course_id=course.id, student_id="s1", student_name="Jane")
    with pytest.raises(RemoteRejection) as exc:
        seeded.delete_course(course.id)
    assert exc.value.message == COURSE_IN_USE
    assert course.id in {c.id for c in seeded.repo.list_courses()}


def test_delete_course_when_check_fails_is_refused():
    class Repo(InMemoryProgressRepo):
        def registrations_for_course(self, course_id):
            raise NetworkFailure("down")

    service = ProgressService(Repo())
    course = service.repo.list_courses()[0]
    with pytest.raises(RemoteRejection) as exc:
        service.delete_course(course.id)
    assert exc.value.message == COURSE_CHECK_FAILED
    assert len(service.repo.list_courses()) == 2


def test_register_course_once_per_student(seeded):
    course = seeded.repo.list_courses()[0]
    registration = seeded.register_course(course_id=course.id, student_id="s1", student_name="Jane")
    assert registration.status == "Pending"
    with pytest.raises(ValidationFailure, match=f"already registered for {course.name}"):
        seeded.register_course(course_id=course.id, student_id="s1", student_name="Jane")
    # another student may still register
    seeded.register_course(course_id=course.id, student_id="s2", student_name="Ravi")


def test_register_unknown_course_raises_not_found(seeded):
    with pytest.raises(NotFound):
        seeded.register_course(course_id="missing", student_id="s1", student_name="Jane")


def test_registration_status_vocabulary(seeded):
    course = seeded.repo.list_courses()[0]
    registration = seeded.register_course(course_id=course.id, student_id="s1", student_name="Jane")
    assert seeded.set_registration_status(registration.id, "Rejected").status == "Rejected"
    with pytest.raises(ValidationFailure):
        seeded.set_registration_status(registration.id, "Archived")


# --- exams ---------------------------------------------------------------------


def test_reexam_request_and_decision(service):
    request = service.request_reexam(
        student_id="s1", student_name="Jane", exam_name="ML", exam_date="2024-02-25", reason="Illness"
    )
    assert request.status == "Pending"
    assert [r.id for r in service.reviewable_exam_requests()] == [request.id]

    decided = service.decide_exam_request(request.id, approve=False)
    assert decided.status == "Rejected"
    assert service.reviewable_exam_requests() == []


def test_reexam_request_requires_reason(service):
    with pytest.raises(ValidationFailure) as exc:
        service.request_reexam(student_id="s1", student_name="Jane", exam_name="ML", exam_date="2024-02-25", reason="")
    assert exc.value.field == "reason"


def test_announce_exam_date_validates_fields(service):
    exam_date = service.announce_exam_date(course="ML", date="2024-04-20", time="2:00 PM", venue="Hall A")
    assert exam_date in service.repo.list_exam_dates()
    with pytest.raises(ValidationFailure):
        service.announce_exam_date(course="ML", date="2024-04-20", time="", venue="Hall A")


def test_memory_blob_storage_lists_by_prefix_and_search():
    from backend.progress.storage import MemoryBlobStorage

    blobs = MemoryBlobStorage()
    blobs.put_object(key="/dc-meetings/a.pdf", body=b"a", content_type="application/pdf")
    blobs.put_object(key="publications/b.pdf", body=b"b", content_type="application/pdf")
    assert blobs.list_objects(prefix="dc-meetings/") == ["dc-meetings/a.pdf"]
    assert blobs.list_objects(search="b.") == ["publications/b.pdf"]
    assert blobs.content_type("dc-meetings/a.pdf") == "application/pdf"
    assert blobs.public_url(key="publications/b.pdf") is None
    blobs.delete_object(key="dc-meetings/a.pdf")
    assert blobs.list_objects() == ["publications/b.pdf"]
