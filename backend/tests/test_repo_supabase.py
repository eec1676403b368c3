"""
Supabase collaborator against a small in-process fake of the client API
(`table(...)` query builder plus `storage.from_(bucket)`).
"""
from __future__ import annotations

import httpx
import pytest

from backend.progress.domain import Upload
from backend.progress.errors import NetworkFailure, NotFound, RemoteRejection
from backend.progress.repo_supabase import SupabaseProgressRepo
from fake_supabase import FakeSupabase


@pytest.fixture
def fake() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def repo(fake) -> SupabaseProgressRepo:
    return SupabaseProgressRepo(fake, bucket="files")


def test_create_meeting_stores_file_under_record_id(repo, fake):
    meeting = repo.create_meeting(
        student_id="s1", student_name="Jane", date="2024-05-02", upload=Upload("Minutes.PDF", "application/pdf", b"%PDF")
    )
    assert fake.objects == {f"dc-meetings/{meeting.id}.pdf": b"%PDF"}
    row = fake.tables["dc_meetings"][0]
    assert row["minutes_file_path"] == f"dc-meetings/{meeting.id}.pdf"
    assert row["minutes_file_url"] == f"https://cdn.test/files/dc-meetings/{meeting.id}.pdf"
    assert meeting.status == "Pending Approval"


def test_meetings_are_listed_newest_first(repo):
    for date in ("2024-01-01", "2024-03-01", "2024-02-01"):
        repo.create_meeting(student_id="s1", student_name="Jane", date=date, upload=Upload("m.pdf", "application/pdf", b"x"))
    assert [m.date for m in repo.list_meetings_for_student("s1")] == ["2024-03-01", "2024-02-01", "2024-01-01"]


def test_publication_is_a_structured_row(repo, fake):
    publication = repo.create_publication(
        student_id="s1",
        student_name="Jane",
        title="Graph Nets",
        venue="ICML",
        authors="Jane",
        upload=Upload("paper.pdf", "application/pdf", b"%PDF"),
    )
    row = fake.tables["publications"][0]
    assert row["title"] == "Graph Nets"
    assert row["file_path"] == f"publications/{publication.id}.pdf"
    assert row["validated"] is False
    assert repo.set_publication_validated(publication.id, True).validated is True


def test_file_download_prefers_public_url(repo):
    meeting = repo.create_meeting(
        student_id="s1", student_name="Jane", date="2024-05-02", upload=Upload("m.pdf", "application/pdf", b"%PDF")
    )
    download = repo.get_meeting_file(meeting.id)
    assert download.url.endswith(f"dc-meetings/{meeting.id}.pdf")
    assert download.content is None


def test_file_download_streams_bytes_without_url(repo, fake):
    fake.tables["publications"] = [
        {"id": "p1", "title": "T", "venue": "V", "file_name": "p.pdf", "file_path": "publications/p1.pdf", "file_url": None}
    ]
    fake.objects["publications/p1.pdf"] = b"%PDF"
    download = repo.get_publication_file("p1")
    assert download.content == b"%PDF"
    assert download.content_type == "application/pdf"


def test_updating_missing_row_is_not_found(repo):
    with pytest.raises(NotFound, match="Registration not found"):
        repo.set_registration_status("missing", "Approved")


def test_unknown_file_is_not_found(repo):
    with pytest.raises(NotFound):
        repo.get_meeting_file("missing")


def test_course_crud_and_usage(repo):
    course = repo.create_course(name="Cloud", provider="SWAYAM", duration="8 weeks", description="")
    repo.create_registration(course_id=course.id, student_id="s1", student_name="Jane", status="Pending")
    assert [r.student_id for r in repo.registrations_for_course(course.id)] == ["s1"]
    assert repo.update_course(course.id, name="Cloud II", provider="SWAYAM", duration="", description="").name == "Cloud II"
    repo.delete_course(course.id)
    assert repo.list_courses() == []


def test_transport_error_is_network_failure(repo, fake):
    fake.fail = httpx.ConnectError("refused")
    with pytest.raises(NetworkFailure):
        repo.list_exam_dates()


def test_api_error_is_remote_rejection_with_message(repo, fake):
    error = RuntimeError("permission denied for table exam_requests")
    fake.fail = error
    with pytest.raises(RemoteRejection) as exc:
        repo.list_exam_requests()
    assert exc.value.message == "Failed to load exam requests: permission denied for table exam_requests"


def test_exam_results_decode_course_lists(repo, fake):
    fake.tables["exam_results"] = [
        {"student_id": "s1", "student_name": "Jane", "term": "Spring", "courses": [{"code": "CS501", "name": "Algo", "grade": "A", "status": "Draft"}, "junk"]}
    ]
    result = repo.list_exam_results()[0]
    assert result.term == "Spring"
    assert [c.code for c in result.courses] == ["CS501"]


def test_failed_meeting_insert_removes_uploaded_file(repo, fake):
    fake.fail = RuntimeError("insert denied")
    with pytest.raises(RemoteRejection):
        repo.create_meeting(
            student_id="s1", student_name="Jane", date="2024-05-02", upload=Upload("m.pdf", "application/pdf", b"%PDF")
        )
    assert fake.objects == {}


def test_failed_publication_insert_removes_uploaded_file(repo, fake):
    fake.fail = RuntimeError("insert denied")
    with pytest.raises(RemoteRejection):
        repo.create_publication(
            student_id="s1",
            student_name="Jane",
            title="Graph Nets",
            venue="ICML",
            authors="",
            upload=Upload("paper.docx", "application/octet-stream", b"docx"),
        )
    assert repo.storage.list_objects() == []


def test_list_objects_pages_through_the_bucket(fake):
    from backend.progress.storage_supabase import SupabaseBlobStorage

    for i in range(5):
        fake.objects[f"publications/p{i}.pdf"] = b"x"
    storage = SupabaseBlobStorage(fake, "files", page_size=2)

    assert storage.list_objects(prefix="publications") == [f"publications/p{i}.pdf" for i in range(5)]
    assert [c["offset"] for c in fake.list_calls] == [0, 2, 4]
