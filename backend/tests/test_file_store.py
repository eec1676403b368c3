"""
Stored-file helpers: size formatting, type classification, data URLs and the
per-client store.
"""
from __future__ import annotations

import pytest

from backend.identity_access.client_storage import MemoryStorageBackend
from backend.progress.file_store import (
    STORED_FILES_KEY,
    StoredFileStore,
    approximate_size,
    file_type,
    format_size,
    from_data_url,
    to_data_url,
)


@pytest.mark.parametrize(
    "num_bytes,text",
    [(0, "0 B"), (1023, "1023 B"), (1024, "1.00 KB"), (1536, "1.50 KB"), (5 * 1024 * 1024, "5.00 MB")],
)
def test_format_size(num_bytes, text):
    assert format_size(num_bytes) == text


def test_approximate_size_counts_base64_payload():
    assert approximate_size("") == 0
    assert approximate_size("AAAA") == 3
    assert approximate_size("AAAAA") == 4


@pytest.mark.parametrize(
    "name,kind",
    [
        ("photo.JPG", "image"),
        ("diagram.svg", "image"),
        ("thesis.pdf", "pdf"),
        ("draft.docx", "doc"),
        ("draft.doc", "doc"),
        ("data.csv", "other"),
        ("README", "other"),
    ],
)
def test_file_type(name, kind):
    assert file_type(name) == kind


def test_data_url_decodes_to_original_bytes():
    url = to_data_url(b"\x00\x01binary", "image/png")
    assert url.startswith("data:image/png;base64,")
    assert from_data_url(url) == ("image/png", b"\x00\x01binary")


@pytest.mark.parametrize("bad", ["hello", "data:text/plain,hello", "data:text/plain;base64,@@@"])
def test_from_data_url_rejects_other_payloads(bad):
    with pytest.raises(ValueError):
        from_data_url(bad)


@pytest.fixture
def store() -> StoredFileStore:
    return StoredFileStore(MemoryStorageBackend().client("c1"))


def test_store_get_all_and_total(store):
    store.store("a.pdf", "data:application/pdf;base64,AAAA")
    store.store("b.png", "data:image/png;base64,AAAAAAAA")

    assert store.get("a.pdf").kind == "pdf"
    assert store.get("missing") is None
    assert {f.name for f in store.get_all()} == {"a.pdf", "b.png"}
    assert store.total_size() == approximate_size("data:application/pdf;base64,AAAA") + approximate_size(
        "data:image/png;base64,AAAAAAAA"
    )


def test_store_overwrites_same_name(store):
    store.store("a.pdf", "data:application/pdf;base64,AAAA")
    store.store("a.pdf", "data:application/pdf;base64,BBBB")
    assert [f.data for f in store.get_all()] == ["data:application/pdf;base64,BBBB"]


def test_rename_refuses_missing_source_empty_or_taken_target(store):
    store.store("a.pdf", "x")
    store.store("b.pdf", "y")
    assert not store.rename("missing.pdf", "c.pdf")
    assert not store.rename("a.pdf", "")
    assert not store.rename("a.pdf", "b.pdf")
    assert store.rename("a.pdf", "c.pdf")
    assert store.get("a.pdf") is None
    assert store.get("c.pdf").data == "x"


def test_delete_reports_whether_anything_was_removed(store):
    store.store("a.pdf", "x")
    assert store.delete("a.pdf")
    assert not store.delete("a.pdf")


def test_corrupt_document_reads_as_empty():
    storage = MemoryStorageBackend().client("c1")
    storage.set_item(STORED_FILES_KEY, "{not json")
    store = StoredFileStore(storage)
    assert store.get_all() == []
    assert store.total_size() == 0
    store.store("a.pdf", "x")
    assert store.get("a.pdf") is not None
