"""
Stored Files: per-client files kept as data URLs in durable client storage.
"""
from __future__ import annotations

import json

import pytest

from backend.progress.file_store import STORED_FILES_KEY
from backend.web import deps
from portal_helpers import login, portal_client

pytestmark = pytest.mark.anyio("asyncio")


async def _store(client, name: str = "notes.pdf", body: bytes = b"%PDF notes", content_type: str = "application/pdf"):
    return await client.post(
        "/stored-files/upload", files={"file": (name, body, content_type)}, follow_redirects=True
    )


def _stored_document(client) -> dict:
    storage = deps.CLIENT_STORAGE_BACKEND.client(client.cookies.get("dpt_client"))
    return json.loads(storage.get_item(STORED_FILES_KEY) or "{}")


async def test_upload_lists_file_with_type_and_size(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await _store(client)
        document = _stored_document(client)
    assert r.status_code == 200
    assert "File stored" in r.text
    assert "notes.pdf" in r.text
    assert "Total size:" in r.text
    assert document["notes.pdf"]["data"].startswith("data:application/pdf;base64,")
    assert "dateAdded" in document["notes.pdf"]


async def test_upload_without_file_is_refused(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await client.post("/stored-files/upload", data={}, follow_redirects=True)
    assert "Please select a file to upload" in r.text


async def test_upload_over_limit_is_refused(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await _store(client, "big.bin", b"x" * (5 * 1024 * 1024 + 1), "application/octet-stream")
        document = _stored_document(client)
    assert "File exceeds the 5MB limit." in r.text
    assert document == {}


async def test_download_and_inline_view_return_original_bytes(app):
    async with portal_client(app) as client:
        await login(client, "student")
        await _store(client, "photo.png", b"\x89PNG data", "image/png")
        download = await client.get("/stored-files/photo.png/download")
        view = await client.get("/stored-files/photo.png/view")
    assert download.content == b"\x89PNG data"
    assert download.headers["content-disposition"].startswith("attachment")
    assert view.headers["content-disposition"].startswith("inline")
    assert view.headers["content-type"] == "image/png"


async def test_preview_embeds_pdf_viewer(app):
    async with portal_client(app) as client:
        await login(client, "student")
        await _store(client)
        r = await client.get("/stored-files/notes.pdf/preview")
    assert r.status_code == 200
    assert "/stored-files/notes.pdf/view" in r.text
    assert "<iframe" in r.text


async def test_rename_moves_entry(app):
    async with portal_client(app) as client:
        await login(client, "student")
        await _store(client)
        r = await client.post("/stored-files/notes.pdf/rename", data={"new_name": "thesis.pdf"}, follow_redirects=True)
        document = _stored_document(client)
    assert "File renamed" in r.text
    assert set(document) == {"thesis.pdf"}


async def test_rename_refuses_existing_target(app):
    async with portal_client(app) as client:
        await login(client, "student")
        await _store(client, "a.pdf")
        await _store(client, "b.pdf", b"%PDF other")
        r = await client.post("/stored-files/a.pdf/rename", data={"new_name": "b.pdf"}, follow_redirects=True)
        document = _stored_document(client)
    assert "Rename failed" in r.text
    assert set(document) == {"a.pdf", "b.pdf"}


async def test_delete_removes_entry(app):
    async with portal_client(app) as client:
        await login(client, "student")
        await _store(client)
        r = await client.post("/stored-files/notes.pdf/delete", follow_redirects=True)
        document = _stored_document(client)
    assert "File deleted" in r.text
    assert document == {}


async def test_missing_file_redirects_with_notice(app):
    async with portal_client(app) as client:
        await login(client, "student")
        r = await client.get("/stored-files/ghost.pdf/download", follow_redirects=True)
    assert "File not found" in r.text


async def test_files_are_private_to_each_client(app):
    async with portal_client(app) as first:
        await login(first, "student")
        await _store(first)
    async with portal_client(app) as second:
        await login(second, "student")
        listing = await second.get("/stored-files")
        r = await second.get("/stored-files/notes.pdf/download", follow_redirects=True)
    assert "notes.pdf" not in listing.text
    assert "File not found" in r.text


@pytest.mark.parametrize(
    "name,content_type",
    [("page.html", "text/html"), ("logo.svg", "image/svg+xml"), ("notes.txt", "text/plain")],
)
async def test_view_serves_scriptable_types_as_attachment(app, name: str, content_type: str):
    async with portal_client(app) as client:
        await login(client, "student")
        await _store(client, name, b"<script>alert(1)</script>", content_type)
        r = await client.get(f"/stored-files/{name}/view")
    assert r.status_code == 200
    assert r.headers["content-disposition"].startswith("attachment")
