"""
Stored Files routes: files a student keeps inside their own client context.

Nothing here touches the progress repository. Files are base64 data URLs in
durable client storage, so every browser only ever sees its own files.
"""

from __future__ import annotations

import logging
import os
from urllib.parse import quote

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response

from backend.progress.domain import FileDownload
from backend.progress.file_store import StoredFileStore, format_size, from_data_url, to_data_url
from backend.web import deps
from backend.web.components import ActionButton, DataTable, FilePreview
from backend.web.components.base import Component
from backend.web.components.forms import FileUploadField, SubmitButton, TextInputField

from .pages import download_response, form_text, read_upload, redirect_with_notice, render_page
from .security import _is_same_origin, cross_site_forbidden

stored_files_router = APIRouter(prefix="/stored-files", tags=["Stored Files"])
logger = logging.getLogger("dpt.web")

esc = Component.escape

MAX_STORED_BYTES = 5 * 1024 * 1024
PAGE = "/stored-files"


def _store(request: Request) -> StoredFileStore:
    return StoredFileStore(deps.get_client_storage(request))


def _href(name: str, action: str) -> str:
    return f"{PAGE}/{quote(name, safe='')}/{action}"


def _not_found(request: Request) -> Response:
    return redirect_with_notice(request, PAGE, "error", "File not found")


@stored_files_router.get("", response_class=HTMLResponse)
async def stored_files_page(request: Request):
    store = _store(request)
    files = store.get_all()
    rows = []
    for index, f in enumerate(files):
        rename_field = TextInputField("new_name", "New name", input_id=f"rename-{index}").render(value=f.name)
        rename_form = (
            f'<form method="post" action="{esc(_href(f.name, "rename"))}" class="inline-form rename-form">'
            f'{rename_field}{SubmitButton("Rename", variant="secondary").render()}</form>'
        )
        actions = (
            f'<a class="btn btn-secondary" href="{esc(_href(f.name, "preview"))}">Preview</a>'
            f'<a class="btn btn-secondary" href="{esc(_href(f.name, "download"))}">Download</a>'
            + ActionButton(_href(f.name, "delete"), "Delete", variant="danger").render()
        )
        rows.append([esc(f.name), esc(f.kind), esc(format_size(f.size)), esc(f.date_added[:10]), rename_form + actions])

    upload_field = FileUploadField("file", "File", required=True, help_text="Up to 5 MB").render()
    content = f"""
    <div class="page-header">
        <h1>Stored Files</h1>
        <p class="page-lead">Total size: {esc(format_size(store.total_size()))}</p>
    </div>
    <section class="card">
        <h2>Store a file</h2>
        <form method="post" action="{PAGE}/upload" enctype="multipart/form-data" class="stored-file-form">
            {upload_field}
            <div class="form-actions">{SubmitButton("Store file").render()}</div>
        </form>
    </section>
    <section class="card">
        {DataTable(["Name", "Type", "Size", "Added", "Actions"], rows, empty_text="No files stored yet.").render()}
    </section>"""
    return render_page(request, "Stored Files", content)


@stored_files_router.post("/upload")
async def stored_files_upload(request: Request):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    upload = await read_upload(form, "file")
    if upload is None or not upload.file_name or upload.size == 0:
        return redirect_with_notice(request, PAGE, "error", "Upload failed", "Please select a file to upload")
    if upload.size > MAX_STORED_BYTES:
        return redirect_with_notice(request, PAGE, "error", "Upload failed", "File exceeds the 5MB limit.")
    name = os.path.basename(upload.file_name.replace("\\", "/"))
    _store(request).store(name, to_data_url(upload.content, upload.content_type))
    logger.info("stored file for client %s size=%s", deps.get_client_storage(request).client_id, upload.size)
    return redirect_with_notice(request, PAGE, "success", "File stored", name)


def _renders_safely_inline(content_type: str) -> bool:
    # Uploaders choose the type; SVG and HTML could run script same-origin.
    ct = (content_type or "").split(";", 1)[0].strip().lower()
    return ct == "application/pdf" or (ct.startswith("image/") and ct != "image/svg+xml")


def _download(request: Request, name: str) -> FileDownload | None:
    stored = _store(request).get(name)
    if stored is None:
        return None
    try:
        content_type, content = from_data_url(stored.data)
    except ValueError:
        logger.warning("stored file %r has an unreadable payload", name)
        return None
    return FileDownload(file_name=name, content_type=content_type, content=content)


@stored_files_router.get("/{name}/download")
async def stored_files_download(request: Request, name: str):
    download = _download(request, name)
    if download is None:
        return _not_found(request)
    return download_response(download)


@stored_files_router.get("/{name}/view")
async def stored_files_view(request: Request, name: str):
    download = _download(request, name)
    if download is None:
        return _not_found(request)
    return download_response(download, inline=_renders_safely_inline(download.content_type))


@stored_files_router.get("/{name}/preview", response_class=HTMLResponse)
async def stored_files_preview(request: Request, name: str):
    download = _download(request, name)
    if download is None:
        return _not_found(request)
    preview = FilePreview(_href(name, "view"), download.content_type, title=name)
    content = f"""
    <div class="page-header">
        <h1>{esc(name)}</h1>
        <p><a href="{PAGE}">Back to stored files</a></p>
    </div>
    <section class="card">{preview.render()}</section>"""
    return render_page(request, name, content)


@stored_files_router.post("/{name}/rename")
async def stored_files_rename(request: Request, name: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    form = await request.form()
    new_name = os.path.basename(form_text(form, "new_name").replace("\\", "/"))
    if new_name == name:
        return redirect_with_notice(request, PAGE, "success", "Nothing to rename")
    if not _store(request).rename(name, new_name):
        return redirect_with_notice(
            request, PAGE, "error", "Rename failed", "The file is missing or the new name is empty or already taken."
        )
    return redirect_with_notice(request, PAGE, "success", "File renamed", new_name)


@stored_files_router.post("/{name}/delete")
async def stored_files_delete(request: Request, name: str):
    if not _is_same_origin(request):
        return cross_site_forbidden()
    if not _store(request).delete(name):
        return _not_found(request)
    return redirect_with_notice(request, PAGE, "success", "File deleted", name)
