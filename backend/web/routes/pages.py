"""
Page helpers shared by the portal routers.

Rendering goes through `render_page` so every personalized page gets the
layout, the pending notices and `Cache-Control: private, no-store`. Writes
finish with `redirect_with_notice` (Post/Redirect/Get with 303).
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, TypeVar
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from starlette.datastructures import UploadFile

from backend.progress.domain import FileDownload, Upload
from backend.progress.errors import ProgressError
from backend.web import deps
from backend.web.components import Layout
from backend.web.notices import Notice, pop_notices, push_notice

logger = logging.getLogger("dpt.web")

T = TypeVar("T")

NO_STORE = {"Cache-Control": "private, no-store"}


def render_page(
    request: Request,
    title: str,
    content: str,
    *,
    status_code: int = 200,
    problems: Iterable[Notice] = (),
    show_nav: bool = True,
) -> HTMLResponse:
    """Wrap `content` into the layout for the caller's session.

    Pending flash notices are popped from client storage and shown together
    with `problems`, the load failures of the current request.
    """
    storage = getattr(request.state, "client_storage", None)
    notices: List[Notice] = pop_notices(storage) if storage is not None else []
    notices.extend(problems)
    layout = Layout(
        title,
        content,
        deps.current_session(request),
        current_path=request.url.path,
        notices=notices,
        show_nav=show_nav,
    )
    return HTMLResponse(content=layout.render(), status_code=status_code, headers=dict(NO_STORE))


def redirect_with_notice(
    request: Request, url: str, kind: str, title: str, message: str = ""
) -> RedirectResponse:
    push_notice(deps.get_client_storage(request), kind, title, message)
    return RedirectResponse(url=url, status_code=303, headers=dict(NO_STORE))


def failure_redirect(request: Request, url: str, title: str, exc: ProgressError) -> RedirectResponse:
    logger.info("%s: %s", title, exc.message)
    return redirect_with_notice(request, url, "error", title, exc.message)


def fetch(problems: List[Notice], loader: Callable[[], T], default: T, what: str) -> T:
    """Run a read against the progress repository; failures become a notice."""
    try:
        return loader()
    except ProgressError as exc:
        logger.warning("loading %s failed: %s", what, exc.message)
        problems.append(Notice("error", f"Could not load {what}", exc.message))
        return default


def form_text(form, name: str) -> str:
    value = form.get(name)
    return value.strip() if isinstance(value, str) else ""


async def read_upload(form, name: str = "file") -> Optional[Upload]:
    value = form.get(name)
    if not isinstance(value, UploadFile):
        return None
    content = await value.read()
    return Upload(
        file_name=value.filename or "",
        content_type=value.content_type or "application/octet-stream",
        content=content,
    )


def download_response(download: FileDownload, *, inline: bool = False) -> Response:
    if download.content is None and download.url:
        return RedirectResponse(url=download.url, status_code=302, headers=dict(NO_STORE))
    disposition = "inline" if inline else "attachment"
    headers = dict(NO_STORE)
    headers["Content-Disposition"] = f"{disposition}; filename*=UTF-8''{quote(download.file_name)}"
    return Response(content=download.content or b"", media_type=download.content_type, headers=headers)
