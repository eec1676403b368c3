"""
Shared web security helpers for the route modules.

Contains the same-origin check used by every state-changing form post.
Keeping a single implementation avoids drift between portals.
"""
from __future__ import annotations

import os
from urllib.parse import urlparse

from fastapi import Request
from fastapi.responses import PlainTextResponse


def _parse_origin(url: str) -> tuple[str, str, int]:
    p = urlparse(url)
    if not p.scheme or not p.hostname:
        raise ValueError("invalid_origin")
    scheme = p.scheme.lower()
    port = p.port if p.port is not None else (443 if scheme == "https" else 80)
    return scheme, p.hostname.lower(), int(port)


def _server_origin(request: Request) -> tuple[str, str, int]:
    trust_proxy = (os.getenv("DPT_TRUST_PROXY", "false") or "").lower() == "true"
    scheme = (request.url.scheme or "http").lower()
    host = (request.url.hostname or "").lower()
    port = int(request.url.port) if request.url.port else (443 if scheme == "https" else 80)
    if trust_proxy:
        xf_proto = (request.headers.get("x-forwarded-proto") or "").split(",")[0].strip().lower()
        xf_host = (request.headers.get("x-forwarded-host") or "").split(",")[0].strip()
        if xf_proto:
            scheme = xf_proto
        if xf_host:
            host_only, _, port_str = xf_host.partition(":")
            host = host_only.lower()
            port = int(port_str) if port_str.isdigit() else (443 if scheme == "https" else 80)
    return scheme, host, port


def _is_same_origin(request: Request) -> bool:
    """Verify same-origin using Origin or Referer headers.

    Behavior:
    - If Origin is present, require exact scheme/host/port match with server.
    - Else if Referer is present, validate its origin similarly.
    - Else (no headers): allow to not break non-browser clients.
    Proxy awareness: Only trust X-Forwarded-* when DPT_TRUST_PROXY=true.
    """
    try:
        server = _server_origin(request)
        origin_val = request.headers.get("origin")
        if origin_val:
            return _parse_origin(origin_val) == server
        referer_val = request.headers.get("referer")
        if referer_val:
            return _parse_origin(referer_val) == server
        return True
    except ValueError:
        return False


def cross_site_forbidden() -> PlainTextResponse:
    return PlainTextResponse("cross-site request refused", status_code=403, headers={"Cache-Control": "private, no-store"})
