"""
FilePreview Component

Inline preview for a stored file so students can glance at a document
without downloading it.

Behavior:
    - image/*: renders an <img>.
    - application/pdf: renders an <iframe> viewer of bounded height.
    - anything else: a plain download link.

Security:
    URLs point at same-origin routes only; attributes are escaped via the
    base Component helpers.
"""

from __future__ import annotations

from typing import Optional

from .base import Component


class FilePreview(Component):
    """Inline file preview.

    Parameters:
        url: Same-origin URL serving the file inline.
        mime: MIME type string (e.g. "application/pdf", "image/png").
        title: Human-friendly title used in captions/titles.
        alt: Alt text for images; falls back to title.
        max_height: CSS height for embedded viewers.
    """

    def __init__(
        self,
        url: str,
        mime: str,
        *,
        title: str = "",
        alt: Optional[str] = None,
        max_height: str = "480px",
    ) -> None:
        self.url = url or ""
        self.mime = (mime or "").lower()
        self.title = title or ""
        self.alt = (alt or "").strip()
        self.max_height = max_height

    def render(self) -> str:
        if not self.url:
            return ""

        if self.mime.startswith("image/"):
            img_attrs = self.attributes(
                src=self.url,
                alt=self.alt or self.title or "Stored file",
                class_="file-preview__image",
                loading="lazy",
            )
            return f'<figure class="file-preview file-preview--image"><img {img_attrs}></figure>'

        if self.mime == "application/pdf":
            iframe_attrs = self.attributes(
                src=self.url,
                title=self.title or "PDF preview",
                class_="file-preview__frame",
                style=f"width: 100%; height: {self.max_height}; border: none;",
            )
            return f'<div class="file-preview file-preview--pdf"><iframe {iframe_attrs}></iframe></div>'

        link_attrs = self.attributes(href=self.url, class_="btn btn-secondary", download=True)
        return f'<div class="file-preview file-preview--download"><a {link_attrs}>{self.escape(self.title or "Download")}</a></div>'
