"""
Supabase-backed blob storage for meeting minutes and publications.

The adapter is duck-typed: the client must expose `.storage.from_(bucket)`
(supabase-py) or `.from_(bucket)` (storage3) returning an object offering

- upload(path, body, file_options) -> Any
- download(path) -> bytes
- remove([path]) -> Any
- get_public_url(path) -> str
- list(path, options) -> [ {name: ...}, ... ]

Security: initialize the client with the service role key; only the public
URL of an object ever reaches a browser.
"""
from __future__ import annotations

from typing import Any, List


class SupabaseBlobStorage:
    """Blob storage using one bucket of a supabase client."""

    def __init__(self, client: Any, bucket: str = "files", *, page_size: int = 1000) -> None:
        self._client = client
        self.bucket = bucket
        self.page_size = page_size

    def _bucket(self) -> Any:
        c = self._client
        storage = getattr(c, "storage", None)
        if storage is not None and hasattr(storage, "from_"):
            return storage.from_(self.bucket)
        if hasattr(c, "from_"):
            return c.from_(self.bucket)
        raise RuntimeError("invalid_supabase_client")

    def _norm(self, key: str) -> str:
        # Paths are relative to the bucket; storage3 prepends the bucket id itself.
        norm_key = key.lstrip("/")
        prefix = f"{self.bucket}/"
        if norm_key.startswith(prefix):
            norm_key = norm_key[len(prefix):]
        return norm_key

    def put_object(self, *, key: str, body: bytes, content_type: str) -> None:
        # Options are strings because storage3 forwards them as HTTP headers.
        opts = {"content-type": content_type, "upsert": "true"}
        self._bucket().upload(self._norm(key), body, opts)

    def get_object(self, *, key: str) -> bytes:
        return self._bucket().download(self._norm(key))

    def delete_object(self, *, key: str) -> None:
        self._bucket().remove([self._norm(key)])

    def public_url(self, *, key: str) -> str | None:
        url = self._bucket().get_public_url(self._norm(key))
        # Some client versions append an empty query string.
        return str(url).rstrip("?") if url else None

    def list_objects(self, *, prefix: str = "", search: str = "") -> List[str]:
        base = self._norm(prefix).rstrip("/")
        names: List[str] = []
        offset = 0
        while True:
            options = {"limit": self.page_size, "offset": offset, "sortBy": {"column": "name", "order": "asc"}}
            if search:
                options["search"] = search
            rows = self._bucket().list(base, options) or []
            for row in rows:
                name = row.get("name") if isinstance(row, dict) else None
                if name:
                    names.append(f"{base}/{name}" if base else name)
            if len(rows) < self.page_size:
                return names
            offset += self.page_size


__all__ = ["SupabaseBlobStorage"]
