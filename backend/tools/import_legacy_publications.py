"""Copy legacy publication blobs into structured `publications` rows.

Why:
    Older uploads stored a publication as a single object whose name carried
    the metadata (`publication-{title}-{venue}-{validated|unvalidated}.{ext}`).
    The portals now read title, venue and validation state from columns. This
    command decodes what can be decoded reliably, copies each blob to
    `publications/{id}.{ext}` and inserts the matching row.

Notes:
    - Title and venue cannot be told apart in the legacy name, so the middle
      part becomes the title and the venue stays empty for manual review.
    - Row ids derive from the legacy key, so a second run skips what the
      first one imported.
"""
from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass, field
from typing import List

import click

from backend.progress.domain import utcnow_iso
from backend.progress.legacy_keys import PREFIX, LegacyPublicationKey, decode
from backend.progress.repo_supabase import SupabaseProgressRepo

logger = logging.getLogger("dpt.tools")

_ID_NAMESPACE = uuid.UUID("5f0c7f4e-8a9b-4d7c-9a51-2f3d0c6e1b42")


@dataclass
class ImportItem:
    legacy: LegacyPublicationKey
    publication_id: str
    target_key: str

    @property
    def file_name(self) -> str:
        ext = self.legacy.extension
        return f"{self.legacy.label}.{ext}" if ext else self.legacy.label


@dataclass
class ImportSummary:
    planned: List[ImportItem] = field(default_factory=list)
    imported: int = 0
    skipped: int = 0
    failed: int = 0


def plan(repo: SupabaseProgressRepo, prefix: str = "") -> List[ImportItem]:
    """Decode every legacy publication object below `prefix`."""
    items: List[ImportItem] = []
    for key in repo.storage.list_objects(prefix=prefix, search=PREFIX):
        legacy = decode(key)
        if legacy is None:
            continue
        publication_id = str(uuid.uuid5(_ID_NAMESPACE, key))
        suffix = f".{legacy.extension}" if legacy.extension else ""
        items.append(ImportItem(legacy=legacy, publication_id=publication_id, target_key=f"publications/{publication_id}{suffix}"))
    return items


def run_import(
    repo: SupabaseProgressRepo,
    *,
    prefix: str = "",
    student_id: str = "legacy-import",
    student_name: str = "",
    dry_run: bool = False,
) -> ImportSummary:
    summary = ImportSummary(planned=plan(repo, prefix))
    if dry_run:
        return summary
    for item in summary.planned:
        if repo.publication_exists(item.publication_id):
            summary.skipped += 1
            continue
        try:
            body = repo.storage.get_object(key=item.legacy.key)
            content_type = mimetypes.guess_type(item.file_name)[0] or "application/octet-stream"
            repo.storage.put_object(key=item.target_key, body=body, content_type=content_type)
            repo.insert_publication_row(
                {
                    "id": item.publication_id,
                    "student_id": student_id,
                    "student_name": student_name,
                    "title": item.legacy.label,
                    "venue": "",
                    "authors": "",
                    "file_name": item.file_name,
                    "file_path": item.target_key,
                    "file_url": repo.storage.public_url(key=item.target_key),
                    "validated": item.legacy.validated,
                    "uploaded_at": utcnow_iso(),
                }
            )
        except Exception as exc:
            logger.warning("import of %s failed: %s", item.legacy.key, exc)
            summary.failed += 1
            continue
        logger.info("imported %s as %s", item.legacy.key, item.publication_id)
        summary.imported += 1
    return summary


def _build_repo(supabase_url: str, service_key: str, bucket: str) -> SupabaseProgressRepo:
    from supabase import create_client

    return SupabaseProgressRepo(create_client(supabase_url, service_key), bucket=bucket)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--supabase-url", envvar="SUPABASE_URL", required=True, help="Project URL of the Supabase instance.")
@click.option("--service-key", envvar="SUPABASE_SERVICE_ROLE_KEY", required=True, help="Service role key.")
@click.option("--bucket", envvar="SUPABASE_STORAGE_BUCKET", default="files", show_default=True)
@click.option("--prefix", default="", help="Folder inside the bucket that holds the legacy objects.")
@click.option("--student-id", default="legacy-import", show_default=True, help="Owner recorded on imported rows.")
@click.option("--student-name", default="", help="Owner name recorded on imported rows.")
@click.option("--dry-run", is_flag=True, default=False, help="Only print the plan.")
def main(
    supabase_url: str,
    service_key: str,
    bucket: str,
    prefix: str,
    student_id: str,
    student_name: str,
    dry_run: bool,
) -> None:
    """Import legacy publication blobs into structured rows."""
    repo = _build_repo(supabase_url, service_key, bucket)
    summary = run_import(repo, prefix=prefix, student_id=student_id, student_name=student_name, dry_run=dry_run)
    mode_text = "dry-run" if dry_run else "import"
    click.echo(f"Legacy publications ({mode_text}): {len(summary.planned)} found")
    for item in summary.planned:
        state = "validated" if item.legacy.validated else "unvalidated"
        click.echo(f"  {item.legacy.key} -> {item.target_key} [{state}] {item.legacy.label}")
    if not dry_run:
        click.echo(f"Imported {summary.imported}, skipped {summary.skipped}, failed {summary.failed}")
        if summary.failed:
            raise click.exceptions.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
