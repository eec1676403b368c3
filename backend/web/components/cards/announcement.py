"""Announcements shown on the student dashboard."""

from dataclasses import dataclass
from typing import Iterable, List

from ..base import Component


@dataclass
class Announcement:
    title: str
    date: str
    author: str
    body: str = ""


class AnnouncementList(Component):
    def __init__(self, items: Iterable[Announcement]) -> None:
        self.items: List[Announcement] = list(items)

    def render(self) -> str:
        if not self.items:
            return '<p class="empty-state">No announcements.</p>'
        entries = []
        for item in self.items:
            body = f"<p>{self.escape(item.body)}</p>" if item.body else ""
            entries.append(
                '<li class="announcement">'
                f'<p class="announcement-title">{self.escape(item.title)}</p>'
                f'<p class="announcement-meta">{self.escape(item.date)} · {self.escape(item.author)}</p>'
                f"{body}</li>"
            )
        return f'<ul class="announcement-list">{"".join(entries)}</ul>'
