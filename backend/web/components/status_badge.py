"""Colored status pill used in every table and card."""

from .base import Component

_COLORS = (
    ("passed", "green"),
    ("failed", "red"),
    ("pending", "yellow"),
    ("approved", "blue"),
)


def badge_color(status: str) -> str:
    """passed green, failed red, pending yellow, approved blue, anything else gray."""
    lowered = (status or "").strip().lower()
    for word, color in _COLORS:
        if lowered == word or lowered.startswith(word + " "):
            return color
    return "gray"


class StatusBadge(Component):
    def __init__(self, status: str) -> None:
        self.status = status or ""

    def render(self) -> str:
        color = badge_color(self.status)
        return f'<span class="status-badge status-badge--{color}">{self.escape(self.status)}</span>'
