"""StatCard: a headline number with a label, optionally linking to details."""

from typing import Optional

from ..base import Component


class StatCard(Component):
    def __init__(self, label: str, value: object, *, icon: str = "", href: Optional[str] = None, hint: str = "") -> None:
        self.label = label
        self.value = value
        self.icon = icon
        self.href = href
        self.hint = hint

    def render(self) -> str:
        icon_html = f'<span class="stat-icon" aria-hidden="true">{self.icon}</span>' if self.icon else ""
        hint_html = f'<p class="stat-hint">{self.escape(self.hint)}</p>' if self.hint else ""
        inner = (
            f"{icon_html}"
            f'<p class="stat-label">{self.escape(self.label)}</p>'
            f'<p class="stat-value">{self.escape(self.value)}</p>'
            f"{hint_html}"
        )
        if self.href:
            return f'<a {self.attributes(href=self.href, class_="card stat-card")}>{inner}</a>'
        return f'<div class="card stat-card">{inner}</div>'
