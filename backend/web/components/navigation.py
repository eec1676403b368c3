"""
Navigation Component

Role-based sidebar: each portal (student, supervisor, coordinator) gets the
links of its own section of the navigation table. Visibility is a
convenience only; the route guard decides what may render.
"""

from typing import List, Optional

from backend.identity_access.domain import ROLE_LABELS
from backend.identity_access.stores import Session

from ..route_targets import NavEntry, sidebar_entries
from .base import Component


class Navigation(Component):
    """Sidebar with role-aware links, the signed-in user and a logout button."""

    def __init__(self, session: Optional[Session] = None, current_path: str = "/"):
        self.session = session
        self.current_path = current_path or "/"

    def render(self) -> str:
        if not self.session:
            return self._render_public()

        entries = sidebar_entries(self.session.role)
        active = self._active_href(entries)
        links = "".join(self._link(e.path, e.label, e.icon, e.path == active) for e in entries)
        role_label = ROLE_LABELS.get(self.session.role, "User")
        return f"""
    <aside class="sidebar" id="sidebar" aria-label="Sidebar">
        <nav class="sidebar-nav" role="navigation" aria-label="Main navigation">
            <div class="sidebar-header">
                <span class="sidebar-title">PhD Progress</span>
                <span class="sidebar-portal">{self.escape(role_label)} Portal</span>
            </div>
            <div class="sidebar-items">
                {links}
            </div>
            <div class="sidebar-footer">
                <div class="user-info-compact">
                    <div class="user-name">{self.escape(self.session.display_name)}</div>
                    <div class="user-role">{self.escape(role_label)}</div>
                </div>
                {self._logout()}
            </div>
        </nav>
    </aside>"""

    def _render_public(self) -> str:
        return f"""
    <aside class="sidebar" id="sidebar" aria-label="Sidebar">
        <nav class="sidebar-nav" role="navigation" aria-label="Main navigation">
            <div class="sidebar-header">
                <span class="sidebar-title">PhD Progress</span>
            </div>
            <div class="sidebar-items">
                {self._link("/login", "Sign in", "🔑", self.current_path == "/login")}
            </div>
        </nav>
    </aside>"""

    def _active_href(self, entries: List[NavEntry]) -> str:
        """Pick the single active href: exact match, else longest non-root prefix."""
        path = self.current_path
        best = ""
        for entry in entries:
            if entry.path == path:
                return entry.path
            if entry.path != "/" and path.startswith(entry.path + "/") and len(entry.path) > len(best):
                best = entry.path
        return best

    def _link(self, href: str, text: str, icon: str, is_active: bool) -> str:
        icon_html = f'<span class="nav-icon" aria-hidden="true">{icon}</span>' if icon else ""
        attrs = self.attributes(
            href=href,
            class_=self.classes("sidebar-link", active=is_active),
            aria_current="page" if is_active else None,
        )
        return f'<a {attrs}>{icon_html}<span class="nav-text">{self.escape(text)}</span></a>'

    @staticmethod
    def _logout() -> str:
        return """
                <form method="post" action="/logout" class="sidebar-logout">
                    <button type="submit" class="sidebar-link sidebar-logout-button">Logout</button>
                </form>"""
