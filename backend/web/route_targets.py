"""
Navigation table: every page path with its optional required role.

The table is static. The route guard resolves a request path against it
(exact match first, then the longest non-root prefix) and the sidebar reads
the same entries for its links, so what is shown and what is allowed cannot
drift apart.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from backend.identity_access.guard import RouteTarget


@dataclass(frozen=True)
class NavEntry:
    path: str
    label: str
    portal: str
    icon: str = ""
    required_role: Optional[str] = None
    in_sidebar: bool = True

    @property
    def target(self) -> RouteTarget:
        return RouteTarget(path=self.path, required_role=self.required_role)


NAVIGATION: tuple[NavEntry, ...] = (
    # Student portal: no role requirement, mirrors the historical routing
    NavEntry("/", "Dashboard", "student", "🏠"),
    NavEntry("/dc-meeting", "DC Meeting", "student", "📅"),
    NavEntry("/publications", "Publications", "student", "📄"),
    NavEntry("/courses", "Courses", "student", "📚"),
    NavEntry("/exams", "Exams", "student", "📝"),
    NavEntry("/stored-files", "Stored Files", "student", "🗂"),
    # Supervisor portal
    NavEntry("/supervisor", "Dashboard", "supervisor", "🏠", "supervisor"),
    NavEntry("/supervisor/students", "Students", "supervisor", "👥", "supervisor"),
    NavEntry("/supervisor/dc-meetings", "DC Meetings", "supervisor", "📅", "supervisor"),
    NavEntry("/supervisor/publications", "Publications", "supervisor", "📄", "supervisor"),
    NavEntry("/supervisor/exams", "Exams", "supervisor", "📝", "supervisor"),
    # Coordinator portal
    NavEntry("/coordinator", "Dashboard", "coordinator", "🏠", "coordinator"),
    NavEntry("/coordinator/publications", "Publications", "coordinator", "📄", "coordinator"),
    NavEntry("/coordinator/exam-results", "Exam Results", "coordinator", "🎓", "coordinator"),
    NavEntry("/coordinator/swayam-courses", "SWAYAM Courses", "coordinator", "📚", "coordinator"),
    NavEntry("/coordinator/exam-dates", "Exam Dates", "coordinator", "🗓", "coordinator"),
)

_BY_PATH: Dict[str, NavEntry] = {e.path: e for e in NAVIGATION}


def resolve_target(path: str) -> Optional[RouteTarget]:
    """Map a request path to its route target, or None when it is not a page."""
    entry = resolve_entry(path)
    return entry.target if entry else None


def resolve_entry(path: str) -> Optional[NavEntry]:
    normalized = path.rstrip("/") or "/"
    exact = _BY_PATH.get(normalized)
    if exact is not None:
        return exact
    best: Optional[NavEntry] = None
    for entry in NAVIGATION:
        if entry.path == "/":
            continue
        if normalized.startswith(entry.path + "/") and (best is None or len(entry.path) > len(best.path)):
            best = entry
    return best


def sidebar_entries(role: str) -> List[NavEntry]:
    return [e for e in NAVIGATION if e.portal == role and e.in_sidebar]


__all__ = ["NavEntry", "NAVIGATION", "resolve_target", "resolve_entry", "sidebar_entries"]
