"""
Layout Component

Wraps page content into a complete HTML document with the role sidebar and
the one-shot notice region.
"""

from typing import Optional, Sequence

from backend.identity_access.stores import Session

from ..notices import Notice
from .base import Component
from .navigation import Navigation


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        session: Optional[Session] = None,
        *,
        current_path: str = "/",
        notices: Sequence[Notice] = (),
        show_nav: bool = True,
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            session: Current session, None on public pages
            current_path: Current URL path for active navigation highlighting
            notices: Flash notices to show once
            show_nav: Whether to render the sidebar
        """
        self.title = title
        self.content = content
        self.session = session
        self.current_path = current_path
        self.notices = list(notices)
        self.show_nav = show_nav

    def render(self) -> str:
        nav_html = Navigation(self.session, self.current_path).render() if self.show_nav else ""
        body_class = self.classes("app", with_sidebar=self.show_nav)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self.escape(self.title)} - PhD Progress Tracker</title>
    <link rel="stylesheet" href="/static/css/app.css?v=1">
</head>
<body class="{body_class}">
    <a href="#main-content" class="skip-link">Skip to main content</a>
    {nav_html}
    <main id="main-content" class="main-content" role="main">
        {self._render_notices()}
        {self.content}
    </main>
</body>
</html>"""

    def _render_notices(self) -> str:
        if not self.notices:
            return ""
        items = []
        for notice in self.notices:
            role = "alert" if notice.kind == "error" else "status"
            message = f'<p class="toast-message">{self.escape(notice.message)}</p>' if notice.message else ""
            items.append(
                f'<div class="toast toast--{self.escape(notice.kind)}" role="{role}">'
                f'<strong class="toast-title">{self.escape(notice.title)}</strong>{message}</div>'
            )
        return f'<div class="toast-region" aria-live="polite">{"".join(items)}</div>'
