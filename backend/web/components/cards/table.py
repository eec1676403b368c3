"""
DataTable component.

Cells are pre-rendered HTML so callers can embed badges, links and action
forms; callers must escape plain text themselves (Component.escape).
"""

from typing import Iterable, List, Sequence

from ..base import Component


class DataTable(Component):
    """
    Args:
        headers: Column titles (escaped here).
        rows: Iterable of rows, each a sequence of HTML cell strings.
        empty_text: Shown instead of the table when there are no rows.
        caption: Optional accessible caption.
    """

    def __init__(
        self,
        headers: Sequence[str],
        rows: Iterable[Sequence[str]],
        *,
        empty_text: str = "Nothing to show yet.",
        caption: str = "",
    ) -> None:
        self.headers = list(headers)
        self.rows: List[Sequence[str]] = [list(r) for r in rows]
        self.empty_text = empty_text
        self.caption = caption

    def render(self) -> str:
        if not self.rows:
            return f'<p class="empty-state">{self.escape(self.empty_text)}</p>'
        caption = f'<caption class="sr-only">{self.escape(self.caption)}</caption>' if self.caption else ""
        head = "".join(f'<th scope="col">{self.escape(h)}</th>' for h in self.headers)
        body = "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in self.rows)
        return (
            '<div class="table-wrapper"><table class="data-table">'
            f"{caption}<thead><tr>{head}</tr></thead><tbody>{body}</tbody></table></div>"
        )
