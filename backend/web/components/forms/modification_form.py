"""Supervisor's "request modification" form for one DC meeting."""

from ..base import Component
from .fields import TextAreaField
from .submit import SubmitButton


class ModificationForm(Component):
    def __init__(self, meeting_id: str) -> None:
        self.meeting_id = meeting_id

    def render(self) -> str:
        note_html = TextAreaField(
            "note", "Modification details", required=True, input_id=f"note-{self.meeting_id}"
        ).render(rows=2)
        action = f"/supervisor/dc-meetings/{self.meeting_id}/modify"
        return f"""
        <form method="post" action="{self.escape(action)}" class="modification-form">
            {note_html}
            {SubmitButton("Request modification", variant="secondary").render()}
        </form>"""
