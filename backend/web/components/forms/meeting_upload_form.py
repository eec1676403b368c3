"""DC meeting minutes upload form."""

from ..base import Component
from .fields import FileUploadField, TextInputField
from .submit import SubmitButton

ACCEPTED_DOCUMENTS = ".pdf,.doc,.docx"


class MeetingUploadForm(Component):
    def __init__(self, *, max_size_mb: int = 5, values: dict | None = None) -> None:
        self.max_size_mb = max_size_mb
        self.values = values or {}

    def render(self) -> str:
        date_html = TextInputField("date", "Meeting date", required=True).render(
            value=self.values.get("date", ""), input_type="date"
        )
        file_html = FileUploadField(
            "file", "Minutes", required=True, help_text=f"PDF or Word, up to {self.max_size_mb}MB"
        ).render(accept=ACCEPTED_DOCUMENTS)
        return f"""
        <form method="post" action="/dc-meeting/upload" enctype="multipart/form-data" class="upload-form">
            {date_html}
            {file_html}
            <div class="form-actions">{SubmitButton("Upload minutes").render()}</div>
        </form>"""
