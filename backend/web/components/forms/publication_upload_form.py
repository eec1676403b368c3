"""Publication upload form: title, venue and file are required; authors optional."""

from ..base import Component
from .fields import FileUploadField, TextInputField
from .meeting_upload_form import ACCEPTED_DOCUMENTS
from .submit import SubmitButton


class PublicationUploadForm(Component):
    def __init__(self, *, max_size_mb: int = 5) -> None:
        self.max_size_mb = max_size_mb

    def render(self) -> str:
        fields = [
            TextInputField("title", "Title", required=True).render(),
            TextInputField("venue", "Venue", required=True).render(placeholder="Journal or conference"),
            TextInputField("authors", "Authors").render(placeholder="Comma separated"),
            FileUploadField(
                "file", "Paper", required=True, help_text=f"PDF or Word, up to {self.max_size_mb}MB"
            ).render(accept=ACCEPTED_DOCUMENTS),
        ]
        return f"""
        <form method="post" action="/publications/upload" enctype="multipart/form-data" class="upload-form">
            {''.join(fields)}
            <div class="form-actions">{SubmitButton("Add publication").render()}</div>
        </form>"""
