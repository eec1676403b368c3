"""Re-examination request form (student)."""

from ..base import Component
from .fields import TextAreaField, TextInputField
from .submit import SubmitButton


class ExamRequestForm(Component):
    def render(self) -> str:
        fields = [
            TextInputField("exam_name", "Exam", required=True).render(),
            TextInputField("exam_date", "Original exam date", required=True).render(input_type="date"),
            TextAreaField("reason", "Reason", required=True).render(rows=3),
        ]
        return f"""
        <form method="post" action="/exams/requests" class="exam-request-form">
            {''.join(fields)}
            <div class="form-actions">{SubmitButton("Submit request").render()}</div>
        </form>"""
