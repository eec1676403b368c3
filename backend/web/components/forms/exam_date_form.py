"""Exam date announcement form (coordinator)."""

from ..base import Component
from .fields import TextInputField
from .submit import SubmitButton


class ExamDateForm(Component):
    def render(self) -> str:
        fields = [
            TextInputField("course", "Course", required=True).render(),
            TextInputField("date", "Date", required=True).render(input_type="date"),
            TextInputField("time", "Time", required=True).render(placeholder="10:00 AM"),
            TextInputField("venue", "Venue", required=True).render(),
        ]
        return f"""
        <form method="post" action="/coordinator/exam-dates" class="exam-date-form">
            {''.join(fields)}
            <div class="form-actions">{SubmitButton("Announce date").render()}</div>
        </form>"""
