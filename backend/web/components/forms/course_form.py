"""
SWAYAM Course Form Component

Used for both adding a course and editing one; the action decides which.
"""
from typing import Optional

from backend.progress.domain import DEFAULT_PROVIDER, SwayamCourse

from ..base import Component
from .fields import TextAreaField, TextInputField
from .submit import SubmitButton


class CourseForm(Component):
    def __init__(self, action: str, *, course: Optional[SwayamCourse] = None, submit_label: str = "Add course") -> None:
        self.action = action
        self.course = course
        self.submit_label = submit_label

    def render(self) -> str:
        c = self.course
        # Distinct ids per course so several edit forms can share a page.
        suffix = f"-{c.id}" if c else ""
        fields = [
            TextInputField("name", "Course name", required=True, input_id=f"name{suffix}").render(
                value=c.name if c else ""
            ),
            TextInputField("provider", "Provider", input_id=f"provider{suffix}").render(
                value=c.provider if c else DEFAULT_PROVIDER
            ),
            TextInputField("duration", "Duration", input_id=f"duration{suffix}").render(
                value=c.duration if c else "", placeholder="e.g. 12 weeks"
            ),
            TextAreaField("description", "Description", input_id=f"description{suffix}").render(
                value=c.description if c else "", rows=3
            ),
        ]
        return f"""
        <form method="post" action="{self.escape(self.action)}" class="course-form">
            {''.join(fields)}
            <div class="form-actions">{SubmitButton(self.submit_label).render()}</div>
        </form>"""
