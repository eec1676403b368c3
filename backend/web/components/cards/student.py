"""StudentProgressCard: roster entry with a progress bar."""

from backend.progress.domain import StudentSummary

from ..base import Component


class StudentProgressCard(Component):
    def __init__(self, student: StudentSummary) -> None:
        self.student = student

    def render(self) -> str:
        progress = max(0, min(100, int(self.student.progress or 0)))
        area = (
            f'<p class="student-area">{self.escape(self.student.research_area)}</p>'
            if self.student.research_area
            else ""
        )
        bar_attrs = self.attributes(
            class_="progress-bar",
            role="progressbar",
            aria_valuenow=progress,
            aria_valuemin=0,
            aria_valuemax=100,
            aria_label=f"Progress of {self.student.name}",
        )
        return (
            '<div class="card student-card">'
            f'<p class="student-name">{self.escape(self.student.name)}</p>'
            f"{area}"
            f'<div {bar_attrs}><span class="progress-bar__fill progress-{progress // 5 * 5}"></span></div>'
            f'<p class="student-progress">{progress}% complete</p>'
            "</div>"
        )
