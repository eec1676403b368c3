# Portal component system
# Pure Python components for escaped-by-default HTML generation

from .base import Component
from .cards import Announcement, AnnouncementList, DataTable, StatCard, StudentProgressCard
from .file_preview import FilePreview
from .forms import (
    ActionButton,
    CourseForm,
    ExamDateForm,
    ExamRequestForm,
    LoginForm,
    MeetingUploadForm,
    ModificationForm,
    PublicationUploadForm,
    SubmitButton,
)
from .layout import Layout
from .navigation import Navigation
from .status_badge import StatusBadge, badge_color

__all__ = [
    "ActionButton",
    "Announcement",
    "AnnouncementList",
    "Component",
    "CourseForm",
    "DataTable",
    "ExamDateForm",
    "ExamRequestForm",
    "FilePreview",
    "Layout",
    "LoginForm",
    "MeetingUploadForm",
    "ModificationForm",
    "Navigation",
    "PublicationUploadForm",
    "StatCard",
    "StatusBadge",
    "StudentProgressCard",
    "SubmitButton",
    "badge_color",
]
