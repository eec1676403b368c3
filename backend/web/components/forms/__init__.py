"""
Form components.

Basic building blocks (fields, buttons) plus the concrete portal forms.
"""

from .course_form import CourseForm
from .exam_date_form import ExamDateForm
from .exam_request_form import ExamRequestForm
from .fields import FileUploadField, FormField, SelectField, TextAreaField, TextInputField
from .login_form import LoginForm
from .meeting_upload_form import ACCEPTED_DOCUMENTS, MeetingUploadForm
from .modification_form import ModificationForm
from .publication_upload_form import PublicationUploadForm
from .submit import ActionButton, SubmitButton

__all__ = [
    "ACCEPTED_DOCUMENTS",
    "ActionButton",
    "CourseForm",
    "ExamDateForm",
    "ExamRequestForm",
    "FileUploadField",
    "FormField",
    "LoginForm",
    "MeetingUploadForm",
    "ModificationForm",
    "PublicationUploadForm",
    "SelectField",
    "SubmitButton",
    "TextAreaField",
    "TextInputField",
]
