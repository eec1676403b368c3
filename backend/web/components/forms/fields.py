"""
Form field components.

Small components that keep label, input, help and error markup consistent
across every portal form.
"""

from typing import Optional, Sequence, Tuple

from ..base import Component


class FormField(Component):
    """Wrapper that renders label, input slot, help, and error text."""

    def __init__(
        self,
        field_id: str,
        label: str,
        *,
        required: bool = False,
        help_text: Optional[str] = None,
        error_text: Optional[str] = None,
        input_id: Optional[str] = None,
    ) -> None:
        self.field_id = field_id
        self.input_id = input_id or field_id
        self.label = label
        self.required = required
        self.help_text = help_text
        self.error_text = error_text

    def _described_by(self) -> Optional[str]:
        return f"{self.input_id}-help" if self.help_text else None

    def wrap(self, input_html: str) -> str:
        state_class = " form-field--error" if self.error_text else ""
        required_marker = '<span class="form-required" aria-hidden="true">*</span>' if self.required else ""
        help_html = (
            f'<p class="form-help" id="{self.input_id}-help">{self.escape(self.help_text)}</p>'
            if self.help_text
            else ""
        )
        error_html = (
            f'<p class="form-error" role="alert" id="{self.input_id}-error">{self.escape(self.error_text)}</p>'
            if self.error_text
            else ""
        )
        label_attrs = self.attributes(for_=self.input_id, class_="form-label")
        return (
            f'<div class="form-field{state_class}">'
            f"<label {label_attrs}>{self.escape(self.label)}{required_marker}</label>"
            f"{input_html}{help_html}{error_html}"
            "</div>"
        )


class TextInputField(FormField):
    """Single-line input; `input_type` may be text, date, time, search or number."""

    def render(
        self,
        *,
        value: str = "",
        input_type: str = "text",
        placeholder: Optional[str] = None,
        **attrs: str,
    ) -> str:
        input_attrs = self.attributes(
            id=self.input_id,
            name=self.field_id,
            type=input_type,
            value=value,
            placeholder=placeholder,
            required=self.required,
            class_="form-input",
            aria_describedby=self._described_by(),
            aria_invalid="true" if self.error_text else "false",
            **attrs,
        )
        return self.wrap(f"<input {input_attrs}>")


class TextAreaField(FormField):
    """Convenience helper for textareas."""

    def render(self, value: str = "", rows: int = 4, **attrs: str) -> str:
        textarea_attrs = self.attributes(
            id=self.input_id,
            name=self.field_id,
            rows=str(rows),
            required=self.required,
            class_="form-input",
            aria_describedby=self._described_by(),
            aria_invalid="true" if self.error_text else "false",
            **attrs,
        )
        return self.wrap(f"<textarea {textarea_attrs}>{self.escape(value)}</textarea>")


class FileUploadField(FormField):
    """File upload control with consistent styling."""

    def render(self, accept: Optional[str] = None, **attrs: str) -> str:
        input_attrs = self.attributes(
            id=self.input_id,
            name=self.field_id,
            type="file",
            accept=accept,
            required=self.required,
            aria_describedby=self._described_by(),
            aria_invalid="true" if self.error_text else "false",
            **attrs,
        )
        return self.wrap(f"<input {input_attrs}>")


class SelectField(FormField):
    """Select box; options are (value, label) pairs."""

    def render(self, options: Sequence[Tuple[str, str]], value: str = "", **attrs: str) -> str:
        opts = "".join(
            f'<option {self.attributes(value=v, selected=(v == value))}>{self.escape(label)}</option>'
            for v, label in options
        )
        select_attrs = self.attributes(
            id=self.input_id,
            name=self.field_id,
            required=self.required,
            class_="form-input",
            aria_describedby=self._described_by(),
            **attrs,
        )
        return self.wrap(f"<select {select_attrs}>{opts}</select>")
