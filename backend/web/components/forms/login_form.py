"""
Login Form Component

There is no credential check: the visitor picks a portal role and, optionally,
the name to show.
"""
from typing import Optional

from backend.identity_access.domain import ROLE_LABELS

from ..base import Component
from .fields import TextInputField
from .submit import SubmitButton


class LoginForm(Component):
    def __init__(self, default_name: str, *, selected_role: str = "", error: Optional[str] = None) -> None:
        self.default_name = default_name
        self.selected_role = selected_role
        self.error = error

    def render(self) -> str:
        name_html = TextInputField("display_name", "Name").render(value=self.default_name, autocomplete="name")
        choices = []
        for role, label in ROLE_LABELS.items():
            attrs = self.attributes(
                type="radio", name="role", value=role, id=f"role-{role}", checked=(role == self.selected_role)
            )
            choices.append(
                f'<label class="role-choice" for="role-{role}"><input {attrs}><span>{self.escape(label)}</span></label>'
            )
        error_html = f'<p class="form-error" role="alert">{self.escape(self.error)}</p>' if self.error else ""
        return f"""
        <form method="post" action="/login" class="login-form">
            {name_html}
            <fieldset class="role-choices">
                <legend class="form-label">Sign in as<span class="form-required" aria-hidden="true">*</span></legend>
                {''.join(choices)}
            </fieldset>
            {error_html}
            <div class="form-actions">{SubmitButton("Sign in").render()}</div>
        </form>"""
