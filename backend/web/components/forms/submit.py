"""Submit button used by every form."""

from ..base import Component


class SubmitButton(Component):
    def __init__(self, label: str, *, variant: str = "primary", name: str | None = None, value: str | None = None) -> None:
        self.label = label
        self.variant = variant
        self.name = name
        self.value = value

    def render(self) -> str:
        attrs = self.attributes(
            type="submit",
            class_=self.classes("btn", f"btn-{self.variant}"),
            name=self.name,
            value=self.value,
        )
        return f"<button {attrs}>{self.escape(self.label)}</button>"


class ActionButton(Component):
    """A one-button POST form, e.g. "Approve" next to a table row."""

    def __init__(self, action: str, label: str, *, variant: str = "secondary", hidden: dict | None = None) -> None:
        self.action = action
        self.label = label
        self.variant = variant
        self.hidden = hidden or {}

    def render(self) -> str:
        hidden = "".join(
            f'<input {self.attributes(type="hidden", name=k, value=v)}>' for k, v in self.hidden.items()
        )
        return (
            f'<form method="post" action="{self.escape(self.action)}" class="inline-form">'
            f"{hidden}{SubmitButton(self.label, variant=self.variant).render()}</form>"
        )
