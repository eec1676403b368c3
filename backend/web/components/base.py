"""
Base Component Class for the portal UI

Pages are assembled from small Python components instead of a template
engine: plain classes are easy to unit test and escape by default.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components.

    Subclasses implement `render()` and use the static helpers below for
    escaping and attribute building.
    """

    def render(self) -> str:
        """Render the component as an HTML string"""
        raise NotImplementedError("Subclasses must implement render()")

    def __str__(self) -> str:
        return self.render()

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """Escape HTML entities; None becomes an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Build a CSS class string with conditional classes

        Example:
            >>> Component.classes("btn", "btn-primary", disabled=True, active=False)
            "btn btn-primary disabled"
        """
        result = [a for a in args if a]
        result.extend(key.replace("_", "-") for key, value in conditionals.items() if value)
        return " ".join(result)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build HTML attributes from keyword arguments

        A trailing underscore escapes reserved names (class_ -> class); inner
        underscores become hyphens (data_id -> data-id). True renders a bare
        boolean attribute, False and None are skipped.

        Example:
            >>> Component.attributes(id="test", data_value="123", disabled=True)
            'id="test" data-value="123" disabled'
        """
        result = []
        for key, value in attrs.items():
            if key.endswith("_"):
                key = key[:-1]
            else:
                key = key.replace("_", "-")

            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')

        return " ".join(result)
