"""
Error taxonomy for calls into the progress collaborators.

Route handlers catch `ProgressError` at the call site and turn it into a
user-facing notice; none of these escalate to a global handler.
"""
from __future__ import annotations

from typing import Optional


class ProgressError(Exception):
    """Base class; `message` is safe to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkFailure(ProgressError):
    """The collaborator could not be reached (DNS, connect, timeout)."""


class RemoteRejection(ProgressError):
    """The collaborator answered with a non-2xx status or refused the operation."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationFailure(ProgressError):
    """A required field is missing or an input is out of bounds."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NotFound(RemoteRejection):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status_code=404)


__all__ = ["ProgressError", "NetworkFailure", "RemoteRejection", "ValidationFailure", "NotFound"]
