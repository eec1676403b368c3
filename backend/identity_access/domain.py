"""
Identity domain constants and simple helpers.

Why:
- Centralize the three portal roles so the session store, the route guard
  and the web layer cannot drift apart.
- Each role owns exactly one home path; redirects always land there.
"""

from __future__ import annotations

from typing import Optional

# Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"student", "supervisor", "coordinator"})

ROLE_HOME = {
    "student": "/",
    "supervisor": "/supervisor",
    "coordinator": "/coordinator",
}

ROLE_LABELS = {
    "student": "Student",
    "supervisor": "Supervisor",
    "coordinator": "Coordinator",
}

LOGIN_PATH = "/login"


def normalize_role(value: object) -> Optional[str]:
    """Return the canonical role name or None when the value is not a known role."""
    if not isinstance(value, str):
        return None
    role = value.strip().lower()
    return role if role in ALLOWED_ROLES else None


def home_for(role: str) -> str:
    return ROLE_HOME.get(role, LOGIN_PATH)


__all__ = ["ALLOWED_ROLES", "ROLE_HOME", "ROLE_LABELS", "LOGIN_PATH", "normalize_role", "home_for"]
