"""
Shared cookie utilities.

Why:
    The client-context cookie is set in middleware and cleared on logout;
    keeping the policy in one pure helper avoids drift between the two.

Design:
    The helper is framework-agnostic: it accepts an environment string and
    returns the corresponding cookie flags. Callers decide where the
    environment comes from (e.g., the settings object).
"""

from __future__ import annotations

CLIENT_COOKIE_NAME = "dpt_client"
# Long-lived like browser storage: one year.
CLIENT_COOKIE_MAX_AGE = 365 * 24 * 3600


def cookie_opts(environment: str) -> dict:
    """Return cookie flags for the given environment.

    Returns a mapping with keys:
      - httponly: always True; scripts never need the client id
      - secure: True in prod-like environments (the dev server runs on http)
      - samesite: "lax" so top-level navigations keep the client context
    """
    secure = (environment or "").lower() in {"prod", "production", "stage", "staging"}
    return {"httponly": True, "secure": secure, "samesite": "lax"}
