"""
Route guard: render-or-redirect decision for one navigation attempt.

Pure and synchronous. The caller supplies the current session (or None), the
resolved route target and the requested path; the guard never touches
storage or the network.

Rules, in order:
    1. no session                      -> redirect to /login
    2. target has no required role     -> render
    3. session role == required role   -> render
    4. otherwise                       -> redirect to the session role's home

Supervisors are confined to their own prefix: any path outside `/supervisor`
sends them to `/supervisor`, even when the target requires no role. Pass
`confine_supervisor=False` to evaluate the symmetric rules only.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .domain import LOGIN_PATH, ROLE_HOME, home_for
from .stores import Session

SUPERVISOR_PREFIX = ROLE_HOME["supervisor"]


@dataclass(frozen=True)
class RouteTarget:
    path: str
    required_role: Optional[str] = None


class GuardState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    NO_ROLE_REQUIREMENT = "no_role_requirement"
    ROLE_MATCH = "role_match"
    ROLE_MISMATCH = "role_mismatch"


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None


def _under_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def evaluate(
    session: Optional[Session],
    target: RouteTarget,
    path: Optional[str] = None,
    *,
    confine_supervisor: bool = True,
) -> GuardDecision:
    if session is None:
        return GuardDecision(GuardState.UNAUTHENTICATED, LOGIN_PATH)
    requested = path or target.path
    if (
        confine_supervisor
        and session.role == "supervisor"
        and not _under_prefix(requested, SUPERVISOR_PREFIX)
    ):
        return GuardDecision(GuardState.ROLE_MISMATCH, SUPERVISOR_PREFIX)
    if target.required_role is None:
        return GuardDecision(GuardState.NO_ROLE_REQUIREMENT)
    if session.role == target.required_role:
        return GuardDecision(GuardState.ROLE_MATCH)
    return GuardDecision(GuardState.ROLE_MISMATCH, home_for(session.role))


__all__ = ["RouteTarget", "GuardState", "GuardDecision", "evaluate"]
