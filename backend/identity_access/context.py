"""
Auth context: the single source of truth for the current client's identity.

One instance wraps one `SessionStore`. It restores once on construction,
then only changes through `login` and `logout`; the durable write always
happens before the held session is replaced. Subscribers are called with the
new session (or None) after every change.
"""
from __future__ import annotations

from typing import Callable, List, Optional

from .stores import Session, SessionStore

Listener = Callable[[Optional[Session]], None]


class AuthContext:
    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._listeners: List[Listener] = []
        self._session: Optional[Session] = store.restore()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def role(self) -> Optional[str]:
        return self._session.role if self._session else None

    def login(self, display_name: str, role: str) -> Session:
        session = self._store.login(display_name, role)
        self._set(session)
        return session

    def logout(self) -> None:
        self._store.logout()
        self._set(None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, session: Optional[Session]) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
