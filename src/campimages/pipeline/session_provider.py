"""Injectable source of the signed-in user's session."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserSession:
    user_id: str
    access_token: str = ""


SessionListener = Callable[[Optional[UserSession]], None]


class SessionProvider(Protocol):
    """Reads and watches the current session."""

    def get(self) -> Optional[UserSession]:
        ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        ...

    def teardown(self) -> None:
        ...


class StaticSessionProvider:
    """In-memory session provider that notifies listeners on change."""

    def __init__(self, session: Optional[UserSession] = None):
        self._session = session
        self._listeners: list[SessionListener] = []

    def get(self) -> Optional[UserSession]:
        return self._session

    def set(self, session: Optional[UserSession]) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def clear(self) -> None:
        self.set(None)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def teardown(self) -> None:
        self._listeners.clear()
