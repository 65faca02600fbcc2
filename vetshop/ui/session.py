"""
Client-side session handling for the Streamlit UI.

``BrowserAuth`` keeps the session tokens in a per-user store
(``st.session_state`` in the app) and publishes sign-in/out events.
``SessionWatcher`` is what widgets hold: it fetches the current session on
mount, follows auth events while mounted and stops mutating once unmounted,
including for a fetch still in flight.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Callable, MutableMapping, Optional

from vetshop.backend.auth import AuthClient
from vetshop.domain import Session
from vetshop.exceptions import VetShopError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "_sb_access_token"
REFRESH_TOKEN_KEY = "_sb_refresh_token"


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


AuthListener = Callable[[AuthEvent, Optional[Session]], None]


class Subscription:
    """Handle returned by a subscribe call; ``unsubscribe()`` is idempotent."""

    def __init__(self, on_unsubscribe: Callable[[], None]) -> None:
        self._on_unsubscribe = on_unsubscribe
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._on_unsubscribe()


class AuthEvents:
    """In-process publisher of auth state changes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: dict[int, AuthListener] = {}
        self._next_id = 0

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        with self._lock:
            self._next_id += 1
            key = self._next_id
            self._listeners[key] = listener

        def remove() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return Subscription(remove)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener(event, session)


class CancelToken:
    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class BrowserAuth:
    """
    Session operations for one UI user.

    Args:
        auth_client: Client for the auth service.
        store: Mapping that persists the tokens between reruns.
        events: Publisher for auth state changes; one is created if omitted.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        store: MutableMapping,
        events: Optional[AuthEvents] = None,
    ) -> None:
        self.auth_client = auth_client
        self.store = store
        self.events = events or AuthEvents()

    def _save(self, session: Session) -> None:
        self.store[ACCESS_TOKEN_KEY] = session.access_token
        if session.refresh_token:
            self.store[REFRESH_TOKEN_KEY] = session.refresh_token

    def _clear(self) -> None:
        self.store.pop(ACCESS_TOKEN_KEY, None)
        self.store.pop(REFRESH_TOKEN_KEY, None)

    def get_session(self) -> Optional[Session]:
        access_token = self.store.get(ACCESS_TOKEN_KEY)
        refresh_token = self.store.get(REFRESH_TOKEN_KEY)
        if not access_token and not refresh_token:
            return None
        session = self.auth_client.get_session(access_token, refresh_token)
        if session is None:
            self._clear()
            return None
        if session.access_token != access_token:
            self._save(session)
            self.events.emit(AuthEvent.TOKEN_REFRESHED, session)
        return session

    def sign_in(self, email: str, password: str) -> Session:
        session = self.auth_client.sign_in_with_password(email, password)
        self._save(session)
        self.events.emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_out(self) -> None:
        access_token = self.store.get(ACCESS_TOKEN_KEY)
        if access_token:
            self.auth_client.sign_out(access_token)
        self._clear()
        self.events.emit(AuthEvent.SIGNED_OUT, None)


class SessionWatcher:
    """
    Widget-scoped view of the current session.

    ``loading`` stays true until the first fetch after ``mount()`` resolves.
    A failed fetch counts as "no session".
    """

    def __init__(self, auth: BrowserAuth) -> None:
        self.auth = auth
        self.session: Optional[Session] = None
        self.loading = True
        self._token: Optional[CancelToken] = None
        self._subscription: Optional[Subscription] = None

    @property
    def mounted(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def mount(self, executor: Optional[Executor] = None) -> None:
        if self.mounted:
            return
        token = CancelToken()
        self._token = token
        self.loading = True

        def on_event(_event: AuthEvent, session: Optional[Session]) -> None:
            if not token.cancelled:
                self.session = session

        self._subscription = self.auth.events.on_auth_state_change(on_event)

        if executor is None:
            self._apply_fetch(token, self._fetch())
        else:
            future = executor.submit(self._fetch)
            future.add_done_callback(lambda f: self._apply_future(token, f))

    def unmount(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _fetch(self) -> Optional[Session]:
        try:
            return self.auth.get_session()
        except VetShopError as e:
            logger.warning("Session fetch failed: %s", e)
            return None

    def _apply_future(self, token: CancelToken, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Session fetch raised %s: %s", type(exc).__name__, exc)
            self._apply_fetch(token, None)
            return
        self._apply_fetch(token, future.result())

    def _apply_fetch(self, token: CancelToken, session: Optional[Session]) -> None:
        if token.cancelled:
            logger.debug("Discarding session fetch that finished after unmount")
            return
        self.session = session
        self.loading = False
