"""
Application-local mirror of the auth provider's session.

``AuthStateHolder`` owns the only shared mutable auth state. It is mutated
solely by its own ``mount()`` routine and by the provider's session-change
callback; dependents read it and subscribe with ``add_listener``.

Lifecycle:
    1. ``mount()`` fetches the current session once. Success or failure, it
       then marks the holder initialized and not loading (once per mount).
       A failed fetch degrades to "no user".
    2. It subscribes to provider notifications for the rest of the mount.
    3. ``unmount()`` unsubscribes; notifications that arrive late are dropped.
"""

import inspect
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Protocol, Union

from loguru import logger

AuthChangeCallback = Callable[[str, Optional["AuthSession"]], None]
Unsubscribe = Callable[[], None]
RedirectCallback = Callable[[str], Union[None, Awaitable[None]]]
StateListener = Callable[["AuthStateHolder"], None]

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthUser:
    id: int
    email: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user: AuthUser
    expires_at: Optional[datetime] = None


class AuthProvider(Protocol):
    """What the holder needs from an auth backend."""

    async def get_session(self) -> Optional[AuthSession]:
        ...

    def on_auth_state_change(self, callback: AuthChangeCallback) -> Unsubscribe:
        ...

    async def sign_out(self) -> None:
        ...


class AuthStateHolder:
    """Mirror of the provider session with a loading/initialized lifecycle."""

    def __init__(
        self,
        provider: AuthProvider,
        redirect: Optional[RedirectCallback] = None,
        login_route: str = "/login",
    ):
        self._provider = provider
        self._redirect = redirect
        self.login_route = login_route

        self.user: Optional[AuthUser] = None
        self.session: Optional[AuthSession] = None
        self.loading = True
        self.auth_initialized = False

        self._mounted = False
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: List[StateListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def mounted(self) -> bool:
        return self._mounted

    def add_listener(self, listener: StateListener) -> Unsubscribe:
        """Register a callback invoked after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Auth state listener failed")

    def _apply_session(self, session: Optional[AuthSession]) -> None:
        self.session = session
        self.user = session.user if session else None

    async def mount(self) -> None:
        """Fetch the session once, settle the lifecycle flags, then subscribe."""
        if self._mounted:
            return
        self._mounted = True
        self.loading = True
        self.auth_initialized = False

        session: Optional[AuthSession] = None
        try:
            session = await self._provider.get_session()
        except Exception as e:
            logger.error(f"Initial session fetch failed, continuing unauthenticated: {e}")
            session = None

        if not self._mounted:
            # Torn down while the fetch was in flight
            return

        self._apply_session(session)
        self.auth_initialized = True
        self.loading = False
        self._notify()

        self._unsubscribe = self._provider.on_auth_state_change(self._on_auth_change)

    def _on_auth_change(self, event: str, session: Optional[AuthSession]) -> None:
        if not self._mounted:
            logger.debug(f"Dropping auth event {event} after unmount")
            return
        logger.debug(f"Auth state change: {event}")
        self._apply_session(session)
        self._notify()

    def unmount(self) -> None:
        """Stop receiving provider notifications."""
        self._mounted = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def logout(self) -> None:
        """
        Clear local state, sign out with the provider, redirect to login.

        Provider failures are logged and ignored; there is no retry.
        """
        self._apply_session(None)
        self._notify()

        try:
            await self._provider.sign_out()
        except Exception as e:
            logger.error(f"Sign-out failed: {e}")

        if self._redirect is not None:
            result = self._redirect(self.login_route)
            if inspect.isawaitable(result):
                await result

    def redirect_target(self) -> Optional[str]:
        """Routing gate: the login route once initialized without a user, else None."""
        if self.loading or not self.auth_initialized:
            return None
        if self.user is None:
            return self.login_route
        return None
