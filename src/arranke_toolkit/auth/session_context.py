"""
Shared session state.

'SessionContext' is the single owner of "who is signed in". It subscribes to
one 'AuthProvider' for its whole lifetime and re-publishes every change to its
own listeners, so components that need the identity take a 'SessionContext'
argument instead of registering independent provider listeners.

    async with SessionContext(provider) as session:
        ledger = ReactionLedger(session, stats_db, vote_db, listing_id)
        ...
"""

from types import TracebackType

from loguru import logger

from arranke_toolkit.auth.base import AuthProvider, Session, User
from arranke_toolkit.utils.notifications import Callback, ChangeNotifier, Subscription

_USER_KEY = "user"


class SessionContext:
    """
    Holds the current session and notifies listeners when the signed-in user changes.

    Listeners receive the new 'User' (or None after sign-out). They are only
    notified when the user ID actually changes, not on token refreshes.
    """

    def __init__(self, auth_provider: AuthProvider) -> None:
        self.auth_provider = auth_provider
        self._session: Session | None = None
        self._provider_subscription: Subscription | None = None
        self._notifier: ChangeNotifier[str, User | None] = ChangeNotifier()

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def user(self) -> User | None:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    async def start(self) -> Session | None:
        """Read the current session and begin following provider changes."""
        if self._provider_subscription is None:
            self._provider_subscription = self.auth_provider.on_session_change(self._on_session_change)
        return await self.refresh()

    async def refresh(self) -> Session | None:
        """Re-read the session from the provider without notifying listeners."""
        self._session = await self.auth_provider.get_current_session()
        return self._session

    def subscribe(self, callback: Callback[User | None]) -> Subscription:
        return self._notifier.subscribe(_USER_KEY, callback)

    def close(self) -> None:
        if self._provider_subscription is not None:
            self._provider_subscription.unsubscribe()
            self._provider_subscription = None

    async def _on_session_change(self, session: Session | None) -> None:
        previous = self.user
        self._session = session
        current = self.user
        if (previous.id if previous else None) == (current.id if current else None):
            return
        logger.debug(f"Session user changed: {previous.id if previous else None} -> {current.id if current else None}")
        await self._notifier.publish(_USER_KEY, current)

    async def __aenter__(self) -> "SessionContext":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
