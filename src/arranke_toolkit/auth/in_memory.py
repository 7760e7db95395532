from arranke_toolkit.auth.base import AuthProvider, Session, User
from arranke_toolkit.utils.notifications import Callback, ChangeNotifier, Subscription

_SESSION_KEY = "session"


class InMemoryAuthProvider(AuthProvider):
    """Provider whose session is switched explicitly with 'sign_in' / 'sign_out'."""

    def __init__(self, user: User | None = None) -> None:
        self._session = Session(user=user) if user else None
        self._notifier: ChangeNotifier[str, Session | None] = ChangeNotifier()

    async def get_current_session(self) -> Session | None:
        return self._session

    def on_session_change(self, callback: Callback[Session | None]) -> Subscription:
        return self._notifier.subscribe(_SESSION_KEY, callback)

    async def sign_in(self, user: User) -> Session:
        self._session = Session(user=user)
        await self._notifier.publish(_SESSION_KEY, self._session)
        return self._session

    async def sign_out(self) -> None:
        self._session = None
        await self._notifier.publish(_SESSION_KEY, None)
