"""
Supabase Auth implementation of 'AuthProvider'.

Supabase invokes auth-state listeners synchronously with '(event, session)';
the provider converts the Supabase session to the toolkit's 'Session' model and
schedules the (possibly async) subscribers on the running event loop.
"""

import asyncio
from typing import Any

from supabase import AsyncClient

from arranke_toolkit.auth.base import AuthProvider, Session, User
from arranke_toolkit.utils.notifications import Callback, ChangeNotifier, Subscription

_SESSION_KEY = "session"


def session_from_supabase(session: Any) -> Session | None:
    if session is None or session.user is None:
        return None
    metadata = session.user.user_metadata or {}
    return Session(
        user=User(id=session.user.id, email=session.user.email, username=metadata.get("username")),
        access_token=session.access_token,
    )


class SupabaseAuthProvider(AuthProvider):
    def __init__(self, client: AsyncClient) -> None:
        self.client = client
        self._notifier: ChangeNotifier[str, Session | None] = ChangeNotifier()
        self._auth_subscription: Any = None
        self._pending: set[asyncio.Task[None]] = set()

    async def get_current_session(self) -> Session | None:
        return session_from_supabase(await self.client.auth.get_session())

    def on_session_change(self, callback: Callback[Session | None]) -> Subscription:
        if self._auth_subscription is None:
            self._auth_subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)
        subscription = self._notifier.subscribe(_SESSION_KEY, callback)

        def release() -> None:
            subscription.unsubscribe()
            if self._notifier.subscriber_count(_SESSION_KEY) == 0 and self._auth_subscription is not None:
                self._auth_subscription.unsubscribe()
                self._auth_subscription = None

        return Subscription(release)

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        task = asyncio.ensure_future(self._notifier.publish(_SESSION_KEY, session_from_supabase(session)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
