"""
Authentication provider abstractions.

An 'AuthProvider' answers two questions for the rest of the toolkit: who is
signed in right now ('get_current_session'), and when does that change
('on_session_change'). Components should not talk to a provider directly;
they receive a 'SessionContext' that wraps one provider and fans its changes
out to any number of listeners.

Concrete implementations: 'InMemoryAuthProvider', 'SupabaseAuthProvider'.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from arranke_toolkit.utils.notifications import Callback, Subscription


class User(BaseModel):
    """The signed-in identity. 'username' comes from the provider's user metadata when present."""

    id: str
    email: str | None = None
    username: str | None = None


class Session(BaseModel):
    user: User
    access_token: str | None = None


class AuthProvider(ABC):
    """Abstract base class for authentication backends."""

    @abstractmethod
    async def get_current_session(self) -> Session | None:
        """Return the active session, or None when nobody is signed in."""
        pass

    @abstractmethod
    def on_session_change(self, callback: Callback[Session | None]) -> Subscription:
        """Invoke 'callback' with the new session (or None) on every sign-in and sign-out."""
        pass
