"""
Transport-independent change notifications.

'ChangeNotifier' keeps a list of subscribers per key (for example a listing ID)
and fans published values out to them. Storage backends publish through it no
matter how the change reached them: a direct write in the in-memory backend,
a Supabase realtime payload, or a polling loop. Consumers only ever hold the
'Subscription' handle returned by 'subscribe' and call 'unsubscribe' when they
are done.

Callbacks may be plain functions or coroutine functions; awaitable results are
awaited in subscription order.
"""

import inspect
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

Callback = Callable[[T], Awaitable[None] | None]


class Subscription:
    """Handle returned by every 'subscribe'-style call. 'unsubscribe' is idempotent."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        if self._release is None:
            return
        release, self._release = self._release, None
        release()


class ChangeNotifier(Generic[K, T]):
    """Registry of callbacks keyed by the record they observe."""

    def __init__(self) -> None:
        self._subscribers: dict[K, list[Callback[T]]] = {}

    def subscribe(self, key: K, callback: Callback[T]) -> Subscription:
        self._subscribers.setdefault(key, []).append(callback)

        def release() -> None:
            callbacks = self._subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(key, None)

        return Subscription(release)

    def subscriber_count(self, key: K) -> int:
        return len(self._subscribers.get(key, []))

    async def publish(self, key: K, value: T) -> None:
        # Copy so callbacks may unsubscribe while being notified.
        for callback in list(self._subscribers.get(key, [])):
            try:
                result = callback(value)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Change subscriber for {key!r} failed")
