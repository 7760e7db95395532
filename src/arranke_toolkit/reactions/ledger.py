"""
Like/dislike bookkeeping for a single listing.

'ReactionLedger' is the state behind one like/dislike widget. It mirrors the
listing's aggregate counters and the signed-in user's own vote, and mutates
both through the backend:

    ledger = ReactionLedger(session, stats_db, vote_db, listing_id, initial_likes=10)
    await ledger.initialize()
    await ledger.like()
    ...
    ledger.teardown()

Consistency model: local counters are last-write-wins between push
notifications and the re-read that follows every mutation. They are never
incremented locally, because other clients may be calling the same counter
procedures concurrently.

Failures of backend calls are logged and end the current operation without
raising. Earlier steps of the same click are not rolled back, so a failed
switch (decrement succeeded, increment failed) leaves the aggregate row one
vote short until the next correct write. Once the counters and the vote row
were written, the local vote follows the row even if the re-read fails.
Results are dropped when the ledger was torn down or the signed-in user
changed while the call was in flight.
"""

import asyncio

from loguru import logger
from pydantic import BaseModel, Field

from arranke_toolkit.auth.base import User
from arranke_toolkit.auth.session_context import SessionContext
from arranke_toolkit.database.data_models.stats import ListingStats, StatsDatabase
from arranke_toolkit.database.data_models.vote import Vote, VoteDatabase, VoteType
from arranke_toolkit.reactions.counters import ReactionCounters, VoteChoice, VoteRowAction, VoteTransition
from arranke_toolkit.utils.notifications import Subscription

LOGIN_PROMPT_SECONDS = 3.0


class ReactionState(BaseModel):
    """Snapshot of what a reaction widget displays."""

    listing_id: str
    likes: int = Field(default=0, ge=0)
    dislikes: int = Field(default=0, ge=0)
    current_user_vote: VoteChoice = VoteChoice.NONE


class ReactionLedger:
    """
    Per-listing reaction state kept in sync with the backend.

    Attributes:
        busy: True while a like/dislike is in flight. Further clicks are ignored meanwhile.
        login_prompt_visible: True for 'login_prompt_seconds' after an anonymous click.
    """

    def __init__(
        self,
        session: SessionContext,
        stats_db: StatsDatabase,
        vote_db: VoteDatabase,
        listing_id: str,
        initial_likes: int = 0,
        initial_dislikes: int = 0,
        counters: ReactionCounters | None = None,
        login_prompt_seconds: float = LOGIN_PROMPT_SECONDS,
    ) -> None:
        self.session = session
        self.stats_db = stats_db
        self.vote_db = vote_db
        self.listing_id = listing_id
        self.initial_likes = initial_likes
        self.initial_dislikes = initial_dislikes
        self.counters = counters or ReactionCounters(stats_db)
        self.login_prompt_seconds = login_prompt_seconds

        self.busy = False
        self.login_prompt_visible = False
        self._state = ReactionState(listing_id=listing_id, likes=initial_likes, dislikes=initial_dislikes)
        self._subscriptions: list[Subscription] = []
        self._prompt_timer: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def state(self) -> ReactionState:
        return self._state.model_copy()

    @property
    def closed(self) -> bool:
        return self._closed

    async def initialize(self) -> ReactionState:
        """Load counters and the user's vote, then follow pushed counter changes."""
        self._track(await self._subscribe_stats())
        self._track(self.session.subscribe(self._on_user_change))

        try:
            await self.session.refresh()
        except Exception as exc:
            logger.error(f"Error resolving session for listing {self.listing_id}: {exc}")

        try:
            stats = await self.stats_db.get_stats(self.listing_id)
        except Exception as exc:
            logger.error(f"Error fetching stats for listing {self.listing_id}: {exc}")
            stats = None
        if self._closed:
            return self.state
        if stats is None:
            self._state.likes = self.initial_likes
            self._state.dislikes = self.initial_dislikes
        else:
            self._state.likes = stats.likes_count
            self._state.dislikes = stats.dislikes_count

        user = self.session.user
        if user is not None:
            await self._load_user_vote(user)
        return self.state

    async def like(self) -> None:
        await self._react(VoteType.LIKE)

    async def dislike(self) -> None:
        await self._react(VoteType.DISLIKE)

    def teardown(self) -> None:
        """Release subscriptions. Results of calls still in flight are dropped."""
        self._closed = True
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        self._hide_login_prompt()

    async def _react(self, requested: VoteType) -> None:
        if self._closed:
            return
        user = self.session.user
        if user is None:
            self._show_login_prompt()
            return
        if self.busy:
            logger.debug(f"Ignoring {requested} on listing {self.listing_id}: a vote is already in flight")
            return

        self.busy = True
        try:
            await self._apply(user, self.counters.plan(self._state.current_user_vote, requested))
        except Exception:
            logger.exception(f"Error applying {requested} on listing {self.listing_id}")
        finally:
            self.busy = False

    async def _apply(self, user: User, transition: VoteTransition) -> None:
        if not await self.counters.apply(self.listing_id, transition):
            return
        await self._write_vote_row(user, transition)
        stats = await self.counters.reread(self.listing_id)
        if self._closed:
            return
        current = self.session.user
        if current is None or current.id != user.id:
            logger.debug(f"Dropping {transition.requested} result on listing {self.listing_id}: session changed")
            return
        if stats is not None:
            for vote_type in transition.reread:
                if vote_type == VoteType.LIKE:
                    self._state.likes = stats.likes_count
                else:
                    self._state.dislikes = stats.dislikes_count
        self._state.current_user_vote = transition.next_vote
        logger.debug(f"Listing {self.listing_id}: {user.id} now votes {transition.next_vote}")

    async def _write_vote_row(self, user: User, transition: VoteTransition) -> None:
        try:
            match transition.vote_action:
                case VoteRowAction.INSERT:
                    await self.vote_db.create_vote(
                        Vote(listing_id=self.listing_id, user_id=user.id, vote_type=transition.requested)
                    )
                case VoteRowAction.UPDATE:
                    await self.vote_db.update_vote(self.listing_id, user.id, transition.requested)
                case VoteRowAction.DELETE:
                    await self.vote_db.delete_vote(self.listing_id, user.id)
        except Exception as exc:
            logger.error(f"Error on {transition.vote_action} of vote row ({self.listing_id}, {user.id}): {exc}")

    async def _load_user_vote(self, user: User) -> None:
        try:
            vote = await self.vote_db.get_vote(self.listing_id, user.id)
        except Exception as exc:
            logger.error(f"Error fetching vote of {user.id} on listing {self.listing_id}: {exc}")
            return
        if not self._closed:
            self._state.current_user_vote = VoteChoice.from_vote_type(vote.vote_type if vote else None)

    async def _subscribe_stats(self) -> Subscription | None:
        try:
            return await self.stats_db.subscribe_stats_changes(self.listing_id, self._on_stats_change)
        except Exception as exc:
            logger.error(f"Error subscribing to stats of listing {self.listing_id}: {exc}")
            return None

    def _track(self, subscription: Subscription | None) -> None:
        if subscription is None:
            return
        if self._closed:
            subscription.unsubscribe()
        else:
            self._subscriptions.append(subscription)

    def _on_stats_change(self, stats: ListingStats) -> None:
        if self.closed:
            return
        self._state.likes = stats.likes_count
        self._state.dislikes = stats.dislikes_count

    async def _on_user_change(self, user: User | None) -> None:
        if self._closed:
            return
        if user is None:
            self._state.current_user_vote = VoteChoice.NONE
            return
        await self._load_user_vote(user)

    def _show_login_prompt(self) -> None:
        self._hide_login_prompt()
        self.login_prompt_visible = True
        self._prompt_timer = asyncio.get_running_loop().call_later(self.login_prompt_seconds, self._hide_login_prompt)

    def _hide_login_prompt(self) -> None:
        if self._prompt_timer is not None:
            self._prompt_timer.cancel()
            self._prompt_timer = None
        self.login_prompt_visible = False
