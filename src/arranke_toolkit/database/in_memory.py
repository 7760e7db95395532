"""
In-memory repository implementations.

These back the test-suite and the demo's default 'memory' backend. Every call
awaits 'asyncio.sleep(latency)' before touching state, so with a non-zero (or
even zero) latency concurrent clients interleave at each call the way they
would against a remote store. 'calls' records the name of every operation in
the order it ran, which lets tests assert which remote capabilities were used.
"""

import asyncio

from loguru import logger

from arranke_toolkit.database.data_models.listing import Listing, ListingDatabase, ListingStatus
from arranke_toolkit.database.data_models.profile import Profile, ProfileDatabase
from arranke_toolkit.database.data_models.stats import CounterProcedure, ListingStats, StatsDatabase
from arranke_toolkit.database.data_models.vote import Vote, VoteDatabase, VoteType
from arranke_toolkit.utils.notifications import Callback, ChangeNotifier, Subscription

# procedure name -> (counter field, delta)
PROCEDURE_EFFECTS: dict[str, tuple[str, int]] = {
    CounterProcedure.INCREMENT_LIKES: ("likes_count", 1),
    CounterProcedure.DECREMENT_LIKES: ("likes_count", -1),
    CounterProcedure.INCREMENT_DISLIKES: ("dislikes_count", 1),
    CounterProcedure.DECREMENT_DISLIKES: ("dislikes_count", -1),
    CounterProcedure.INCREMENT_VISITS: ("visit_count", 1),
    CounterProcedure.INCREMENT_CLICKS: ("clicks_count", 1),
}


class _InMemoryRepository:
    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self.calls: list[str] = []

    async def _remote(self, name: str) -> None:
        self.calls.append(name)
        await asyncio.sleep(self.latency)


class InMemoryStatsDatabase(_InMemoryRepository, StatsDatabase):
    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self.rows: dict[str, ListingStats] = {}
        self._notifier: ChangeNotifier[str, ListingStats] = ChangeNotifier()

    async def create_stats(self, stats: ListingStats) -> ListingStats:
        await self._remote("create_stats")
        if stats.id in self.rows:
            raise ValueError(f"Stats for listing {stats.id} already exist")
        self.rows[stats.id] = stats.model_copy()
        return stats

    async def get_stats(self, listing_id: str) -> ListingStats | None:
        await self._remote("get_stats")
        row = self.rows.get(listing_id)
        return row.model_copy() if row else None

    async def call_procedure(self, procedure: str, listing_id: str) -> None:
        await self._remote(procedure)
        if procedure not in PROCEDURE_EFFECTS:
            raise ValueError(f"Unknown counter procedure {procedure!r}")
        row = self.rows.get(listing_id)
        if row is None:
            raise ValueError(f"Stats for listing {listing_id} not found")
        field, delta = PROCEDURE_EFFECTS[procedure]
        value = getattr(row, field) + delta
        if value < 0:
            logger.warning(f"{procedure} would take {field} of {listing_id} below zero, clamping")
            value = 0
        updated = row.model_copy(update={field: value})
        self.rows[listing_id] = updated
        await self._notifier.publish(listing_id, updated.model_copy())

    async def subscribe_stats_changes(self, listing_id: str, callback: Callback[ListingStats]) -> Subscription:
        return self._notifier.subscribe(listing_id, callback)

    def subscriber_count(self, listing_id: str) -> int:
        return self._notifier.subscriber_count(listing_id)

    async def push_stats(self, stats: ListingStats) -> None:
        """Overwrite a row as another writer would and notify subscribers."""
        self.rows[stats.id] = stats.model_copy()
        await self._notifier.publish(stats.id, stats.model_copy())


class InMemoryVoteDatabase(_InMemoryRepository, VoteDatabase):
    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self.rows: dict[tuple[str, str], Vote] = {}

    async def get_vote(self, listing_id: str, user_id: str) -> Vote | None:
        await self._remote("get_vote")
        return self.rows.get((listing_id, user_id))

    async def create_vote(self, vote: Vote) -> Vote:
        await self._remote("create_vote")
        key = (vote.listing_id, vote.user_id)
        if key in self.rows:
            raise ValueError(f"User {vote.user_id} already voted on listing {vote.listing_id}")
        self.rows[key] = vote
        return vote

    async def update_vote(self, listing_id: str, user_id: str, vote_type: VoteType) -> Vote:
        await self._remote("update_vote")
        key = (listing_id, user_id)
        if key not in self.rows:
            raise ValueError(f"No vote by user {user_id} on listing {listing_id}")
        vote = Vote(listing_id=listing_id, user_id=user_id, vote_type=vote_type)
        self.rows[key] = vote
        return vote

    async def delete_vote(self, listing_id: str, user_id: str) -> bool:
        await self._remote("delete_vote")
        return self.rows.pop((listing_id, user_id), None) is not None


class InMemoryListingDatabase(_InMemoryRepository, ListingDatabase):
    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self.rows: dict[str, Listing] = {}

    async def create_listing(self, listing: Listing) -> Listing:
        await self._remote("create_listing")
        if any(existing.name == listing.name for existing in self.rows.values()):
            raise ValueError(f"A listing named {listing.name!r} already exists")
        self.rows[listing.id] = listing
        return listing

    async def get_listing_by_id(self, listing_id: str) -> Listing | None:
        await self._remote("get_listing_by_id")
        return self.rows.get(listing_id)

    async def get_listing_by_name(self, name: str) -> Listing | None:
        await self._remote("get_listing_by_name")
        return next((listing for listing in self.rows.values() if listing.name == name), None)

    async def get_listings_by_owner(self, owner_id: str) -> list[Listing]:
        await self._remote("get_listings_by_owner")
        return [listing for listing in self.rows.values() if listing.owner_id == owner_id]

    async def get_listings_by_status(self, status: ListingStatus) -> list[Listing]:
        await self._remote("get_listings_by_status")
        return [listing for listing in self.rows.values() if listing.status == status]

    async def update_listing(self, listing: Listing) -> Listing:
        await self._remote("update_listing")
        if listing.id not in self.rows:
            raise ValueError(f"Listing with id {listing.id} not found")
        self.rows[listing.id] = listing
        return listing

    async def delete_listing(self, listing_id: str) -> bool:
        await self._remote("delete_listing")
        return self.rows.pop(listing_id, None) is not None


class InMemoryProfileDatabase(_InMemoryRepository, ProfileDatabase):
    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self.rows: dict[str, Profile] = {}

    async def get_profile(self, user_id: str) -> Profile | None:
        await self._remote("get_profile")
        return self.rows.get(user_id)

    async def upsert_profile(self, profile: Profile) -> Profile:
        await self._remote("upsert_profile")
        self.rows[profile.id] = profile
        return profile
