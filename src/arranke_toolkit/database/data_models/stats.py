"""
Aggregate statistics data model and storage interface.

Each listing owns one 'ListingStats' row holding denormalised counters. The
counters are only ever changed through named server-side procedures
('call_procedure'), which apply the change atomically. Clients must never
read a counter, add to it locally and write it back.

Concrete implementations: 'InMemoryStatsDatabase', 'SupabaseStatsDatabase'.
"""

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel, Field

from arranke_toolkit.utils.notifications import Callback, Subscription


class CounterProcedure(StrEnum):
    """Names of the atomic counter procedures exposed by the backend."""

    INCREMENT_LIKES = "increment_likes"
    DECREMENT_LIKES = "decrement_likes"
    INCREMENT_DISLIKES = "increment_dislikes"
    DECREMENT_DISLIKES = "decrement_dislikes"
    INCREMENT_VISITS = "increment_visits"
    INCREMENT_CLICKS = "increment_clicks"


class ListingStats(BaseModel):
    """The aggregate counter row of one listing. 'id' is the listing ID."""

    id: str
    likes_count: int = Field(default=0, ge=0)
    dislikes_count: int = Field(default=0, ge=0)
    visit_count: int = Field(default=0, ge=0)
    clicks_count: int = Field(default=0, ge=0)


class StatsDatabase(ABC):
    """Abstract repository for 'ListingStats' rows and their counter procedures."""

    @abstractmethod
    async def create_stats(self, stats: ListingStats) -> ListingStats:
        pass

    @abstractmethod
    async def get_stats(self, listing_id: str) -> ListingStats | None:
        """Return the aggregate row, or None when the listing has none yet."""
        pass

    @abstractmethod
    async def call_procedure(self, procedure: str, listing_id: str) -> None:
        """Run the named atomic counter procedure for 'listing_id'."""
        pass

    @abstractmethod
    async def subscribe_stats_changes(self, listing_id: str, callback: Callback[ListingStats]) -> Subscription:
        """Invoke 'callback' with the new row every time the listing's aggregate row changes."""
        pass
