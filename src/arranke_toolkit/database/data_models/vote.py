"""
Vote data model and storage interface.

A vote row records one user's current reaction to one listing. There is at
most one row per '(listing_id, user_id)' pair, and only that user's own
client ever writes it, so plain insert / update / delete are sufficient.

Concrete implementations: 'InMemoryVoteDatabase', 'SupabaseVoteDatabase'.
"""

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel


class VoteType(StrEnum):
    LIKE = "like"
    DISLIKE = "dislike"

    @property
    def opposite(self) -> "VoteType":
        return VoteType.DISLIKE if self is VoteType.LIKE else VoteType.LIKE


class Vote(BaseModel):
    """A user's reaction to a listing."""

    listing_id: str
    user_id: str
    vote_type: VoteType


class VoteDatabase(ABC):
    """Abstract repository for 'Vote' rows."""

    @abstractmethod
    async def get_vote(self, listing_id: str, user_id: str) -> Vote | None:
        pass

    @abstractmethod
    async def create_vote(self, vote: Vote) -> Vote:
        pass

    @abstractmethod
    async def update_vote(self, listing_id: str, user_id: str, vote_type: VoteType) -> Vote:
        pass

    @abstractmethod
    async def delete_vote(self, listing_id: str, user_id: str) -> bool:
        pass
