"""
Listing data model and storage interface.

A listing ("arranke") is a user-submitted project record. New listings start
out 'pending' and only become publicly visible once an administrator approves
them; 'review_timestamp' records when that decision was made.

Concrete implementations: 'InMemoryListingDatabase', 'SupabaseListingDatabase'.
"""

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel


class ListingStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Listing(BaseModel):
    """A project listing submitted by a user."""

    id: str
    name: str
    owner_id: str
    create_timestamp: int
    category: str | None = None
    description: str | None = None
    slogan: str | None = None
    url: str | None = None
    logo_url: str | None = None
    owner_name: str | None = None
    status: ListingStatus = ListingStatus.PENDING
    review_timestamp: int | None = None


class ListingDatabase(ABC):
    """Abstract repository for 'Listing' records."""

    @abstractmethod
    async def create_listing(self, listing: Listing) -> Listing:
        pass

    @abstractmethod
    async def get_listing_by_id(self, listing_id: str) -> Listing | None:
        pass

    @abstractmethod
    async def get_listing_by_name(self, name: str) -> Listing | None:
        pass

    @abstractmethod
    async def get_listings_by_owner(self, owner_id: str) -> list[Listing]:
        pass

    @abstractmethod
    async def get_listings_by_status(self, status: ListingStatus) -> list[Listing]:
        pass

    @abstractmethod
    async def update_listing(self, listing: Listing) -> Listing:
        pass

    @abstractmethod
    async def delete_listing(self, listing_id: str) -> bool:
        pass
