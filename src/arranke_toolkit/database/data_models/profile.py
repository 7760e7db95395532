"""
Profile data model and storage interface.

Profiles carry the public-facing identity of a user (names, avatar) and the
'is_admin' flag that gates moderation.

Concrete implementations: 'InMemoryProfileDatabase', 'SupabaseProfileDatabase'.
"""

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel


class DisplayNamePreference(StrEnum):
    FULL_NAME = "full_name"
    USERNAME = "username"
    DEFAULT = "default"


class Profile(BaseModel):
    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    is_admin: bool = False
    display_name_preference: DisplayNamePreference = DisplayNamePreference.DEFAULT


class ProfileDatabase(ABC):
    """Abstract repository for 'Profile' records."""

    @abstractmethod
    async def get_profile(self, user_id: str) -> Profile | None:
        pass

    @abstractmethod
    async def upsert_profile(self, profile: Profile) -> Profile:
        pass
