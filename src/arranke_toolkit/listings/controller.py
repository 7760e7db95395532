"""
Listing controller (Facade).

'ListingController' coordinates the listing, stats and profile repositories
and the object store for everything around a listing except reactions:
submission with logo upload, public lookup with visit and click tracking,
owner views, admin moderation, and avatar replacement.

Visit and click tracking are best effort: a failing counter procedure is
logged and never fails the request that triggered it. Moderation and deletion
check permissions and raise 'PermissionError' when they do not hold.
"""

from loguru import logger
from pydantic import BaseModel

from arranke_toolkit.auth.base import User
from arranke_toolkit.database.data_models.listing import Listing, ListingDatabase, ListingStatus
from arranke_toolkit.database.data_models.profile import Profile, ProfileDatabase
from arranke_toolkit.database.data_models.stats import CounterProcedure, ListingStats, StatsDatabase
from arranke_toolkit.listings.display_name import get_display_name
from arranke_toolkit.storage.base import (
    AVATARS_BUCKET,
    LOGOS_BUCKET,
    ObjectStore,
    build_object_path,
    path_from_public_url,
)
from arranke_toolkit.utils.database import generate_uid
from arranke_toolkit.utils.time import get_current_timestamp


class ListingInput(BaseModel):
    name: str
    category: str | None = None
    description: str | None = None
    slogan: str | None = None
    url: str | None = None


class ListingWithStats(Listing):
    stats: ListingStats


def filter_listings(listings: list[Listing], search: str | None = None, category: str | None = None) -> list[Listing]:
    """Case-insensitive search over name and description, plus an exact category match."""
    if search:
        needle = search.lower()
        listings = [
            listing
            for listing in listings
            if needle in listing.name.lower() or needle in (listing.description or "").lower()
        ]
    if category:
        listings = [listing for listing in listings if listing.category == category]
    return listings


class ListingController:
    def __init__(
        self,
        listing_db: ListingDatabase,
        stats_db: StatsDatabase,
        profile_db: ProfileDatabase,
        object_store: ObjectStore,
    ):
        self.listing_db = listing_db
        self.stats_db = stats_db
        self.profile_db = profile_db
        self.object_store = object_store

    async def create_listing(
        self,
        listing_input: ListingInput,
        owner: User,
        logo: bytes | None = None,
        logo_filename: str | None = None,
        logo_content_type: str | None = None,
    ) -> Listing:
        if not listing_input.name.strip():
            raise ValueError("Listing name must not be empty")

        name = listing_input.name.strip()
        if await self.listing_db.get_listing_by_name(name) is not None:
            raise ValueError(f"A listing named {name!r} already exists")

        logo_path = None
        logo_url = None
        if logo is not None:
            logo_path = build_object_path(owner.id, logo_filename or "logo")
            logo_url = await self.object_store.upload(LOGOS_BUCKET, logo_path, logo, logo_content_type)

        try:
            listing = await self.listing_db.create_listing(
                Listing(
                    id=generate_uid(),
                    name=name,
                    owner_id=owner.id,
                    owner_name=owner.username,
                    create_timestamp=get_current_timestamp(),
                    category=listing_input.category,
                    description=listing_input.description,
                    slogan=listing_input.slogan,
                    url=listing_input.url,
                    logo_url=logo_url,
                )
            )
        except Exception:
            if logo_path is not None:
                await self._remove_logo(logo_path)
            raise
        await self.stats_db.create_stats(ListingStats(id=listing.id))
        logger.info(f"Listing {listing.name!r} submitted by {owner.id}, awaiting review")
        return listing

    async def get_listing_by_name(self, name: str, record_visit: bool = True) -> ListingWithStats | None:
        listing = await self.listing_db.get_listing_by_name(name)
        if listing is None:
            return None

        try:
            stats = await self.stats_db.get_stats(listing.id)
        except Exception as exc:
            logger.error(f"Error fetching stats for listing {listing.id}: {exc}")
            stats = None

        if record_visit:
            await self._increment(CounterProcedure.INCREMENT_VISITS, listing.id)
        return ListingWithStats(**listing.model_dump(), stats=stats or ListingStats(id=listing.id))

    async def record_click(self, listing_id: str) -> None:
        await self._increment(CounterProcedure.INCREMENT_CLICKS, listing_id)

    async def get_listings_by_owner(self, owner_id: str) -> list[Listing]:
        return await self.listing_db.get_listings_by_owner(owner_id)

    async def get_approved_listings(self, search: str | None = None, category: str | None = None) -> list[Listing]:
        listings = await self.listing_db.get_listings_by_status(ListingStatus.APPROVED)
        return filter_listings(listings, search, category)

    async def get_owner_display_name(self, listing: Listing) -> str:
        profile = await self.profile_db.get_profile(listing.owner_id)
        if profile is None:
            return get_display_name(listing.owner_name, None)
        return get_display_name(
            profile.full_name or listing.owner_name, profile.username, profile.display_name_preference
        )

    async def get_pending_listings(
        self, admin_id: str, search: str | None = None, category: str | None = None
    ) -> list[Listing]:
        await self._require_admin(admin_id)
        listings = await self.listing_db.get_listings_by_status(ListingStatus.PENDING)
        return sorted(filter_listings(listings, search, category), key=lambda listing: listing.create_timestamp)

    async def approve_listing(self, listing_id: str, admin_id: str) -> Listing:
        return await self._review(listing_id, admin_id, ListingStatus.APPROVED)

    async def reject_listing(self, listing_id: str, admin_id: str) -> Listing:
        return await self._review(listing_id, admin_id, ListingStatus.REJECTED)

    async def delete_listing(self, listing_id: str, owner_id: str) -> bool:
        listing = await self.listing_db.get_listing_by_id(listing_id)
        if listing is None:
            raise ValueError(f"Listing with id {listing_id} not found")
        if listing.owner_id != owner_id:
            raise PermissionError(f"User {owner_id} does not own listing {listing_id}")
        return await self.listing_db.delete_listing(listing_id)

    async def update_avatar(
        self, user_id: str, data: bytes, filename: str, content_type: str | None = None
    ) -> Profile:
        profile = await self.profile_db.get_profile(user_id) or Profile(id=user_id)

        old_path = path_from_public_url(AVATARS_BUCKET, profile.avatar_url) if profile.avatar_url else None
        if old_path:
            try:
                await self.object_store.remove(AVATARS_BUCKET, [old_path])
            except Exception as exc:
                logger.warning(f"Could not delete old avatar {old_path}: {exc}")

        avatar_url = await self.object_store.upload(
            AVATARS_BUCKET, build_object_path(user_id, filename), data, content_type
        )
        return await self.profile_db.upsert_profile(profile.model_copy(update={"avatar_url": avatar_url}))

    async def _review(self, listing_id: str, admin_id: str, status: ListingStatus) -> Listing:
        await self._require_admin(admin_id)
        listing = await self.listing_db.get_listing_by_id(listing_id)
        if listing is None:
            raise ValueError(f"Listing with id {listing_id} not found")
        reviewed = await self.listing_db.update_listing(
            listing.model_copy(update={"status": status, "review_timestamp": get_current_timestamp()})
        )
        logger.info(f"Listing {listing_id} {status} by {admin_id}")
        return reviewed

    async def _require_admin(self, user_id: str) -> None:
        profile = await self.profile_db.get_profile(user_id)
        if profile is None or not profile.is_admin:
            raise PermissionError(f"User {user_id} is not an administrator")

    async def _remove_logo(self, path: str) -> None:
        try:
            await self.object_store.remove(LOGOS_BUCKET, [path])
        except Exception as exc:
            logger.warning(f"Could not delete orphaned logo {path}: {exc}")

    async def _increment(self, procedure: CounterProcedure, listing_id: str) -> None:
        try:
            await self.stats_db.call_procedure(procedure, listing_id)
        except Exception as exc:
            logger.error(f"Error calling {procedure} for listing {listing_id}: {exc}")
