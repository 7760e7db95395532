"""
Supabase-backed repository implementations.

All four repositories share one 'supabase.AsyncClient'. Table and procedure
names match the hosted arranke schema: listings live in 'arrankes', counters
in 'arrankes_stats', votes in 'user_votes', profiles in 'profiles'. Counter
procedures take a single 'arranke_id' argument.

Aggregate-row changes arrive over Supabase realtime ('postgres_changes' UPDATE
events on 'arrankes_stats', one channel per listing) and are re-published
through a 'ChangeNotifier', so consumers see the same 'Subscription' contract
as with the in-memory backend.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any

from loguru import logger
from supabase import AsyncClient

from arranke_toolkit.database.data_models.listing import Listing, ListingDatabase, ListingStatus
from arranke_toolkit.database.data_models.profile import Profile, ProfileDatabase
from arranke_toolkit.database.data_models.stats import ListingStats, StatsDatabase
from arranke_toolkit.database.data_models.vote import Vote, VoteDatabase, VoteType
from arranke_toolkit.utils.notifications import Callback, ChangeNotifier, Subscription

LISTINGS_TABLE = "arrankes"
STATS_TABLE = "arrankes_stats"
VOTES_TABLE = "user_votes"
PROFILES_TABLE = "profiles"


def _single_row(response: Any) -> dict[str, Any] | None:
    # 'maybe_single' yields None or an empty payload depending on the client version.
    if response is None or not response.data:
        return None
    return response.data


def _to_iso(timestamp: int | None) -> str | None:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).isoformat()


def _from_iso(value: str | None) -> int | None:
    if not value:
        return None
    return int(datetime.fromisoformat(value).timestamp() * 1000)


def stats_from_row(row: dict[str, Any]) -> ListingStats:
    return ListingStats(
        id=str(row["id"]),
        likes_count=row.get("likes_count") or 0,
        dislikes_count=row.get("dislikes_count") or 0,
        visit_count=row.get("visit_count") or 0,
        clicks_count=row.get("clicks_count") or 0,
    )


def record_from_payload(payload: dict[str, Any]) -> dict[str, Any] | None:
    """Extract the new row from a realtime 'postgres_changes' payload."""
    data = payload.get("data", payload)
    return data.get("record") or data.get("new")


def profile_from_row(row: dict[str, Any]) -> Profile:
    # Nullable columns fall back to the model defaults.
    return Profile.model_validate({key: value for key, value in row.items() if value is not None})


def listing_from_row(row: dict[str, Any]) -> Listing:
    return Listing(
        id=str(row["id"]),
        name=row["arranke_name"],
        owner_id=row["owner_id"],
        create_timestamp=_from_iso(row.get("submission_date") or row.get("created_at")) or 0,
        category=row.get("arranke_category"),
        description=row.get("arranke_description"),
        slogan=row.get("arranke_slogan"),
        url=row.get("arranke_url"),
        logo_url=row.get("logo_url"),
        owner_name=row.get("owner_name"),
        status=ListingStatus(row.get("status") or ListingStatus.PENDING),
        review_timestamp=_from_iso(row.get("approval_date")),
    )


def listing_to_row(listing: Listing) -> dict[str, Any]:
    return {
        "id": listing.id,
        "arranke_name": listing.name,
        "owner_id": listing.owner_id,
        "submission_date": _to_iso(listing.create_timestamp),
        "arranke_category": listing.category,
        "arranke_description": listing.description,
        "arranke_slogan": listing.slogan,
        "arranke_url": listing.url,
        "logo_url": listing.logo_url,
        "owner_name": listing.owner_name,
        "status": str(listing.status),
        "approval_date": _to_iso(listing.review_timestamp),
    }


class SupabaseStatsDatabase(StatsDatabase):
    def __init__(self, client: AsyncClient) -> None:
        self.client = client
        self._notifier: ChangeNotifier[str, ListingStats] = ChangeNotifier()
        self._channels: dict[str, Any] = {}
        self._pending: set[asyncio.Task[None]] = set()

    async def create_stats(self, stats: ListingStats) -> ListingStats:
        response = await self.client.table(STATS_TABLE).insert(stats.model_dump()).execute()
        return stats_from_row(response.data[0])

    async def get_stats(self, listing_id: str) -> ListingStats | None:
        response = await (
            self.client.table(STATS_TABLE)
            .select("id, likes_count, dislikes_count, visit_count, clicks_count")
            .eq("id", listing_id)
            .maybe_single()
            .execute()
        )
        row = _single_row(response)
        return stats_from_row(row) if row else None

    async def call_procedure(self, procedure: str, listing_id: str) -> None:
        await self.client.rpc(procedure, {"arranke_id": listing_id}).execute()

    async def subscribe_stats_changes(self, listing_id: str, callback: Callback[ListingStats]) -> Subscription:
        subscription = self._notifier.subscribe(listing_id, callback)
        if listing_id not in self._channels:
            channel = self.client.channel(f"{STATS_TABLE}:id=eq.{listing_id}")
            channel.on_postgres_changes(
                "UPDATE",
                schema="public",
                table=STATS_TABLE,
                filter=f"id=eq.{listing_id}",
                callback=lambda payload: self._on_change(listing_id, payload),
            )
            # Registered before the await: one channel per listing, even for concurrent subscribers.
            self._channels[listing_id] = channel
            try:
                await channel.subscribe()
            except Exception:
                self._channels.pop(listing_id, None)
                subscription.unsubscribe()
                raise
            logger.debug(f"Subscribed to realtime changes of {STATS_TABLE} row {listing_id}")

        def release() -> None:
            subscription.unsubscribe()
            if self._notifier.subscriber_count(listing_id) == 0 and listing_id in self._channels:
                self._schedule(self.client.remove_channel(self._channels.pop(listing_id)))

        return Subscription(release)

    def _on_change(self, listing_id: str, payload: dict[str, Any]) -> None:
        record = record_from_payload(payload)
        if not record:
            logger.warning(f"Realtime payload for {listing_id} carried no record")
            return
        self._schedule(self._notifier.publish(listing_id, stats_from_row(record)))

    def _schedule(self, coroutine: Any) -> None:
        task = asyncio.ensure_future(coroutine)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


class SupabaseVoteDatabase(VoteDatabase):
    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def get_vote(self, listing_id: str, user_id: str) -> Vote | None:
        response = await (
            self.client.table(VOTES_TABLE)
            .select("vote_type")
            .eq("arranke_id", listing_id)
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        row = _single_row(response)
        if not row:
            return None
        return Vote(listing_id=listing_id, user_id=user_id, vote_type=VoteType(row["vote_type"]))

    async def create_vote(self, vote: Vote) -> Vote:
        await (
            self.client.table(VOTES_TABLE)
            .insert({"arranke_id": vote.listing_id, "user_id": vote.user_id, "vote_type": str(vote.vote_type)})
            .execute()
        )
        return vote

    async def update_vote(self, listing_id: str, user_id: str, vote_type: VoteType) -> Vote:
        await (
            self.client.table(VOTES_TABLE)
            .update({"vote_type": str(vote_type)})
            .eq("arranke_id", listing_id)
            .eq("user_id", user_id)
            .execute()
        )
        return Vote(listing_id=listing_id, user_id=user_id, vote_type=vote_type)

    async def delete_vote(self, listing_id: str, user_id: str) -> bool:
        response = await (
            self.client.table(VOTES_TABLE).delete().eq("arranke_id", listing_id).eq("user_id", user_id).execute()
        )
        return bool(response.data)


class SupabaseListingDatabase(ListingDatabase):
    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def create_listing(self, listing: Listing) -> Listing:
        response = await self.client.table(LISTINGS_TABLE).insert(listing_to_row(listing)).execute()
        return listing_from_row(response.data[0])

    async def get_listing_by_id(self, listing_id: str) -> Listing | None:
        response = await self.client.table(LISTINGS_TABLE).select("*").eq("id", listing_id).maybe_single().execute()
        row = _single_row(response)
        return listing_from_row(row) if row else None

    async def get_listing_by_name(self, name: str) -> Listing | None:
        response = await (
            self.client.table(LISTINGS_TABLE).select("*").eq("arranke_name", name).maybe_single().execute()
        )
        row = _single_row(response)
        return listing_from_row(row) if row else None

    async def get_listings_by_owner(self, owner_id: str) -> list[Listing]:
        response = await self.client.table(LISTINGS_TABLE).select("*").eq("owner_id", owner_id).execute()
        return [listing_from_row(row) for row in response.data]

    async def get_listings_by_status(self, status: ListingStatus) -> list[Listing]:
        response = await (
            self.client.table(LISTINGS_TABLE)
            .select("*")
            .eq("status", str(status))
            .order("submission_date", desc=False)
            .execute()
        )
        return [listing_from_row(row) for row in response.data]

    async def update_listing(self, listing: Listing) -> Listing:
        row = listing_to_row(listing)
        row.pop("id")
        response = await self.client.table(LISTINGS_TABLE).update(row).eq("id", listing.id).execute()
        if not response.data:
            raise ValueError(f"Listing with id {listing.id} not found")
        return listing_from_row(response.data[0])

    async def delete_listing(self, listing_id: str) -> bool:
        response = await self.client.table(LISTINGS_TABLE).delete().eq("id", listing_id).execute()
        return bool(response.data)


class SupabaseProfileDatabase(ProfileDatabase):
    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def get_profile(self, user_id: str) -> Profile | None:
        response = await self.client.table(PROFILES_TABLE).select("*").eq("id", user_id).maybe_single().execute()
        row = _single_row(response)
        return profile_from_row(row) if row else None

    async def upsert_profile(self, profile: Profile) -> Profile:
        response = await self.client.table(PROFILES_TABLE).upsert(profile.model_dump(mode="json")).execute()
        return profile_from_row(response.data[0])
