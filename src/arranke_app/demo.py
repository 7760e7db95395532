"""
End-to-end walkthrough of the arranke toolkit.

Each stage is an independent function so it can be run and inspected on its
own. loguru logs the intermediate state at every stage.

Usage
-----
Run against the in-memory backend (no network, seeded with demo data):

    python -m arranke_app.demo

Run against a hosted Supabase project:

    BACKEND=supabase SUPABASE_URL=... SUPABASE_KEY=... \\
    DEMO_EMAIL=... DEMO_PASSWORD=... LISTING_NAME=my-project \\
    python -m arranke_app.demo

Steps at a glance
-----------------
1  build_backend()          Instantiate repositories, auth and storage.
2  step2_seed_listing()     (memory only) Submit and approve a demo listing.
3  step3_open_ledger()      Look the listing up and mount a reaction ledger.
4  step4_vote()             Like, switch to dislike, and toggle the vote off.
5  step5_concurrent_likes() (memory only) Two users like at the same time.
"""

import asyncio
import sys
from dataclasses import dataclass

from loguru import logger

from arranke_app.config import Settings, load_settings
from arranke_toolkit.auth.base import AuthProvider, User
from arranke_toolkit.auth.in_memory import InMemoryAuthProvider
from arranke_toolkit.auth.session_context import SessionContext
from arranke_toolkit.database.data_models.listing import ListingDatabase
from arranke_toolkit.database.data_models.profile import Profile, ProfileDatabase
from arranke_toolkit.database.data_models.stats import StatsDatabase
from arranke_toolkit.database.data_models.vote import VoteDatabase
from arranke_toolkit.database.in_memory import (
    InMemoryListingDatabase,
    InMemoryProfileDatabase,
    InMemoryStatsDatabase,
    InMemoryVoteDatabase,
)
from arranke_toolkit.listings.controller import ListingController, ListingInput, ListingWithStats
from arranke_toolkit.reactions.ledger import ReactionLedger
from arranke_toolkit.storage.base import ObjectStore
from arranke_toolkit.storage.in_memory import InMemoryObjectStore

DEMO_OWNER = User(id="owner-1", email="owner@example.com", username="owner")
DEMO_ADMIN = User(id="admin-1", email="admin@example.com", username="admin")
DEMO_VOTERS = [User(id="voter-1", username="ana"), User(id="voter-2", username="ben")]


@dataclass
class Backend:
    listing_db: ListingDatabase
    stats_db: StatsDatabase
    vote_db: VoteDatabase
    profile_db: ProfileDatabase
    object_store: ObjectStore
    auth_provider: AuthProvider


async def build_backend(settings: Settings) -> Backend:
    """Instantiate every repository for the configured backend."""
    match settings.backend:
        case "supabase":
            from supabase import acreate_client

            from arranke_toolkit.auth.supabase_auth import SupabaseAuthProvider
            from arranke_toolkit.database.supabase_database import (
                SupabaseListingDatabase,
                SupabaseProfileDatabase,
                SupabaseStatsDatabase,
                SupabaseVoteDatabase,
            )
            from arranke_toolkit.storage.supabase_storage import SupabaseObjectStore

            logger.info(f"Backend: Supabase ({settings.supabase_url})")
            client = await acreate_client(settings.supabase_url or "", settings.supabase_key or "")
            if settings.demo_email and settings.demo_password:
                await client.auth.sign_in_with_password(
                    {"email": settings.demo_email, "password": settings.demo_password}
                )
                logger.info(f"Signed in as {settings.demo_email}")
            return Backend(
                listing_db=SupabaseListingDatabase(client),
                stats_db=SupabaseStatsDatabase(client),
                vote_db=SupabaseVoteDatabase(client),
                profile_db=SupabaseProfileDatabase(client),
                object_store=SupabaseObjectStore(client),
                auth_provider=SupabaseAuthProvider(client),
            )
        case "memory":
            logger.info("Backend: in-memory")
            return Backend(
                listing_db=InMemoryListingDatabase(),
                stats_db=InMemoryStatsDatabase(),
                vote_db=InMemoryVoteDatabase(),
                profile_db=InMemoryProfileDatabase(),
                object_store=InMemoryObjectStore(),
                auth_provider=InMemoryAuthProvider(DEMO_VOTERS[0]),
            )
        case _:
            raise ValueError(f"Unsupported backend {settings.backend!r}")


async def step2_seed_listing(backend: Backend, controller: ListingController, name: str) -> None:
    """Submit a listing as the demo owner and approve it as the demo admin."""
    await backend.profile_db.upsert_profile(Profile(id=DEMO_ADMIN.id, username=DEMO_ADMIN.username, is_admin=True))
    listing = await controller.create_listing(
        ListingInput(name=name, category="tools", description="A demo project"),
        DEMO_OWNER,
        logo=b"\x89PNG demo",
        logo_filename="logo.png",
        logo_content_type="image/png",
    )
    logger.info(f"Submitted {listing.name!r} (id={listing.id}), logo at {listing.logo_url}")
    pending = await controller.get_pending_listings(DEMO_ADMIN.id)
    logger.info(f"Pending review: {[item.name for item in pending]}")
    await controller.approve_listing(listing.id, DEMO_ADMIN.id)


async def step3_open_ledger(
    backend: Backend, controller: ListingController, session: SessionContext, name: str, settings: Settings
) -> tuple[ListingWithStats, ReactionLedger]:
    """Look the listing up (recording a visit) and mount a ledger seeded with its counters."""
    listing = await controller.get_listing_by_name(name)
    if listing is None:
        raise ValueError(f"Listing {name!r} not found")
    logger.info(
        f"{listing.name!r} by {await controller.get_owner_display_name(listing)}: "
        f"{listing.stats.likes_count} likes, {listing.stats.dislikes_count} dislikes, "
        f"{listing.stats.visit_count} visits"
    )
    ledger = ReactionLedger(
        session,
        backend.stats_db,
        backend.vote_db,
        listing.id,
        initial_likes=listing.stats.likes_count,
        initial_dislikes=listing.stats.dislikes_count,
        login_prompt_seconds=settings.login_prompt_seconds,
    )
    state = await ledger.initialize()
    logger.info(f"Ledger ready: {state.model_dump()}")
    return listing, ledger


async def step4_vote(ledger: ReactionLedger) -> None:
    """Like, switch to dislike, then toggle the dislike off."""
    for action in (ledger.like, ledger.dislike, ledger.dislike):
        await action()
        if ledger.login_prompt_visible:
            logger.warning("Not signed in: the login prompt is showing, nothing was recorded")
            return
        logger.info(f"After {action.__name__}: {ledger.state.model_dump()}")


async def step5_concurrent_likes(backend: Backend, listing_id: str) -> None:
    """Two users like the same listing at once; both read back the same total."""
    ledgers = []
    for voter in DEMO_VOTERS:
        session = SessionContext(InMemoryAuthProvider(voter))
        await session.start()
        ledger = ReactionLedger(session, backend.stats_db, backend.vote_db, listing_id)
        await ledger.initialize()
        ledgers.append(ledger)

    await asyncio.gather(*(ledger.like() for ledger in ledgers))
    for voter, ledger in zip(DEMO_VOTERS, ledgers):
        logger.info(f"{voter.username} sees {ledger.state.likes} likes")
        ledger.teardown()
        ledger.session.close()


async def main() -> None:
    settings = load_settings()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.info("Starting arranke demo")

    backend = await build_backend(settings)
    controller = ListingController(backend.listing_db, backend.stats_db, backend.profile_db, backend.object_store)

    if settings.backend == "memory":
        await step2_seed_listing(backend, controller, settings.listing_name)

    async with SessionContext(backend.auth_provider) as session:
        listing, ledger = await step3_open_ledger(backend, controller, session, settings.listing_name, settings)
        try:
            await step4_vote(ledger)
        finally:
            ledger.teardown()

    if settings.backend == "memory":
        await step5_concurrent_likes(backend, listing.id)

    logger.info("arranke demo done")


if __name__ == "__main__":
    asyncio.run(main())
