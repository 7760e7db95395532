import pytest
from loguru import logger

from arranke_toolkit.auth.base import User
from arranke_toolkit.auth.in_memory import InMemoryAuthProvider
from arranke_toolkit.auth.session_context import SessionContext
from arranke_toolkit.database.data_models.stats import ListingStats
from arranke_toolkit.database.in_memory import (
    InMemoryListingDatabase,
    InMemoryProfileDatabase,
    InMemoryStatsDatabase,
    InMemoryVoteDatabase,
)
from arranke_toolkit.reactions.ledger import ReactionLedger
from arranke_toolkit.storage.in_memory import InMemoryObjectStore

LISTING_ID = "proj-1"
ALICE = User(id="alice", email="alice@example.com", username="alice")
BOB = User(id="bob", email="bob@example.com", username="bob")


@pytest.fixture
def log_messages():
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def stats_db():
    return InMemoryStatsDatabase()


@pytest.fixture
def vote_db():
    return InMemoryVoteDatabase()


@pytest.fixture
def listing_db():
    return InMemoryListingDatabase()


@pytest.fixture
def profile_db():
    return InMemoryProfileDatabase()


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def seeded_stats(stats_db):
    stats_db.rows[LISTING_ID] = ListingStats(id=LISTING_ID, likes_count=5, dislikes_count=2)
    return stats_db


@pytest.fixture
def auth_provider():
    return InMemoryAuthProvider(ALICE)


@pytest.fixture
async def session(auth_provider):
    context = SessionContext(auth_provider)
    await context.start()
    yield context
    context.close()


@pytest.fixture
async def anonymous_session():
    context = SessionContext(InMemoryAuthProvider())
    await context.start()
    yield context
    context.close()


@pytest.fixture
def make_ledger(stats_db, vote_db):
    ledgers: list[ReactionLedger] = []

    def factory(session: SessionContext, **kwargs) -> ReactionLedger:
        kwargs.setdefault("stats_db", stats_db)
        kwargs.setdefault("vote_db", vote_db)
        kwargs.setdefault("listing_id", LISTING_ID)
        ledger = ReactionLedger(session, **kwargs)
        ledgers.append(ledger)
        return ledger

    yield factory
    for ledger in ledgers:
        ledger.teardown()
