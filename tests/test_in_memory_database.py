import pytest

from arranke_toolkit.database.data_models.listing import Listing
from arranke_toolkit.database.data_models.stats import CounterProcedure, ListingStats
from arranke_toolkit.database.data_models.vote import Vote, VoteType
from conftest import ALICE, LISTING_ID


async def test_procedures_update_counters_and_notify(seeded_stats):
    pushed = []
    subscription = await seeded_stats.subscribe_stats_changes(LISTING_ID, pushed.append)

    await seeded_stats.call_procedure(CounterProcedure.INCREMENT_LIKES, LISTING_ID)
    await seeded_stats.call_procedure(CounterProcedure.INCREMENT_VISITS, LISTING_ID)

    assert [(stats.likes_count, stats.visit_count) for stats in pushed] == [(6, 0), (6, 1)]
    subscription.unsubscribe()
    assert seeded_stats.subscriber_count(LISTING_ID) == 0


async def test_decrement_clamps_at_zero(stats_db, log_messages):
    await stats_db.create_stats(ListingStats(id=LISTING_ID))

    await stats_db.call_procedure(CounterProcedure.DECREMENT_DISLIKES, LISTING_ID)

    assert stats_db.rows[LISTING_ID].dislikes_count == 0
    assert any("clamping" in message for message in log_messages)


async def test_unknown_procedure_and_missing_row_raise(seeded_stats):
    with pytest.raises(ValueError):
        await seeded_stats.call_procedure("increment_shares", LISTING_ID)
    with pytest.raises(ValueError):
        await seeded_stats.call_procedure(CounterProcedure.INCREMENT_LIKES, "missing")


async def test_vote_rows_are_unique_per_user_and_listing(vote_db):
    vote = Vote(listing_id=LISTING_ID, user_id=ALICE.id, vote_type=VoteType.LIKE)
    await vote_db.create_vote(vote)

    with pytest.raises(ValueError):
        await vote_db.create_vote(vote)

    updated = await vote_db.update_vote(LISTING_ID, ALICE.id, VoteType.DISLIKE)
    assert updated.vote_type == VoteType.DISLIKE
    assert await vote_db.delete_vote(LISTING_ID, ALICE.id)
    assert not await vote_db.delete_vote(LISTING_ID, ALICE.id)
    with pytest.raises(ValueError):
        await vote_db.update_vote(LISTING_ID, ALICE.id, VoteType.LIKE)


async def test_listing_names_are_unique(listing_db):
    await listing_db.create_listing(Listing(id="a", name="Rocket", owner_id=ALICE.id, create_timestamp=1))

    with pytest.raises(ValueError):
        await listing_db.create_listing(Listing(id="b", name="Rocket", owner_id=ALICE.id, create_timestamp=2))


def test_vote_type_opposite():
    assert VoteType.LIKE.opposite == VoteType.DISLIKE
    assert VoteType.DISLIKE.opposite == VoteType.LIKE
