import pytest

from arranke_toolkit.database.data_models.stats import ListingStats
from arranke_toolkit.database.data_models.vote import VoteType
from arranke_toolkit.reactions.counters import ReactionCounters, VoteChoice, VoteRowAction
from conftest import LISTING_ID


@pytest.mark.parametrize(
    "current, requested, procedures, action, next_vote",
    [
        (VoteChoice.NONE, VoteType.LIKE, ["increment_likes"], VoteRowAction.INSERT, VoteChoice.LIKE),
        (VoteChoice.NONE, VoteType.DISLIKE, ["increment_dislikes"], VoteRowAction.INSERT, VoteChoice.DISLIKE),
        (VoteChoice.LIKE, VoteType.LIKE, ["decrement_likes"], VoteRowAction.DELETE, VoteChoice.NONE),
        (VoteChoice.DISLIKE, VoteType.DISLIKE, ["decrement_dislikes"], VoteRowAction.DELETE, VoteChoice.NONE),
        (
            VoteChoice.DISLIKE,
            VoteType.LIKE,
            ["decrement_dislikes", "increment_likes"],
            VoteRowAction.UPDATE,
            VoteChoice.LIKE,
        ),
        (
            VoteChoice.LIKE,
            VoteType.DISLIKE,
            ["decrement_likes", "increment_dislikes"],
            VoteRowAction.UPDATE,
            VoteChoice.DISLIKE,
        ),
    ],
)
def test_plan(stats_db, current, requested, procedures, action, next_vote):
    transition = ReactionCounters(stats_db).plan(current, requested)

    assert transition.procedures == procedures
    assert transition.vote_action == action
    assert transition.next_vote == next_vote


def test_switch_rereads_both_counters(stats_db):
    transition = ReactionCounters(stats_db).plan(VoteChoice.LIKE, VoteType.DISLIKE)

    assert transition.reread == [VoteType.LIKE, VoteType.DISLIKE]


def test_custom_procedure_names(stats_db):
    counters = ReactionCounters(
        stats_db,
        increment_likes="up_votes_inc",
        decrement_likes="up_votes_dec",
        increment_dislikes="down_votes_inc",
        decrement_dislikes="down_votes_dec",
    )

    transition = counters.plan(VoteChoice.LIKE, VoteType.DISLIKE)

    assert transition.procedures == ["up_votes_dec", "down_votes_inc"]


async def test_apply_stops_at_unknown_procedure(seeded_stats, log_messages):
    counters = ReactionCounters(seeded_stats, increment_likes="no_such_procedure")
    transition = counters.plan(VoteChoice.DISLIKE, VoteType.LIKE)

    assert not await counters.apply(LISTING_ID, transition)
    assert seeded_stats.rows[LISTING_ID].dislikes_count == 1
    assert any("no_such_procedure" in message for message in log_messages)


async def test_reread_missing_row_reads_as_zero(stats_db):
    stats = await ReactionCounters(stats_db).reread("unknown")

    assert stats == ListingStats(id="unknown")
