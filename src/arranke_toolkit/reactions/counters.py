"""
Atomic counter helper shared by every reaction widget.

A like/dislike click is one of three transitions, depending on the user's
previous vote:

    none -> T       increment T;               insert vote row;  re-read T
    T    -> T       decrement T;               delete vote row;  re-read T
    O    -> T       decrement O, increment T;  update vote row;  re-read both

'ReactionCounters.plan' turns a '(current vote, requested vote)' pair into a
'VoteTransition' describing exactly that, and 'apply' / 'reread' run the
counter half of it against a 'StatsDatabase'. The procedure names are
constructor arguments so the same helper drives any pair of counters.

Counter values are never computed client side: procedures change them on the
server and 'reread' fetches the result.
"""

from enum import StrEnum

from loguru import logger
from pydantic import BaseModel

from arranke_toolkit.database.data_models.stats import CounterProcedure, ListingStats, StatsDatabase
from arranke_toolkit.database.data_models.vote import VoteType


class VoteChoice(StrEnum):
    """The signed-in user's reaction to a listing, including the absence of one."""

    LIKE = "like"
    DISLIKE = "dislike"
    NONE = "none"

    @classmethod
    def from_vote_type(cls, vote_type: VoteType | None) -> "VoteChoice":
        return cls.NONE if vote_type is None else cls(str(vote_type))


class VoteRowAction(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class VoteTransition(BaseModel):
    """
    Everything one click has to do.

    Attributes:
        requested: The vote type the user clicked.
        procedures: Counter procedures to call, in order.
        vote_action: What to do with the user's vote row afterwards.
        next_vote: The user's vote once the transition completed.
        reread: Counters whose fresh values must be copied into local state.
    """

    requested: VoteType
    procedures: list[str]
    vote_action: VoteRowAction
    next_vote: VoteChoice
    reread: list[VoteType]


class ReactionCounters:
    def __init__(
        self,
        stats_db: StatsDatabase,
        increment_likes: str = CounterProcedure.INCREMENT_LIKES,
        decrement_likes: str = CounterProcedure.DECREMENT_LIKES,
        increment_dislikes: str = CounterProcedure.INCREMENT_DISLIKES,
        decrement_dislikes: str = CounterProcedure.DECREMENT_DISLIKES,
    ) -> None:
        self.stats_db = stats_db
        self._increment = {VoteType.LIKE: str(increment_likes), VoteType.DISLIKE: str(increment_dislikes)}
        self._decrement = {VoteType.LIKE: str(decrement_likes), VoteType.DISLIKE: str(decrement_dislikes)}

    def plan(self, current: VoteChoice, requested: VoteType) -> VoteTransition:
        if current == VoteChoice.NONE:
            return VoteTransition(
                requested=requested,
                procedures=[self._increment[requested]],
                vote_action=VoteRowAction.INSERT,
                next_vote=VoteChoice.from_vote_type(requested),
                reread=[requested],
            )
        if current == requested:
            return VoteTransition(
                requested=requested,
                procedures=[self._decrement[requested]],
                vote_action=VoteRowAction.DELETE,
                next_vote=VoteChoice.NONE,
                reread=[requested],
            )
        return VoteTransition(
            requested=requested,
            procedures=[self._decrement[requested.opposite], self._increment[requested]],
            vote_action=VoteRowAction.UPDATE,
            next_vote=VoteChoice.from_vote_type(requested),
            reread=[VoteType.LIKE, VoteType.DISLIKE],
        )

    async def apply(self, listing_id: str, transition: VoteTransition) -> bool:
        """Call the transition's procedures in order; stop and return False at the first failure.

        Procedures that already succeeded are not compensated.
        """
        for index, procedure in enumerate(transition.procedures):
            try:
                await self.stats_db.call_procedure(procedure, listing_id)
            except Exception as exc:
                logger.error(f"Error calling {procedure} for listing {listing_id}: {exc}")
                if index > 0:
                    applied = ", ".join(transition.procedures[:index])
                    logger.warning(f"Counters of listing {listing_id} left partially updated ({applied} applied)")
                return False
        return True

    async def reread(self, listing_id: str) -> ListingStats | None:
        """Fetch the authoritative counters. A missing row reads as zeros; None means the read failed."""
        try:
            stats = await self.stats_db.get_stats(listing_id)
        except Exception as exc:
            logger.error(f"Error re-reading stats for listing {listing_id}: {exc}")
            return None
        return stats or ListingStats(id=listing_id)
