from arranke_toolkit.reactions.counters import ReactionCounters, VoteChoice, VoteRowAction, VoteTransition
from arranke_toolkit.reactions.ledger import LOGIN_PROMPT_SECONDS, ReactionLedger, ReactionState

__all__ = [
    "LOGIN_PROMPT_SECONDS",
    "ReactionCounters",
    "ReactionLedger",
    "ReactionState",
    "VoteChoice",
    "VoteRowAction",
    "VoteTransition",
]
