"""Models package for the mutualmatch library."""

from mutualmatch.models.match import MatchRecord, MatchView, ProfileSummary, Reaction
from mutualmatch.models.mutations import (
    Mutation,
    PullDislike,
    PullLike,
    PushDislike,
    PushLike,
    SetField,
    parse_mutation,
)

__all__ = [
    "MatchRecord",
    "MatchView",
    "Mutation",
    "ProfileSummary",
    "PullDislike",
    "PullLike",
    "PushDislike",
    "PushLike",
    "Reaction",
    "SetField",
    "parse_mutation",
]
