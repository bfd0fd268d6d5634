"""Reciprocal match records with mutual-status derivation."""

from mutualmatch.config import Settings, StoreConfig, StoreCredentials, get_settings
from mutualmatch.models import (
    MatchRecord,
    MatchView,
    Mutation,
    ProfileSummary,
    PullDislike,
    PullLike,
    PushDislike,
    PushLike,
    Reaction,
    SetField,
)
from mutualmatch.services import CachedProfileResolver, MatchService
from mutualmatch.store import MatchStore
from mutualmatch.utils.errors import (
    AlreadyExistsError,
    ConfigurationError,
    ConflictingMutationError,
    InvalidPairError,
    MutualMatchError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "AlreadyExistsError",
    "CachedProfileResolver",
    "ConfigurationError",
    "ConflictingMutationError",
    "InvalidPairError",
    "MatchRecord",
    "MatchService",
    "MatchStore",
    "MatchView",
    "Mutation",
    "MutualMatchError",
    "NotFoundError",
    "ProfileSummary",
    "PullDislike",
    "PullLike",
    "PushDislike",
    "PushLike",
    "Reaction",
    "SetField",
    "Settings",
    "StoreConfig",
    "StoreCredentials",
    "StoreError",
    "StoreUnavailableError",
    "ValidationError",
    "get_settings",
]
