"""Match record models for the mutualmatch library."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from mutualmatch.custom_types import PairKey, UserID


def utcnow() -> datetime:
    """Get current UTC time (naive), matching what the store persists."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Reaction(BaseModel):
    """A single like or dislike event recorded on a match record."""

    user: UserID
    at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True)


class MatchRecord(BaseModel):
    """
    One ordered half of a relationship between two users.

    The record for (primary, secondary) only logs primary's own reactions
    towards secondary. Whether secondary likes primary is a flag written by
    the inverse record's owner through inverse synchronization; it is never
    derived from the inverse record's log.
    """

    primary: UserID
    secondary: UserID
    likes: List[Reaction] = Field(default_factory=list)
    dislikes: List[Reaction] = Field(default_factory=list)
    secondary_likes_primary: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def check_self_match(cls, values: Any) -> Any:
        if isinstance(values, dict):
            primary = values.get("primary")
            secondary = values.get("secondary")
            if primary and secondary and primary == secondary:
                raise ValueError("Primary and secondary user cannot be the same.")
        return values

    @computed_field  # type: ignore[prop-decorator]
    @property
    def primary_likes_secondary(self) -> bool:
        """True once primary has a like entry on this record."""
        return any(like.user == self.primary for like in self.likes)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_mutual(self) -> bool:
        """True when both directions of liking are asserted on this record."""
        return self.primary_likes_secondary and bool(self.secondary_likes_primary)

    @property
    def key(self) -> PairKey:
        return (self.primary, self.secondary)

    @property
    def inverse_key(self) -> PairKey:
        return (self.secondary, self.primary)


class ProfileSummary(BaseModel):
    """Display-only profile data for a user, supplied by an external resolver."""

    user_id: UserID
    display_name: str
    photo_url: Optional[str] = None
    bio: Optional[str] = None


class MatchView(BaseModel):
    """
    Match view model.

    A match record flattened for display, decorated with the secondary
    user's profile when the resolver knows it.
    """

    primary: UserID
    secondary: UserID
    primary_likes_secondary: bool
    secondary_likes_primary: bool
    is_mutual: bool
    like_count: int
    dislike_count: int
    created_at: datetime
    updated_at: datetime
    secondary_profile: Optional[ProfileSummary] = None

    @classmethod
    def from_record(cls, record: MatchRecord, profile: Optional[ProfileSummary] = None) -> "MatchView":
        return cls(
            primary=record.primary,
            secondary=record.secondary,
            primary_likes_secondary=record.primary_likes_secondary,
            secondary_likes_primary=record.secondary_likes_primary,
            is_mutual=record.is_mutual,
            like_count=len(record.likes),
            dislike_count=len(record.dislikes),
            created_at=record.created_at,
            updated_at=record.updated_at,
            secondary_profile=profile,
        )


def pair_details(primary: UserID, secondary: UserID, **extra: Any) -> Dict[str, Any]:
    """Context dict attached to errors and log lines for a pair."""
    details: Dict[str, Any] = {"primary": primary, "secondary": secondary}
    details.update(extra)
    return details
