"""Type definitions for the mutualmatch library."""

from typing import TYPE_CHECKING, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from mutualmatch.models.match import ProfileSummary

# Opaque user identity supplied by the user-management collaborator.
UserID = str

# Ordered (primary, secondary) pair.
PairKey = Tuple[UserID, UserID]


class ProfileResolver(Protocol):
    """Display-layer hook that resolves a user's profile summary, or None when unknown."""

    def __call__(self, user_id: UserID) -> Optional["ProfileSummary"]: ...
