"""Services package for the mutualmatch library."""

from mutualmatch.services.match_service import MatchService
from mutualmatch.services.profile_service import CachedProfileResolver, null_resolver

__all__ = ["CachedProfileResolver", "MatchService", "null_resolver"]
