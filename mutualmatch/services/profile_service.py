"""Profile resolution for decorating match results."""

from typing import Optional

from mutualmatch.config import get_settings
from mutualmatch.custom_types import ProfileResolver, UserID
from mutualmatch.models.match import ProfileSummary
from mutualmatch.utils.cache import delete_cache, get_cache_model, set_cache_model
from mutualmatch.utils.logging import get_logger

logger = get_logger(__name__)

PROFILE_CACHE_KEY = "profile:{user_id}"


class CachedProfileResolver:
    """
    Wrap a profile resolver with the Redis cache.

    Hits are served from `profile:{user_id}` keys. Misses call the wrapped
    resolver and cache what it returns; unknown users are not cached.
    """

    def __init__(self, resolver: ProfileResolver, ttl: Optional[int] = None) -> None:
        self.resolver = resolver
        self.ttl = ttl if ttl is not None else get_settings().PROFILE_CACHE_TTL

    def __call__(self, user_id: UserID) -> Optional[ProfileSummary]:
        cache_key = PROFILE_CACHE_KEY.format(user_id=user_id)
        cached = get_cache_model(cache_key, ProfileSummary)
        if cached is not None:
            return cached

        profile = self.resolver(user_id)
        if profile is not None:
            set_cache_model(cache_key, profile, expiration=self.ttl)
        return profile

    def invalidate(self, user_id: UserID) -> None:
        """Forget the cached profile for a user."""
        delete_cache(PROFILE_CACHE_KEY.format(user_id=user_id))


def null_resolver(user_id: UserID) -> Optional[ProfileSummary]:
    """Resolver used when no display layer is attached."""
    return None
