"""Store package for the mutualmatch library."""

from mutualmatch.store.locks import KeyedLock
from mutualmatch.store.match_store import MatchStore, ensure_pair

__all__ = ["KeyedLock", "MatchStore", "ensure_pair"]
