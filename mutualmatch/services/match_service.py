"""Match service: like/dislike operations, mutual status and inverse synchronization."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import sentry_sdk

from mutualmatch.custom_types import ProfileResolver, UserID
from mutualmatch.models.match import MatchRecord, MatchView, ProfileSummary, pair_details
from mutualmatch.models.mutations import PullDislike, PullLike, PushDislike, PushLike, set_fields
from mutualmatch.services.profile_service import null_resolver
from mutualmatch.store.match_store import MatchStore, ensure_pair
from mutualmatch.utils.errors import MutualMatchError, NotFoundError
from mutualmatch.utils.logging import get_logger, log_error

logger = get_logger(__name__)


class MatchService:
    """
    Product-level match operations on top of a MatchStore.

    A relationship between A and B is two independent records, (A, B) and
    (B, A). Like/dislike operations only ever touch the caller's own record;
    the inverse record learns about them only when the caller invokes
    `sync_inverse`. Until then the two halves may disagree, and
    `get_mutual_status` reports what the forward record says.
    """

    def __init__(self, store: MatchStore, profile_resolver: Optional[ProfileResolver] = None) -> None:
        self.store = store
        self.profile_resolver = profile_resolver or null_resolver

    @contextmanager
    def _operation(self, operation: str, primary: UserID, secondary: UserID) -> Iterator[None]:
        """Validate the pair, then log any failure once with operation context and re-raise it."""
        with sentry_sdk.start_span(op=f"match.{operation}", name=f"{primary} -> {secondary}"):
            try:
                ensure_pair(primary, secondary)
                yield
            except NotFoundError:
                logger.debug("Match record not found", operation=operation, primary=primary, secondary=secondary)
                raise
            except MutualMatchError as e:
                log_error(
                    logger,
                    e,
                    f"Match operation failed: {operation}",
                    extra=pair_details(primary, secondary, operation=operation),
                )
                raise

    def create_match(self, primary: UserID, secondary: UserID, strict: bool = False) -> MatchRecord:
        """
        Create the record for (primary, secondary).

        By default creation is an idempotent upsert: an existing record is
        returned untouched. With `strict=True` an existing record raises
        AlreadyExistsError. The inverse record is never created or altered.

        Raises:
            InvalidPairError: If primary equals secondary.
            AlreadyExistsError: If `strict` and the record already exists.
            StoreUnavailableError: If the store cannot be reached.
        """
        with self._operation("create_match", primary, secondary):
            if strict:
                record = self.store.create(primary, secondary)
            else:
                record = self.store.upsert_and_mutate(primary, secondary, None, create_if_missing=True)
        logger.info("Match created", primary=primary, secondary=secondary, strict=strict)
        return record

    def get_match(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """
        Get the record for (primary, secondary).

        Raises:
            NotFoundError: If the record does not exist.
        """
        with self._operation("get_match", primary, secondary):
            return self.store.get(primary, secondary)

    def add_like(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """Record that primary likes secondary, creating the record if needed."""
        with self._operation("add_like", primary, secondary):
            record = self.store.upsert_and_mutate(primary, secondary, PushLike(user=primary), create_if_missing=True)
        logger.info("Like added", primary=primary, secondary=secondary, likes=len(record.likes))
        return record

    def remove_like(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """Remove primary's likes of secondary. An absent record stays absent."""
        with self._operation("remove_like", primary, secondary):
            record = self.store.upsert_and_mutate(primary, secondary, PullLike(user=primary), create_if_missing=False)
        logger.info("Like removed", primary=primary, secondary=secondary, likes=len(record.likes))
        return record

    def add_dislike(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """Record that primary dislikes secondary, creating the record if needed."""
        with self._operation("add_dislike", primary, secondary):
            record = self.store.upsert_and_mutate(
                primary, secondary, PushDislike(user=primary), create_if_missing=True
            )
        logger.info("Dislike added", primary=primary, secondary=secondary, dislikes=len(record.dislikes))
        return record

    def remove_dislike(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """Remove primary's dislikes of secondary. An absent record stays absent."""
        with self._operation("remove_dislike", primary, secondary):
            record = self.store.upsert_and_mutate(
                primary, secondary, PullDislike(user=primary), create_if_missing=False
            )
        logger.info("Dislike removed", primary=primary, secondary=secondary, dislikes=len(record.dislikes))
        return record

    def delete_match(self, primary: UserID, secondary: UserID) -> None:
        """Delete the (primary, secondary) record. The inverse record is left alone."""
        with self._operation("delete_match", primary, secondary):
            self.store.delete(primary, secondary)
        logger.info("Match deleted", primary=primary, secondary=secondary)

    def get_mutual_status(self, primary: UserID, secondary: UserID) -> bool:
        """
        Whether the (primary, secondary) record reports a mutual match.

        Only the forward record is read: its own likes log and its own
        `secondary_likes_primary` flag. The inverse record's log is not
        consulted, so a stale flag stays stale until `sync_inverse` runs.
        An absent record is not mutual.
        """
        with self._operation("get_mutual_status", primary, secondary):
            record = self.store.find(primary, secondary)
        return record.is_mutual if record is not None else False

    def sync_inverse(self, record: MatchRecord, fields: Dict[str, Any]) -> MatchRecord:
        """
        Apply `fields` to the inverse of `record`, creating it if absent.

        The forward record is neither read nor locked; the two writes are
        not atomic with each other.

        Raises:
            ValidationError: If `fields` names something other than settable scalar fields.
        """
        primary, secondary = record.inverse_key
        with self._operation("sync_inverse", primary, secondary):
            inverse = self.store.upsert_and_mutate(primary, secondary, set_fields(fields), create_if_missing=True)
        logger.info("Inverse match synced", primary=primary, secondary=secondary, fields=fields)
        return inverse

    def sync_inverse_like_status(self, record: MatchRecord) -> MatchRecord:
        """Mirror `record.primary_likes_secondary` onto the inverse record's `secondary_likes_primary`."""
        return self.sync_inverse(record, {"secondary_likes_primary": record.primary_likes_secondary})

    def list_matches(self, primary: UserID, limit: Optional[int] = None) -> List[MatchRecord]:
        """List every record owned by `primary`."""
        if not primary:
            return []
        return self.store.list_for_primary(primary, limit=limit)

    def _resolve_profile(self, user_id: UserID) -> Optional[ProfileSummary]:
        # Display decoration only; a failing resolver never fails the query.
        try:
            return self.profile_resolver(user_id)
        except Exception as e:
            logger.warning("Failed to resolve profile", user_id=user_id, error=str(e))
            return None

    def get_match_view(self, primary: UserID, secondary: UserID) -> MatchView:
        """
        Get the (primary, secondary) record decorated with secondary's profile.

        Raises:
            NotFoundError: If the record does not exist.
        """
        record = self.get_match(primary, secondary)
        return MatchView.from_record(record, self._resolve_profile(record.secondary))

    def list_match_views(self, primary: UserID, limit: Optional[int] = None) -> List[MatchView]:
        """List primary's records decorated with each secondary's profile."""
        return [
            MatchView.from_record(record, self._resolve_profile(record.secondary))
            for record in self.list_matches(primary, limit=limit)
        ]
