"""Durable keyed storage for match records using SQLAlchemy."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import sentry_sdk
import structlog
from sqlalchemy import Engine, create_engine, event, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    ArgumentError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    NoSuchModuleError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from mutualmatch.config import StoreConfig, get_settings
from mutualmatch.custom_types import UserID
from mutualmatch.models.match import MatchRecord, pair_details, utcnow
from mutualmatch.models.mutations import Mutation, PullDislike, PullLike, PushDislike, PushLike, SetField
from mutualmatch.store.locks import KeyedLock
from mutualmatch.store.schema import DISLIKE, LIKE, MAX_USER_ID_LENGTH, Base, MatchRecordDB, ReactionDB, to_model
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
from mutualmatch.utils.logging import get_logger

logger = get_logger(__name__)


class _InsertRace(Exception):
    """Another writer inserted the same pair between our lookup and our insert."""


def ensure_pair(primary: UserID, secondary: UserID) -> None:
    """
    Validate an ordered pair.

    Raises:
        ValidationError: If either identity is empty or longer than MAX_USER_ID_LENGTH.
        InvalidPairError: If both sides name the same user.
    """
    if not primary or not secondary:
        raise ValidationError("User IDs cannot be empty", details=pair_details(primary, secondary))
    if len(primary) > MAX_USER_ID_LENGTH or len(secondary) > MAX_USER_ID_LENGTH:
        raise ValidationError(
            f"User IDs cannot be longer than {MAX_USER_ID_LENGTH} characters",
            details=pair_details(primary, secondary, max_length=MAX_USER_ID_LENGTH),
        )
    if primary == secondary:
        raise InvalidPairError("A user cannot match with themselves", details=pair_details(primary, secondary))


def _apply_mutation(row: MatchRecordDB, mutation: Mutation) -> None:
    if isinstance(mutation, PushLike):
        row.reactions.append(ReactionDB(kind=LIKE, user_id=mutation.user, at=mutation.at))
    elif isinstance(mutation, PushDislike):
        row.reactions.append(ReactionDB(kind=DISLIKE, user_id=mutation.user, at=mutation.at))
    elif isinstance(mutation, PullLike):
        row.reactions = [r for r in row.reactions if not (r.kind == LIKE and r.user_id == mutation.user)]
    elif isinstance(mutation, PullDislike):
        row.reactions = [r for r in row.reactions if not (r.kind == DISLIKE and r.user_id == mutation.user)]
    elif isinstance(mutation, SetField):
        for name, value in mutation.fields.items():
            setattr(row, name, value)
    else:
        raise ValidationError("Unsupported mutation", details={"mutation": repr(mutation)})


class MatchStore:
    """
    Match record store.

    Each ordered (primary, secondary) pair maps to at most one row. Mutations
    on a pair run one at a time: an in-process lock per key, plus a row lock
    (SELECT ... FOR UPDATE) on backends that support it. Different pairs are
    never serialized against each other.
    """

    def __init__(self, config: Optional[StoreConfig] = None, engine: Optional[Engine] = None) -> None:
        self.config = config or StoreConfig.from_settings()
        self._engine = engine
        self._session_factory: Optional[sessionmaker[Session]] = None
        self._locks = KeyedLock()

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        try:
            url = make_url(self.config.endpoint)
        except ArgumentError as e:
            raise ConfigurationError("Invalid store endpoint", details={"error": str(e)}) from e

        if self.config.credentials is not None:
            password = self.config.credentials.password
            url = url.set(
                username=self.config.credentials.username,
                password=password.get_secret_value() if password is not None else None,
            )

        safe_url = url.render_as_string(hide_password=True)
        timeout = self.config.timeout
        kwargs: Dict[str, Any] = {"echo": get_settings().DEBUG}

        if url.get_backend_name() == "sqlite":
            kwargs["connect_args"] = {"timeout": timeout, "check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees an empty database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
            kwargs["pool_recycle"] = 300
            kwargs["pool_timeout"] = timeout
            if url.get_backend_name() == "postgresql":
                kwargs["connect_args"] = {"connect_timeout": max(1, int(timeout))}

        try:
            engine = create_engine(url, **kwargs)
        except (ArgumentError, NoSuchModuleError, ImportError) as e:
            logger.error("Failed to create store engine", error=str(e), url=safe_url)
            raise ConfigurationError("Failed to create store engine", details={"error": str(e), "url": safe_url}) from e

        if url.get_backend_name() == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        logger.info("Store engine created", url=safe_url)
        return engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def create_tables(self) -> None:
        """Create the match store tables if they don't exist."""
        with self._operation("create_tables"):
            Base.metadata.create_all(self.engine)
        logger.info("Match store tables created")

    def drop_tables(self) -> None:
        """Drop the match store tables."""
        with self._operation("drop_tables"):
            Base.metadata.drop_all(self.engine)
        logger.info("Match store tables dropped")

    def dispose(self) -> None:
        """Close pooled connections."""
        if self._engine is not None:
            self._engine.dispose()

    @contextmanager
    def _operation(
        self,
        operation: str,
        primary: Optional[UserID] = None,
        secondary: Optional[UserID] = None,
        span_name: Optional[str] = None,
        **extra: Any,
    ) -> Iterator[Any]:
        """
        Trace a store operation and translate SQLAlchemy failures into library errors.

        The operation name and pair are bound to structlog's context variables
        for the duration, so every log line emitted inside carries them.
        """
        details: Dict[str, Any] = {"operation": operation}
        if primary is not None or secondary is not None:
            details.update(pair_details(primary or "", secondary or ""))
        details.update(extra)
        if span_name is None:
            span_name = f"{primary} -> {secondary}" if primary is not None and secondary is not None else operation

        span_cm = sentry_sdk.start_span(op=f"db.match_store.{operation}", name=span_name)
        with structlog.contextvars.bound_contextvars(**details), span_cm as span:
            for key, value in details.items():
                span.set_data(key, value)
            try:
                yield span
            except MutualMatchError:
                span.set_status("failed_precondition")
                raise
            except StaleDataError as e:
                span.set_status("aborted")
                logger.warning("Concurrent structural change detected", error=str(e))
                raise ConflictingMutationError(
                    f"Match record changed concurrently during {operation}", details={**details, "error": str(e)}
                ) from e
            except (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError, TimeoutError) as e:
                span.set_status("unavailable")
                logger.error("Match store unavailable", error=str(e))
                raise StoreUnavailableError(
                    f"Match store unavailable during {operation}", details={**details, "error": str(e)}
                ) from e
            except SQLAlchemyError as e:
                span.set_status("internal_error")
                logger.error(f"Failed to execute {operation} on match store", error=str(e))
                raise StoreError(
                    f"Match store operation failed: {operation}", details={**details, "error": str(e)}
                ) from e

    def _select_pair(self, primary: UserID, secondary: UserID, for_update: bool = False) -> Any:
        stmt = (
            select(MatchRecordDB)
            .where(MatchRecordDB.primary_id == primary, MatchRecordDB.secondary_id == secondary)
            .options(selectinload(MatchRecordDB.reactions))
        )
        if for_update:
            stmt = stmt.with_for_update()
        return stmt

    def find(self, primary: UserID, secondary: UserID) -> Optional[MatchRecord]:
        """Look up the record for an ordered pair, or None when absent."""
        with self._operation("get", primary, secondary) as span:
            with self.session_factory() as session:
                row = session.scalars(self._select_pair(primary, secondary)).first()
                span.set_data("found", row is not None)
                return to_model(row) if row is not None else None

    def get(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """
        Get the record for an ordered pair.

        Raises:
            NotFoundError: If no record exists for the pair.
            StoreUnavailableError: If the store cannot be reached.
        """
        record = self.find(primary, secondary)
        if record is None:
            raise NotFoundError("Match record not found", details=pair_details(primary, secondary, operation="get"))
        return record

    def list_for_primary(self, primary: UserID, limit: Optional[int] = None) -> List[MatchRecord]:
        """List every record owned by `primary`, oldest first."""
        if limit is not None and limit < 0:
            raise ValidationError("Limit cannot be negative", details={"primary": primary, "limit": limit})
        with self._operation("list_for_primary", primary, span_name=primary, limit=limit) as span:
            stmt = (
                select(MatchRecordDB)
                .where(MatchRecordDB.primary_id == primary)
                .options(selectinload(MatchRecordDB.reactions))
                .order_by(MatchRecordDB.created_at, MatchRecordDB.id)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            with self.session_factory() as session:
                rows = session.scalars(stmt).all()
                span.set_data("row_count", len(rows))
                return [to_model(row) for row in rows]

    def create(self, primary: UserID, secondary: UserID) -> MatchRecord:
        """
        Insert an empty record for the pair.

        Raises:
            AlreadyExistsError: If the pair already has a record.
        """
        ensure_pair(primary, secondary)
        with self._operation("create", primary, secondary):
            with self._locks.hold((primary, secondary), timeout=self.config.timeout):
                with self.session_factory() as session, session.begin():
                    existing = session.scalars(self._select_pair(primary, secondary)).first()
                    if existing is not None:
                        raise AlreadyExistsError(
                            "Match record already exists", details=pair_details(primary, secondary, operation="create")
                        )
                    row = MatchRecordDB(
                        primary_id=primary, secondary_id=secondary, secondary_likes_primary=False, reactions=[]
                    )
                    session.add(row)
                    try:
                        session.flush()
                    except IntegrityError as e:
                        raise AlreadyExistsError(
                            "Match record already exists", details=pair_details(primary, secondary, operation="create")
                        ) from e
                    logger.debug("Match record created", primary=primary, secondary=secondary)
                    return to_model(row)

    def upsert_and_mutate(
        self,
        primary: UserID,
        secondary: UserID,
        mutation: Optional[Mutation] = None,
        create_if_missing: bool = True,
    ) -> MatchRecord:
        """
        Atomically locate, mutate and persist the record for a pair.

        The record is created first when absent and `create_if_missing` is
        set. With `create_if_missing=False` an absent record is left absent
        and a fresh, unsaved empty record is returned. `mutation=None` only
        ensures the record exists. `updated_at` is refreshed on every write.

        If another writer inserts the same pair between our lookup and our
        insert, the insert is rolled back and the mutation is applied to the
        winner's row instead, so no list mutation is lost.

        Raises:
            InvalidPairError: If primary equals secondary.
            ConflictingMutationError: If the record changed structurally mid-mutation.
            StoreUnavailableError: If the store cannot be reached or timed out.
        """
        ensure_pair(primary, secondary)
        op = mutation.op if mutation is not None else "ensure"
        with self._operation("upsert_and_mutate", primary, secondary, mutation=op):
            with self._locks.hold((primary, secondary), timeout=self.config.timeout):
                try:
                    return self._upsert_once(primary, secondary, mutation, create_if_missing)
                except _InsertRace:
                    logger.debug("Lost insert race, applying to existing record", primary=primary, secondary=secondary)
                try:
                    return self._upsert_once(primary, secondary, mutation, create_if_missing)
                except _InsertRace as e:
                    raise ConflictingMutationError(
                        "Match record insert kept colliding",
                        details=pair_details(primary, secondary, operation="upsert_and_mutate"),
                    ) from e

    def _upsert_once(
        self, primary: UserID, secondary: UserID, mutation: Optional[Mutation], create_if_missing: bool
    ) -> MatchRecord:
        with self.session_factory() as session, session.begin():
            row = session.scalars(self._select_pair(primary, secondary, for_update=True)).first()
            if row is None:
                if not create_if_missing:
                    return MatchRecord(primary=primary, secondary=secondary)
                row = MatchRecordDB(
                    primary_id=primary, secondary_id=secondary, secondary_likes_primary=False, reactions=[]
                )
                session.add(row)
                try:
                    session.flush()
                except IntegrityError as e:
                    raise _InsertRace() from e

            try:
                if mutation is not None:
                    _apply_mutation(row, mutation)
                row.updated_at = utcnow()
                session.flush()
            except IntegrityError as e:
                raise ConflictingMutationError(
                    "Match record changed during mutation",
                    details=pair_details(primary, secondary, operation="upsert_and_mutate", error=str(e)),
                ) from e

            return to_model(row)

    def delete(self, primary: UserID, secondary: UserID) -> None:
        """Delete the record for an ordered pair. Deleting an absent record is not an error."""
        with self._operation("delete", primary, secondary) as span:
            with self._locks.hold((primary, secondary), timeout=self.config.timeout):
                try:
                    with self.session_factory() as session, session.begin():
                        row = session.scalars(self._select_pair(primary, secondary, for_update=True)).first()
                        span.set_data("found", row is not None)
                        if row is not None:
                            session.delete(row)
                except StaleDataError:
                    # Someone else deleted it first
                    span.set_data("found", False)
        logger.debug("Match record deleted", primary=primary, secondary=secondary)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
