"""SQLAlchemy tables backing the match store."""

from datetime import datetime
from typing import List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from mutualmatch.models.match import MatchRecord, Reaction, utcnow

LIKE = "like"
DISLIKE = "dislike"
MAX_USER_ID_LENGTH = 64


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class MatchRecordDB(Base):
    """Match record database model, one row per ordered pair."""

    __tablename__ = "match_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    primary_id: Mapped[str] = mapped_column(String(MAX_USER_ID_LENGTH), index=True)
    secondary_id: Mapped[str] = mapped_column(String(MAX_USER_ID_LENGTH))
    secondary_likes_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    reactions: Mapped[List["ReactionDB"]] = relationship(
        back_populates="record",
        cascade="all, delete-orphan",
        order_by=lambda: ReactionDB.id,
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("primary_id", "secondary_id", name="uq_match_records_pair"),
        CheckConstraint("primary_id <> secondary_id", name="chk_match_records_no_self"),
    )


class ReactionDB(Base):
    """Like/dislike log entry owned by a match record."""

    __tablename__ = "match_reactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(ForeignKey("match_records.id", ondelete="CASCADE"))
    kind: Mapped[str] = mapped_column(String(16))
    user_id: Mapped[str] = mapped_column(String(MAX_USER_ID_LENGTH))
    at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    record: Mapped[MatchRecordDB] = relationship(back_populates="reactions")

    __table_args__ = (
        Index("idx_match_reactions_record_kind", "record_id", "kind"),
        CheckConstraint(f"kind IN ('{LIKE}', '{DISLIKE}')", name="chk_match_reactions_kind"),
    )


def to_model(row: MatchRecordDB) -> MatchRecord:
    """
    Convert a persisted, flushed row (with its reactions loaded) to a MatchRecord.

    Log entries keep the order they were applied in, which is id order. `at`
    is informational and may come from the caller.
    """
    reactions = sorted(row.reactions, key=lambda r: r.id)
    likes = [Reaction(user=r.user_id, at=r.at) for r in reactions if r.kind == LIKE]
    dislikes = [Reaction(user=r.user_id, at=r.at) for r in reactions if r.kind == DISLIKE]
    return MatchRecord(
        primary=row.primary_id,
        secondary=row.secondary_id,
        likes=likes,
        dislikes=dislikes,
        secondary_likes_primary=bool(row.secondary_likes_primary),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
