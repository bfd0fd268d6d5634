from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from mutualmatch.models.match import MatchRecord, MatchView, ProfileSummary, Reaction, pair_details


def test_new_record_defaults():
    record = MatchRecord(primary="a", secondary="b")

    assert record.likes == []
    assert record.dislikes == []
    assert record.secondary_likes_primary is False
    assert record.primary_likes_secondary is False
    assert record.is_mutual is False
    assert isinstance(record.created_at, datetime)
    assert isinstance(record.updated_at, datetime)


def test_self_match_rejected():
    with pytest.raises(PydanticValidationError, match="cannot be the same"):
        MatchRecord(primary="a", secondary="a")


def test_primary_likes_secondary_follows_likes_log():
    record = MatchRecord(primary="a", secondary="b", likes=[Reaction(user="a")])

    assert record.primary_likes_secondary is True


def test_like_from_other_user_does_not_count():
    record = MatchRecord(primary="a", secondary="b", likes=[Reaction(user="b")])

    assert record.primary_likes_secondary is False


class TestIsMutual:
    """Mutual status is the conjunction of the log and the flag on one record."""

    def test_like_without_flag(self):
        record = MatchRecord(primary="a", secondary="b", likes=[Reaction(user="a")])
        assert record.is_mutual is False

    def test_flag_without_like(self):
        record = MatchRecord(primary="a", secondary="b", secondary_likes_primary=True)
        assert record.is_mutual is False

    def test_like_and_flag(self):
        record = MatchRecord(primary="a", secondary="b", likes=[Reaction(user="a")], secondary_likes_primary=True)
        assert record.is_mutual is True


def test_keys():
    record = MatchRecord(primary="a", secondary="b")

    assert record.key == ("a", "b")
    assert record.inverse_key == ("b", "a")


def test_dump_includes_derived_fields():
    record = MatchRecord(primary="a", secondary="b", likes=[Reaction(user="a")], secondary_likes_primary=True)

    data = record.model_dump()

    assert data["primary_likes_secondary"] is True
    assert data["is_mutual"] is True


def test_reaction_is_frozen():
    reaction = Reaction(user="a")
    with pytest.raises(PydanticValidationError):
        reaction.user = "b"


def test_match_view_from_record():
    now = datetime(2024, 1, 1, 12, 0)
    record = MatchRecord(
        primary="a",
        secondary="b",
        likes=[Reaction(user="a", at=now), Reaction(user="a", at=now + timedelta(seconds=1))],
        dislikes=[Reaction(user="a", at=now)],
        secondary_likes_primary=True,
        created_at=now,
        updated_at=now,
    )
    profile = ProfileSummary(user_id="b", display_name="Mary")

    view = MatchView.from_record(record, profile)

    assert view.primary == "a"
    assert view.secondary == "b"
    assert view.is_mutual is True
    assert view.like_count == 2
    assert view.dislike_count == 1
    assert view.secondary_profile.display_name == "Mary"


def test_pair_details():
    assert pair_details("a", "b", operation="get") == {"primary": "a", "secondary": "b", "operation": "get"}
