from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from mutualmatch.models.mutations import (
    PullDislike,
    PullLike,
    PushDislike,
    PushLike,
    SetField,
    parse_mutation,
    set_fields,
)
from mutualmatch.utils.errors import ValidationError


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"op": "push_like", "user": "a"}, PushLike),
        ({"op": "pull_like", "user": "a"}, PullLike),
        ({"op": "push_dislike", "user": "a"}, PushDislike),
        ({"op": "pull_dislike", "user": "a"}, PullDislike),
        ({"op": "set", "fields": {"secondary_likes_primary": True}}, SetField),
    ],
)
def test_parse_mutation_variants(data, expected):
    assert isinstance(parse_mutation(data), expected)


def test_push_defaults_timestamp():
    mutation = PushLike(user="a")
    assert isinstance(mutation.at, datetime)


def test_parse_unknown_op():
    with pytest.raises(ValidationError, match="Invalid mutation") as exc_info:
        parse_mutation({"op": "increment", "user": "a"})
    assert exc_info.value.details["mutation"] == {"op": "increment", "user": "a"}


def test_parse_rejects_extra_keys():
    with pytest.raises(ValidationError):
        parse_mutation({"op": "pull_like", "user": "a", "at": "2024-01-01T00:00:00"})


def test_set_field_rejects_unknown_field():
    with pytest.raises(PydanticValidationError, match="cannot be set"):
        SetField(fields={"likes": []})


def test_set_field_rejects_empty():
    with pytest.raises(PydanticValidationError):
        SetField(fields={})


def test_set_field_requires_bool_flag():
    with pytest.raises(PydanticValidationError, match="must be a boolean"):
        SetField(fields={"secondary_likes_primary": "yes"})


def test_set_fields_translates_errors():
    with pytest.raises(ValidationError, match="Invalid field update") as exc_info:
        set_fields({"primary": "x"})
    assert exc_info.value.status_code == 400


def test_set_fields_ok():
    mutation = set_fields({"secondary_likes_primary": False})
    assert mutation.fields == {"secondary_likes_primary": False}
