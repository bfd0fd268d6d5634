"""Mutation descriptors applied atomically by the match store."""

from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from mutualmatch.custom_types import UserID
from mutualmatch.models.match import utcnow
from mutualmatch.utils.errors import ValidationError

# Scalar fields a SetField mutation may assign.
SETTABLE_FIELDS = frozenset({"secondary_likes_primary"})


class PushLike(BaseModel):
    """Append a like entry."""

    op: Literal["push_like"] = "push_like"
    user: UserID
    at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, extra="forbid")


class PullLike(BaseModel):
    """Remove every like entry logged by `user`."""

    op: Literal["pull_like"] = "pull_like"
    user: UserID

    model_config = ConfigDict(frozen=True, extra="forbid")


class PushDislike(BaseModel):
    """Append a dislike entry."""

    op: Literal["push_dislike"] = "push_dislike"
    user: UserID
    at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, extra="forbid")


class PullDislike(BaseModel):
    """Remove every dislike entry logged by `user`."""

    op: Literal["pull_dislike"] = "pull_dislike"
    user: UserID

    model_config = ConfigDict(frozen=True, extra="forbid")


class SetField(BaseModel):
    """Assign scalar fields on the record."""

    op: Literal["set"] = "set"
    fields: Dict[str, Any]

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("fields")
    @classmethod
    def known_fields(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("SetField requires at least one field")
        unknown = set(v) - SETTABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be set: {', '.join(sorted(unknown))}")
        if "secondary_likes_primary" in v and not isinstance(v["secondary_likes_primary"], bool):
            raise ValueError("secondary_likes_primary must be a boolean")
        return v


Mutation = Annotated[
    Union[PushLike, PullLike, PushDislike, PullDislike, SetField],
    Field(discriminator="op"),
]

_mutation_adapter: TypeAdapter[Mutation] = TypeAdapter(Mutation)


def parse_mutation(data: Dict[str, Any]) -> Mutation:
    """
    Validate a raw mutation descriptor into one of the tagged variants.

    Raises:
        ValidationError: If the descriptor names an unknown op or bad fields.
    """
    try:
        return _mutation_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid mutation", details={"mutation": data, "error": str(e)}) from e


def set_fields(fields: Dict[str, Any]) -> SetField:
    """Build a SetField, translating pydantic failures into the library taxonomy."""
    try:
        return SetField(fields=fields)
    except PydanticValidationError as e:
        raise ValidationError("Invalid field update", details={"fields": fields, "error": str(e)}) from e
