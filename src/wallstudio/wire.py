"""Shared base types for everything exchanged with a persistence collaborator."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class WireModel(BaseModel):
    """Model with snake_case attributes and camelCase wire names.

    Both spellings are accepted on input; ``to_wire`` always emits camelCase.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Page(WireModel, Generic[T]):
    """One page of a listing plus the pagination metadata that came with it."""

    items: list[T] = Field(default_factory=list)
    page: int = 1
    per_page: int = 20
    total: int = 0
    has_more: bool = False
