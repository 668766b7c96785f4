"""Collection and membership-reconciliation models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wallstudio.errors import ReconciliationPartialFailure
from wallstudio.wire import WireModel, utcnow


class CollectionRecord(WireModel):
    """A curated, unordered set of content records.

    Membership travels as ``wallpapers`` on the wire; ``null`` means empty.
    """

    id: str
    name: str
    description: str = ""
    thumbnail_url: str = ""
    members: frozenset[str] = Field(default_factory=frozenset, alias="wallpapers")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    active: bool = True

    @field_validator("members", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return frozenset() if value is None else value


class MembershipDiff(BaseModel):
    """Minimal edit list moving a membership set from current to desired."""

    model_config = ConfigDict(frozen=True)

    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


class ReconcileOutcome(BaseModel):
    """Per-item result of applying a membership diff.

    ``failed`` maps an item id to the reason the collaborator gave.
    """

    collection_id: str
    succeeded: set[str] = Field(default_factory=set)
    failed: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        """Raise ReconciliationPartialFailure if any item failed."""
        if self.failed:
            raise ReconciliationPartialFailure(self)
