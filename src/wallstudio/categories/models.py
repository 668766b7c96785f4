"""Category record model."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from wallstudio.categories.codec import CategoryKind, decode
from wallstudio.wire import WireModel, utcnow


class CategoryRecord(WireModel):
    """A named category; ``name`` is the prefix-encoded storage string."""

    id: str
    name: str
    thumbnail_url: str = ""
    count: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    active: bool = True

    @property
    def kind(self) -> CategoryKind:
        return decode(self.name)[0]

    @property
    def display_name(self) -> str:
        return decode(self.name)[1]
