"""Base class for persistence collaborators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from wallstudio.categories.models import CategoryRecord
from wallstudio.content.models import ContentRecord, RecordFilter, SubmissionPayload
from wallstudio.membership.models import CollectionRecord
from wallstudio.wire import Page


class Session(BaseModel):
    """Authenticated caller context, passed explicitly into every call."""

    token: str
    username: str = ""
    role: str = ""

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


class PersistenceBackend(ABC):
    """Remote store for records, categories and collections.

    Every method may suspend while waiting on the remote side and raises
    ``RemoteError`` when the call is rejected or fails.
    """

    # ── Content records ──────────────────────────────────────────

    @abstractmethod
    async def create_record(self, session: Session, payload: SubmissionPayload) -> ContentRecord:
        """Create a content record from a validated payload."""

    @abstractmethod
    async def update_record(
        self, session: Session, record_id: str, partial: dict[str, Any]
    ) -> ContentRecord:
        """Overwrite the given wire fields of an existing record."""

    @abstractmethod
    async def get_record(self, session: Session, record_id: str) -> ContentRecord:
        """Fetch one record."""

    @abstractmethod
    async def delete_record(self, session: Session, record_id: str) -> None:
        """Delete one record."""

    @abstractmethod
    async def toggle_record_active(self, session: Session, record_id: str) -> ContentRecord:
        """Flip a record's ``active`` flag."""

    @abstractmethod
    async def list_records(self, session: Session, filter: RecordFilter) -> Page[ContentRecord]:
        """List records matching ``filter``."""

    # ── Categories ───────────────────────────────────────────────

    @abstractmethod
    async def list_categories(self, session: Session) -> list[CategoryRecord]:
        """List every category."""

    @abstractmethod
    async def create_category(
        self, session: Session, name: str, thumbnail_url: str = ""
    ) -> CategoryRecord:
        """Create a category under an already-encoded storage name."""

    @abstractmethod
    async def update_category(
        self, session: Session, category_id: str, partial: dict[str, Any]
    ) -> CategoryRecord:
        """Overwrite the given wire fields of a category."""

    @abstractmethod
    async def delete_category(self, session: Session, category_id: str) -> None:
        """Delete one category."""

    @abstractmethod
    async def toggle_category_active(self, session: Session, category_id: str) -> CategoryRecord:
        """Flip a category's ``active`` flag."""

    # ── Collections ──────────────────────────────────────────────

    @abstractmethod
    async def list_collections(self, session: Session) -> list[CollectionRecord]:
        """List every collection."""

    @abstractmethod
    async def get_collection(self, session: Session, collection_id: str) -> CollectionRecord:
        """Fetch one collection with its membership."""

    @abstractmethod
    async def create_collection(
        self,
        session: Session,
        name: str,
        description: str = "",
        thumbnail_url: str = "",
    ) -> CollectionRecord:
        """Create an empty collection."""

    @abstractmethod
    async def update_collection(
        self, session: Session, collection_id: str, partial: dict[str, Any]
    ) -> CollectionRecord:
        """Overwrite the given wire fields of a collection."""

    @abstractmethod
    async def delete_collection(self, session: Session, collection_id: str) -> None:
        """Delete one collection."""

    @abstractmethod
    async def toggle_collection_active(
        self, session: Session, collection_id: str
    ) -> CollectionRecord:
        """Flip a collection's ``active`` flag."""

    @abstractmethod
    async def add_member(self, session: Session, collection_id: str, item_id: str) -> None:
        """Add one record to a collection."""

    @abstractmethod
    async def remove_member(self, session: Session, collection_id: str, item_id: str) -> None:
        """Remove one record from a collection."""

    async def aclose(self) -> None:
        """Release any held connections."""


def create_backend(config: Any) -> PersistenceBackend:
    """Create the persistence backend a ``StudioConfig`` points at.

    An API URL selects the HTTP backend; otherwise records live in the
    local JSON store.
    """
    from wallstudio.backends.http import HttpBackend
    from wallstudio.backends.local import LocalStore

    if config.api.is_configured:
        return HttpBackend(config.api)
    return LocalStore(config.store.resolved_path)
