"""JSON-backed persistence collaborator.

Persists every record, category and collection in a single JSON file,
loaded on init and saved after every write. Useful offline and as the
reference collaborator in tests.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from wallstudio.backends.base import PersistenceBackend, Session
from wallstudio.categories.models import CategoryRecord
from wallstudio.content.models import ContentRecord, RecordFilter, SubmissionPayload
from wallstudio.errors import RemoteError
from wallstudio.membership.models import CollectionRecord
from wallstudio.wire import Page, utcnow

logger = logging.getLogger(__name__)

STORE_FILENAME = ".wallstudio-store.json"

M = TypeVar("M", bound=BaseModel)


class _StoreData(BaseModel):
    """Everything the store file holds."""

    records: list[ContentRecord] = Field(default_factory=list)
    categories: list[CategoryRecord] = Field(default_factory=list)
    collections: list[CollectionRecord] = Field(default_factory=list)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _parse_record(data: dict[str, Any]) -> ContentRecord:
    try:
        return ContentRecord.from_wire(data)
    except ValueError as exc:
        raise RemoteError(f"Invalid wallpaper: {exc}", status_code=400) from exc


def _parse(model: type[M], data: dict[str, Any]) -> M:
    try:
        return model.model_validate(data)
    except ValueError as exc:
        raise RemoteError(f"Invalid {model.__name__}: {exc}", status_code=400) from exc


class LocalStore(PersistenceBackend):
    """Single-file store implementing the full collaborator surface.

    ``path`` may be the store file itself or a directory to hold
    ``STORE_FILENAME``.
    """

    def __init__(self, path: Path) -> None:
        path = Path(path)
        self._path = path / STORE_FILENAME if path.is_dir() else path
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._data.model_dump_json(indent=2), encoding="utf-8")

    @staticmethod
    def _authorize(session: Session | None) -> None:
        if session is None or not session.is_authenticated:
            raise RemoteError("Unauthorized", status_code=401)

    def _record_index(self, record_id: str) -> int:
        for i, record in enumerate(self._data.records):
            if record.id == record_id:
                return i
        raise RemoteError(f"Wallpaper {record_id} not found", status_code=404)

    def _category_index(self, category_id: str) -> int:
        for i, category in enumerate(self._data.categories):
            if category.id == category_id:
                return i
        raise RemoteError(f"Category {category_id} not found", status_code=404)

    def _collection_index(self, collection_id: str) -> int:
        for i, collection in enumerate(self._data.collections):
            if collection.id == collection_id:
                return i
        raise RemoteError(f"Collection {collection_id} not found", status_code=404)

    def _with_count(self, category: CategoryRecord) -> CategoryRecord:
        count = sum(1 for r in self._data.records if r.category == category.name)
        return category.model_copy(update={"count": count})

    # ── Content records ──────────────────────────────────────────

    async def create_record(self, session: Session, payload: SubmissionPayload) -> ContentRecord:
        self._authorize(session)
        now = utcnow().isoformat()
        record = _parse_record(
            {**payload.to_wire(), "id": _new_id(), "createdAt": now, "updatedAt": now}
        )
        self._data.records.append(record)
        self._save()
        logger.info("Created %s record %s (%s)", record.variant, record.id, record.title)
        return record

    async def update_record(
        self, session: Session, record_id: str, partial: dict[str, Any]
    ) -> ContentRecord:
        self._authorize(session)
        index = self._record_index(record_id)
        current = self._data.records[index].to_wire()
        merged = {
            **current,
            **partial,
            "id": current["id"],
            "createdAt": current["createdAt"],
            "updatedAt": utcnow().isoformat(),
        }
        record = _parse_record(merged)
        self._data.records[index] = record
        self._save()
        return record

    async def get_record(self, session: Session, record_id: str) -> ContentRecord:
        self._authorize(session)
        return self._data.records[self._record_index(record_id)]

    async def delete_record(self, session: Session, record_id: str) -> None:
        self._authorize(session)
        del self._data.records[self._record_index(record_id)]
        for i, collection in enumerate(self._data.collections):
            if record_id in collection.members:
                self._data.collections[i] = collection.model_copy(
                    update={"members": collection.members - {record_id}}
                )
        self._save()

    async def toggle_record_active(self, session: Session, record_id: str) -> ContentRecord:
        self._authorize(session)
        index = self._record_index(record_id)
        record = self._data.records[index]
        record = record.model_copy(update={"active": not record.active, "updated_at": utcnow()})
        self._data.records[index] = record
        self._save()
        return record

    async def list_records(self, session: Session, filter: RecordFilter) -> Page[ContentRecord]:
        self._authorize(session)
        results = self._data.records
        if filter.variant is not None:
            results = [r for r in results if r.variant == filter.variant]
        if filter.category:
            results = [r for r in results if r.category == filter.category]
        if filter.active is not None:
            results = [r for r in results if r.active == filter.active]
        if filter.query:
            needle = filter.query.lower()
            results = [
                r
                for r in results
                if needle in r.title.lower()
                or needle in r.description.lower()
                or any(needle in t.lower() for t in r.tags)
            ]
        results = sorted(results, key=lambda r: r.created_at, reverse=True)

        limit = max(filter.limit, 1)
        start = (max(filter.page, 1) - 1) * limit
        return Page[ContentRecord](
            items=results[start : start + limit],
            page=filter.page,
            per_page=limit,
            total=len(results),
            has_more=start + limit < len(results),
        )

    # ── Categories ───────────────────────────────────────────────

    async def list_categories(self, session: Session) -> list[CategoryRecord]:
        self._authorize(session)
        return [self._with_count(c) for c in self._data.categories]

    async def create_category(
        self, session: Session, name: str, thumbnail_url: str = ""
    ) -> CategoryRecord:
        self._authorize(session)
        if any(c.name == name for c in self._data.categories):
            raise RemoteError(f"Category {name!r} already exists", status_code=409)
        category = CategoryRecord(id=_new_id(), name=name, thumbnail_url=thumbnail_url)
        self._data.categories.append(category)
        self._save()
        return self._with_count(category)

    async def update_category(
        self, session: Session, category_id: str, partial: dict[str, Any]
    ) -> CategoryRecord:
        self._authorize(session)
        index = self._category_index(category_id)
        current = self._data.categories[index]
        name = partial.get("name", current.name)
        if name != current.name and any(c.name == name for c in self._data.categories):
            raise RemoteError(f"Category {name!r} already exists", status_code=409)
        category = _parse(
            CategoryRecord,
            {**current.to_wire(), **partial, "id": current.id, "createdAt": current.created_at},
        )
        self._data.categories[index] = category
        self._save()
        return self._with_count(category)

    async def delete_category(self, session: Session, category_id: str) -> None:
        self._authorize(session)
        del self._data.categories[self._category_index(category_id)]
        self._save()

    async def toggle_category_active(self, session: Session, category_id: str) -> CategoryRecord:
        self._authorize(session)
        index = self._category_index(category_id)
        category = self._data.categories[index]
        category = category.model_copy(update={"active": not category.active})
        self._data.categories[index] = category
        self._save()
        return self._with_count(category)

    # ── Collections ──────────────────────────────────────────────

    async def list_collections(self, session: Session) -> list[CollectionRecord]:
        self._authorize(session)
        return list(self._data.collections)

    async def get_collection(self, session: Session, collection_id: str) -> CollectionRecord:
        self._authorize(session)
        return self._data.collections[self._collection_index(collection_id)]

    async def create_collection(
        self,
        session: Session,
        name: str,
        description: str = "",
        thumbnail_url: str = "",
    ) -> CollectionRecord:
        self._authorize(session)
        collection = CollectionRecord(
            id=_new_id(), name=name, description=description, thumbnail_url=thumbnail_url
        )
        self._data.collections.append(collection)
        self._save()
        return collection

    async def update_collection(
        self, session: Session, collection_id: str, partial: dict[str, Any]
    ) -> CollectionRecord:
        self._authorize(session)
        index = self._collection_index(collection_id)
        current = self._data.collections[index]
        collection = _parse(
            CollectionRecord,
            {
                **current.to_wire(),
                **partial,
                "id": current.id,
                "createdAt": current.created_at,
                "updatedAt": utcnow(),
            },
        )
        self._data.collections[index] = collection
        self._save()
        return collection

    async def delete_collection(self, session: Session, collection_id: str) -> None:
        self._authorize(session)
        del self._data.collections[self._collection_index(collection_id)]
        self._save()

    async def toggle_collection_active(
        self, session: Session, collection_id: str
    ) -> CollectionRecord:
        self._authorize(session)
        index = self._collection_index(collection_id)
        collection = self._data.collections[index]
        collection = collection.model_copy(
            update={"active": not collection.active, "updated_at": utcnow()}
        )
        self._data.collections[index] = collection
        self._save()
        return collection

    async def add_member(self, session: Session, collection_id: str, item_id: str) -> None:
        self._authorize(session)
        index = self._collection_index(collection_id)
        self._record_index(item_id)
        collection = self._data.collections[index]
        self._data.collections[index] = collection.model_copy(
            update={"members": collection.members | {item_id}, "updated_at": utcnow()}
        )
        self._save()

    async def remove_member(self, session: Session, collection_id: str, item_id: str) -> None:
        self._authorize(session)
        index = self._collection_index(collection_id)
        collection = self._data.collections[index]
        self._data.collections[index] = collection.model_copy(
            update={"members": collection.members - {item_id}, "updated_at": utcnow()}
        )
        self._save()
