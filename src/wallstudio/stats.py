"""Library-wide dashboard statistics."""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, Field

from wallstudio.backends.base import PersistenceBackend, Session
from wallstudio.content.models import ContentRecord, RecordFilter

logger = logging.getLogger(__name__)

RECENT_COUNT = 5
DOWNLOAD_PAGE_SIZE = 100


class DashboardStats(BaseModel):
    total_records: int = 0
    total_categories: int = 0
    total_collections: int = 0
    total_downloads: int = 0
    recent: list[ContentRecord] = Field(default_factory=list)


async def total_downloads(backend: PersistenceBackend, session: Session) -> int:
    """Sum download counters over every record, page by page."""
    total = 0
    page = 1
    while True:
        result = await backend.list_records(
            session, RecordFilter(page=page, limit=DOWNLOAD_PAGE_SIZE)
        )
        total += sum(record.downloads for record in result.items)
        if not result.has_more or not result.items:
            return total
        page += 1


async def dashboard_stats(backend: PersistenceBackend, session: Session) -> DashboardStats:
    """Collect headline numbers and the most recent records."""
    recent, categories, collections = await asyncio.gather(
        backend.list_records(session, RecordFilter(page=1, limit=RECENT_COUNT)),
        backend.list_categories(session),
        backend.list_collections(session),
    )
    downloads = await total_downloads(backend, session)
    logger.debug("Dashboard: %d records, %d downloads", recent.total, downloads)
    return DashboardStats(
        total_records=recent.total,
        total_categories=len(categories),
        total_collections=len(collections),
        total_downloads=downloads,
        recent=recent.items,
    )
