"""REST persistence collaborator for the wallpaper admin API.

Every response is wrapped in an ``{success, data, meta?, error?}`` envelope.
Transport failures, non-2xx statuses and ``success: false`` all surface as
``RemoteError`` carrying the server's reason. Nothing is retried here.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any

import httpx

from wallstudio.backends.base import PersistenceBackend, Session
from wallstudio.categories.models import CategoryRecord
from wallstudio.config import ApiConfig
from wallstudio.content.models import (
    ContentRecord,
    ContentVariant,
    RecordFilter,
    SubmissionPayload,
)
from wallstudio.errors import RemoteError
from wallstudio.membership.models import CollectionRecord
from wallstudio.uploads import UploadedAsset
from wallstudio.wire import Page

logger = logging.getLogger(__name__)


class HttpBackend(PersistenceBackend):
    """Client for the admin API.

    Each call opens a short-lived ``httpx.AsyncClient`` and sends the
    session's token as a bearer credential.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._transport = transport

    async def _request(
        self,
        session: Session | None,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make a request and return the decoded envelope."""
        headers: dict[str, str] = {}
        if session is not None and session.token:
            headers["Authorization"] = f"Bearer {session.token}"

        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteError(f"{method} {path} failed: {exc}") from exc
        return _unwrap(response)

    async def _data(self, session: Session | None, method: str, path: str, **kwargs: Any) -> Any:
        return (await self._request(session, method, path, **kwargs)).get("data")

    # ── Auth & uploads ───────────────────────────────────────────

    async def login(self, username: str, password: str) -> Session:
        """Exchange credentials for a session."""
        data = await self._data(
            None, "POST", "/auth/login", json={"username": username, "password": password}
        )
        if not isinstance(data, dict) or not data.get("token"):
            raise RemoteError("Login response carried no token")
        user = data.get("user") or {}
        return Session(
            token=data["token"],
            username=user.get("username", username),
            role=user.get("role", ""),
        )

    async def verify(self, session: Session) -> bool:
        """True if the server still accepts ``session``."""
        try:
            await self._request(session, "GET", "/auth/verify")
        except RemoteError as exc:
            if exc.status_code in (401, 403):
                return False
            raise
        return True

    async def upload_file(
        self,
        session: Session,
        file_path: Path,
        mime_type: str | None = None,
    ) -> UploadedAsset:
        """Upload a local file and return where it landed."""
        file_path = Path(file_path)
        mime_type = mime_type or mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        files = {"file": (file_path.name, file_path.read_bytes(), mime_type)}
        data = await self._data(session, "POST", "/admin/upload", files=files)
        return UploadedAsset.model_validate(data)

    # ── Content records ──────────────────────────────────────────

    async def create_record(self, session: Session, payload: SubmissionPayload) -> ContentRecord:
        body = _to_api(payload.to_wire())
        return _from_api(await self._data(session, "POST", "/admin/wallpapers", json=body))

    async def update_record(
        self, session: Session, record_id: str, partial: dict[str, Any]
    ) -> ContentRecord:
        data = await self._data(
            session, "PUT", f"/admin/wallpapers/{record_id}", json=_to_api(partial)
        )
        return _from_api(data)

    async def get_record(self, session: Session, record_id: str) -> ContentRecord:
        return _from_api(await self._data(session, "GET", f"/wallpapers/{record_id}"))

    async def delete_record(self, session: Session, record_id: str) -> None:
        await self._request(session, "DELETE", f"/admin/wallpapers/{record_id}")

    async def toggle_record_active(self, session: Session, record_id: str) -> ContentRecord:
        data = await self._data(session, "PATCH", f"/admin/wallpapers/{record_id}/toggle-active")
        return _from_api(data)

    async def list_records(self, session: Session, filter: RecordFilter) -> Page[ContentRecord]:
        """List records; a ``query`` switches to the search endpoint.

        The type and category filters are sent to either endpoint.
        """
        params: dict[str, Any] = {"page": filter.page, "limit": filter.limit}
        path = "/wallpapers"
        if filter.query:
            path = "/wallpapers/search"
            params["q"] = filter.query
        if filter.variant is not None:
            params["type"] = filter.variant.value
        if filter.category:
            params["category"] = filter.category
        if filter.active is not None:
            params["active"] = str(filter.active).lower()

        body = await self._request(session, "GET", path, params=params)
        items = [_from_api(item) for item in body.get("data") or []]
        meta = body.get("meta") or {}
        return Page[ContentRecord](
            items=items,
            page=meta.get("page", filter.page),
            per_page=meta.get("perPage", filter.limit),
            total=meta.get("total", len(items)),
            has_more=meta.get("hasMore", False),
        )

    # ── Categories ───────────────────────────────────────────────

    async def list_categories(self, session: Session) -> list[CategoryRecord]:
        data = await self._data(session, "GET", "/categories")
        return [CategoryRecord.model_validate(item) for item in data or []]

    async def create_category(
        self, session: Session, name: str, thumbnail_url: str = ""
    ) -> CategoryRecord:
        body = {"name": name, "thumbnailUrl": thumbnail_url, "active": True}
        data = await self._data(session, "POST", "/admin/categories", json=body)
        return CategoryRecord.model_validate(data)

    async def update_category(
        self, session: Session, category_id: str, partial: dict[str, Any]
    ) -> CategoryRecord:
        data = await self._data(session, "PUT", f"/admin/categories/{category_id}", json=partial)
        return CategoryRecord.model_validate(data)

    async def delete_category(self, session: Session, category_id: str) -> None:
        await self._request(session, "DELETE", f"/admin/categories/{category_id}")

    async def toggle_category_active(self, session: Session, category_id: str) -> CategoryRecord:
        data = await self._data(session, "PATCH", f"/admin/categories/{category_id}/toggle-active")
        return CategoryRecord.model_validate(data)

    # ── Collections ──────────────────────────────────────────────

    async def list_collections(self, session: Session) -> list[CollectionRecord]:
        data = await self._data(session, "GET", "/collections")
        return [CollectionRecord.model_validate(item) for item in data or []]

    async def get_collection(self, session: Session, collection_id: str) -> CollectionRecord:
        data = await self._data(session, "GET", f"/collections/{collection_id}")
        return CollectionRecord.model_validate(data)

    async def create_collection(
        self,
        session: Session,
        name: str,
        description: str = "",
        thumbnail_url: str = "",
    ) -> CollectionRecord:
        body = {
            "name": name,
            "description": description,
            "thumbnailUrl": thumbnail_url,
            "active": True,
        }
        data = await self._data(session, "POST", "/admin/collections", json=body)
        return CollectionRecord.model_validate(data)

    async def update_collection(
        self, session: Session, collection_id: str, partial: dict[str, Any]
    ) -> CollectionRecord:
        data = await self._data(
            session, "PUT", f"/admin/collections/{collection_id}", json=partial
        )
        return CollectionRecord.model_validate(data)

    async def delete_collection(self, session: Session, collection_id: str) -> None:
        await self._request(session, "DELETE", f"/admin/collections/{collection_id}")

    async def toggle_collection_active(
        self, session: Session, collection_id: str
    ) -> CollectionRecord:
        data = await self._data(
            session, "PATCH", f"/admin/collections/{collection_id}/toggle-active"
        )
        return CollectionRecord.model_validate(data)

    async def add_member(self, session: Session, collection_id: str, item_id: str) -> None:
        await self._request(
            session, "POST", f"/admin/collections/{collection_id}/wallpapers/{item_id}"
        )

    async def remove_member(self, session: Session, collection_id: str, item_id: str) -> None:
        await self._request(
            session, "DELETE", f"/admin/collections/{collection_id}/wallpapers/{item_id}"
        )


# The admin API stores assets under its own field names: ``fullSizeUrl`` is
# the image, the video or the left image depending on ``type``.
_API_ASSET_FIELDS = {
    "primaryImage": "fullSizeUrl",
    "primaryVideo": "fullSizeUrl",
    "imageA": "fullSizeUrl",
    "imageB": "lockScreenUrl",
    "parallaxConfig": "parallaxSettings",
}
_FULL_SIZE_SLOT = {
    ContentVariant.WALLPAPER: "primaryImage",
    ContentVariant.LIVE: "primaryVideo",
    ContentVariant.DOUBLE: "imageA",
}
_API_ONLY_FIELDS = {"type", "fullSizeUrl", "lockScreenUrl", "parallaxSettings", "videoUrl"}


def _to_api(wire: dict[str, Any]) -> dict[str, Any]:
    """Rename a flat payload (or partial update) to the admin API's fields.

    A parallax record also gets its foreground image as ``fullSizeUrl``,
    which the API expects on every record.
    """
    body: dict[str, Any] = {}
    for key, value in wire.items():
        if key == "variant":
            body["type"] = value
        else:
            body[_API_ASSET_FIELDS.get(key, key)] = value
    if body.get("type") == ContentVariant.PARALLAX and "fullSizeUrl" not in body:
        layers = (body.get("parallaxSettings") or {}).get("layers") or []
        if layers:
            body["fullSizeUrl"] = layers[0].get("imageUrl", "")
    return body


def _from_api(data: Any) -> ContentRecord:
    """Parse a wallpaper as the admin API returns it."""
    if not isinstance(data, dict):
        raise RemoteError("Malformed wallpaper record")
    try:
        variant = ContentVariant(data.get("type") or ContentVariant.WALLPAPER)
        flat = {k: v for k, v in data.items() if k not in _API_ONLY_FIELDS}
        flat["variant"] = variant.value

        full_size = data.get("fullSizeUrl")
        if variant == ContentVariant.LIVE:
            full_size = full_size or data.get("videoUrl")
        if variant in _FULL_SIZE_SLOT and full_size is not None:
            flat[_FULL_SIZE_SLOT[variant]] = full_size
        if data.get("lockScreenUrl") is not None:
            flat["imageB"] = data["lockScreenUrl"]
        if data.get("parallaxSettings") is not None:
            flat["parallaxConfig"] = data["parallaxSettings"]
        return ContentRecord.from_wire(flat)
    except ValueError as exc:
        raise RemoteError(f"Malformed wallpaper record {data.get('id', '?')}: {exc}") from exc


def _unwrap(response: httpx.Response) -> dict[str, Any]:
    """Decode the response envelope or raise RemoteError."""
    try:
        body = response.json() if response.content else {}
    except ValueError:
        body = None

    reason = body.get("error") if isinstance(body, dict) else None
    if response.is_error:
        raise RemoteError(
            reason or f"HTTP {response.status_code}", status_code=response.status_code
        )
    if not isinstance(body, dict):
        raise RemoteError("Malformed response body", status_code=response.status_code)
    if body and not body.get("success", False):
        raise RemoteError(reason or "Request was not successful", status_code=response.status_code)
    return body
