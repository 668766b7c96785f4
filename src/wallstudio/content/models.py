"""Content domain models (pydantic v2).

A content record describes one wallpaper asset. Its variant-specific data
lives in a tagged union (``WallpaperContent | LiveContent | DoubleContent |
ParallaxContent``) so a stored record can only ever carry the slots of its
own variant. Editing happens on a flat ``ContentDraft`` instead, which keeps
every slot around so switching variants back and forth loses nothing.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field

from wallstudio.wire import WireModel, utcnow


class ContentVariant(StrEnum):
    """Structural kind of a content record."""

    WALLPAPER = "WALLPAPER"
    LIVE = "LIVE"
    PARALLAX = "PARALLAX"
    DOUBLE = "DOUBLE"


class ParallaxLayer(WireModel):
    """One depth plane of a parallax composite (zIndex 1 is nearest)."""

    model_config = ConfigDict(frozen=True)

    image_url: str = ""
    z_index: int = 1
    move_speed: float = 1.0
    blur_amount: float = 0
    opacity: float = 1.0


class ParallaxConfig(WireModel):
    """Global parallax parameters plus the ordered layer sequence."""

    model_config = ConfigDict(frozen=True)

    sensitivity: float = 0.1
    parallax_strength: float = 15
    invert_x: bool = False
    invert_y: bool = False
    layers: tuple[ParallaxLayer, ...] = ()


# ── Variant content (tagged union) ──────────────────────────────


class WallpaperContent(WireModel):
    kind: Literal[ContentVariant.WALLPAPER] = ContentVariant.WALLPAPER
    primary_image: str


class LiveContent(WireModel):
    kind: Literal[ContentVariant.LIVE] = ContentVariant.LIVE
    primary_video: str
    duration: float | None = None
    quality: str | None = None


class DoubleContent(WireModel):
    kind: Literal[ContentVariant.DOUBLE] = ContentVariant.DOUBLE
    image_a: str
    image_b: str


class ParallaxContent(WireModel):
    kind: Literal[ContentVariant.PARALLAX] = ContentVariant.PARALLAX
    config: ParallaxConfig


VariantContent = Annotated[
    WallpaperContent | LiveContent | DoubleContent | ParallaxContent,
    Field(discriminator="kind"),
]


def content_to_flat(content: VariantContent) -> dict[str, Any]:
    """Flatten variant content into the wire field names of a payload."""
    if isinstance(content, WallpaperContent):
        return {"primaryImage": content.primary_image}
    if isinstance(content, LiveContent):
        flat: dict[str, Any] = {"primaryVideo": content.primary_video}
        if content.duration is not None:
            flat["videoDuration"] = content.duration
        if content.quality is not None:
            flat["videoQuality"] = content.quality
        return flat
    if isinstance(content, DoubleContent):
        return {"imageA": content.image_a, "imageB": content.image_b}
    return {"parallaxConfig": content.config.to_wire()}


def content_from_flat(variant: ContentVariant | str, data: dict[str, Any]) -> VariantContent:
    """Build variant content from a flat wire dict.

    Only the keys belonging to ``variant`` are read; anything else in
    ``data`` is ignored.

    Raises:
        ValueError: If a slot of ``variant`` is absent from ``data``.
    """
    variant = ContentVariant(variant)

    def slot(key: str) -> Any:
        value = data.get(key)
        if value is None:
            raise ValueError(f"{variant} record has no {key}")
        return value

    if variant == ContentVariant.WALLPAPER:
        return WallpaperContent(primary_image=slot("primaryImage"))
    if variant == ContentVariant.LIVE:
        return LiveContent(
            primary_video=slot("primaryVideo"),
            duration=data.get("videoDuration"),
            quality=data.get("videoQuality"),
        )
    if variant == ContentVariant.DOUBLE:
        return DoubleContent(image_a=slot("imageA"), image_b=slot("imageB"))
    return ParallaxContent(config=ParallaxConfig.model_validate(slot("parallaxConfig")))


# ── Records ──────────────────────────────────────────────────────


class ContentRecord(WireModel):
    """A stored content record as returned by the persistence collaborator."""

    id: str
    title: str
    description: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    downloads: int = 0
    featured: bool = False
    active: bool = True
    thumbnail_url: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    content: VariantContent

    @property
    def variant(self) -> ContentVariant:
        return self.content.kind

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> ContentRecord:
        """Parse the flat record shape produced by ``to_wire``.

        Raises:
            ValueError: If a field is invalid or a slot of the record's
                variant is missing.
        """
        variant = data.get("variant") or ContentVariant.WALLPAPER
        known = {
            "id", "title", "description", "category", "tags", "downloads",
            "featured", "active", "thumbnailUrl", "createdAt", "updatedAt",
        }
        fields = {k: v for k, v in data.items() if k in known and v is not None}
        return cls.model_validate({**fields, "content": content_from_flat(variant, data)})

    def to_wire(self) -> dict[str, Any]:
        flat = self.model_dump(mode="json", by_alias=True, exclude={"content"})
        flat["variant"] = self.variant.value
        flat.update(content_to_flat(self.content))
        return flat


class SubmissionPayload(WireModel):
    """Validated payload handed to the persistence collaborator.

    Exactly the slot fields of ``variant`` are populated.
    """

    title: str
    description: str = ""
    variant: ContentVariant
    category: str
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    active: bool = True
    thumbnail_url: str | None = None
    primary_image: str | None = None
    primary_video: str | None = None
    video_duration: float | None = None
    video_quality: str | None = None
    image_a: str | None = None
    image_b: str | None = None
    parallax_config: ParallaxConfig | None = None


class ContentDraft(WireModel):
    """Flat, editable form of a content record.

    Every slot of every variant is present, so changing ``variant`` keeps
    previously entered data. Validation ignores slots that do not belong to
    the chosen variant.
    """

    title: str = ""
    description: str = ""
    variant: ContentVariant | None = None
    category: str = ""
    tags: str | list[str] = ""
    featured: bool = False
    active: bool = True
    thumbnail_url: str = ""
    primary_image: str = ""
    primary_video: str = ""
    video_duration: float | None = None
    video_quality: str | None = None
    image_a: str = ""
    image_b: str = ""
    parallax_config: ParallaxConfig | None = None

    @classmethod
    def from_record(cls, record: ContentRecord) -> ContentDraft:
        """Open an existing record for editing."""
        draft = cls(
            title=record.title,
            description=record.description,
            variant=record.variant,
            category=record.category,
            tags=", ".join(record.tags),
            featured=record.featured,
            active=record.active,
            thumbnail_url=record.thumbnail_url,
        )
        content = record.content
        if isinstance(content, WallpaperContent):
            draft.primary_image = content.primary_image
        elif isinstance(content, LiveContent):
            draft.primary_video = content.primary_video
            draft.video_duration = content.duration
            draft.video_quality = content.quality
        elif isinstance(content, DoubleContent):
            draft.image_a = content.image_a
            draft.image_b = content.image_b
        else:
            draft.parallax_config = content.config
        return draft


class RecordFilter(WireModel):
    """Listing filter for content records."""

    page: int = 1
    limit: int = 20
    variant: ContentVariant | None = None
    category: str | None = None
    query: str | None = None
    active: bool | None = None
