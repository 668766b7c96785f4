"""Per-variant data slots and their upload constraints."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from wallstudio.content.models import ContentVariant

DEFAULT_BASE_LIMIT_MB = 10
VIDEO_LIMIT_MULTIPLIER = 10


class AssetKind(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    STRUCTURED = "structured"


class SlotSpec(BaseModel):
    """A named data slot of a content variant."""

    model_config = ConfigDict(frozen=True)

    slot_name: str
    accepted_kinds: tuple[AssetKind, ...]
    size_ceiling: int | None  # MB; None for structured slots
    is_required: bool = True

    @property
    def is_structured(self) -> bool:
        return AssetKind.STRUCTURED in self.accepted_kinds


# (slot name, kind, multiplier of the base limit)
_SLOT_TABLE: dict[ContentVariant, tuple[tuple[str, AssetKind, int | None], ...]] = {
    ContentVariant.WALLPAPER: (("primaryImage", AssetKind.IMAGE, 1),),
    ContentVariant.LIVE: (("primaryVideo", AssetKind.VIDEO, VIDEO_LIMIT_MULTIPLIER),),
    ContentVariant.DOUBLE: (
        ("imageA", AssetKind.IMAGE, 1),
        ("imageB", AssetKind.IMAGE, 1),
    ),
    ContentVariant.PARALLAX: (("layerConfig", AssetKind.STRUCTURED, None),),
}


def required_slots(
    variant: ContentVariant | str,
    base_limit: int = DEFAULT_BASE_LIMIT_MB,
) -> list[SlotSpec]:
    """Return the data slots of ``variant`` in presentation order.

    Args:
        variant: The content variant.
        base_limit: Image size ceiling in MB; video slots get ten times this.

    Raises:
        ValueError: If the variant is unknown.
    """
    variant = ContentVariant(variant)
    return [
        SlotSpec(
            slot_name=name,
            accepted_kinds=(kind,),
            size_ceiling=None if multiplier is None else base_limit * multiplier,
        )
        for name, kind, multiplier in _SLOT_TABLE[variant]
    ]


def slot_names(variant: ContentVariant | str) -> list[str]:
    return [spec.slot_name for spec in required_slots(variant)]
