"""Content records, variant slots, parallax layers and submission."""

from wallstudio.content.assembler import assemble, parse_tags, submit
from wallstudio.content.models import (
    ContentDraft,
    ContentRecord,
    ContentVariant,
    DoubleContent,
    LiveContent,
    ParallaxConfig,
    ParallaxContent,
    ParallaxLayer,
    RecordFilter,
    SubmissionPayload,
    WallpaperContent,
)
from wallstudio.content.slots import SlotSpec, required_slots

__all__ = [
    "ContentDraft",
    "ContentRecord",
    "ContentVariant",
    "DoubleContent",
    "LiveContent",
    "ParallaxConfig",
    "ParallaxContent",
    "ParallaxLayer",
    "RecordFilter",
    "SlotSpec",
    "SubmissionPayload",
    "WallpaperContent",
    "assemble",
    "parse_tags",
    "required_slots",
    "submit",
]
