"""Turn an edited draft into a validated submission and hand it off.

Validation is entirely local. A draft that fails it raises
``ValidationError`` listing every problem, and the persistence collaborator
is never called.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from wallstudio.content.models import (
    ContentDraft,
    ContentRecord,
    ContentVariant,
    ParallaxConfig,
    SubmissionPayload,
)
from wallstudio.content.parallax import config_problems
from wallstudio.content.slots import SlotSpec, required_slots
from wallstudio.errors import ValidationError

if TYPE_CHECKING:
    from wallstudio.backends.base import PersistenceBackend, Session

logger = logging.getLogger(__name__)

# Slot name → ContentDraft attribute
SLOT_ATTRIBUTES = {
    "primaryImage": "primary_image",
    "primaryVideo": "primary_video",
    "imageA": "image_a",
    "imageB": "image_b",
    "layerConfig": "parallax_config",
}


def parse_tags(raw: str | Iterable[str] | None) -> list[str]:
    """Split comma-separated tags, trimming whitespace and dropping empties.

    Order is kept and duplicates are not removed.
    """
    if raw is None:
        return []
    pieces = raw.split(",") if isinstance(raw, str) else raw
    return [piece.strip() for piece in pieces if piece.strip()]


def draft_problems(draft: ContentDraft) -> list[str]:
    """List everything that keeps ``draft`` from being submittable.

    Slots that belong to other variants are ignored even if populated.
    """
    problems: list[str] = []
    if not draft.title.strip():
        problems.append("title is required")
    if not draft.category.strip():
        problems.append("category is required")
    if draft.variant is None:
        problems.append("variant is required")
        return problems

    for spec in required_slots(draft.variant):
        problems.extend(_slot_problems(draft, spec))
    return problems


def assemble(draft: ContentDraft) -> SubmissionPayload:
    """Validate ``draft`` and build its submission payload.

    Raises:
        ValidationError: With every problem found.
    """
    problems = draft_problems(draft)
    if problems:
        raise ValidationError(problems)

    variant = draft.variant
    slot_values: dict[str, Any] = {}
    for spec in required_slots(variant):
        attr = SLOT_ATTRIBUTES[spec.slot_name]
        value = getattr(draft, attr)
        slot_values[attr] = _drop_empty_layers(value) if spec.is_structured else value.strip()
    if variant == ContentVariant.LIVE:
        slot_values["video_duration"] = draft.video_duration
        slot_values["video_quality"] = draft.video_quality

    return SubmissionPayload(
        title=draft.title.strip(),
        description=draft.description,
        variant=variant,
        category=draft.category.strip(),
        tags=parse_tags(draft.tags),
        featured=draft.featured,
        active=draft.active,
        thumbnail_url=draft.thumbnail_url or None,
        **slot_values,
    )


async def submit(
    draft: ContentDraft,
    backend: PersistenceBackend,
    session: Session,
    record_id: str | None = None,
) -> ContentRecord:
    """Validate ``draft`` and create (or, given ``record_id``, update) its record.

    Raises:
        ValidationError: Before any remote call if the draft is incomplete.
        RemoteError: If the collaborator rejects the submission.
    """
    payload = assemble(draft)
    if record_id is None:
        record = await backend.create_record(session, payload)
        logger.info("Submitted new %s record %s", payload.variant, record.id)
    else:
        record = await backend.update_record(session, record_id, payload.to_wire())
        logger.info("Updated %s record %s", payload.variant, record_id)
    return record


def _slot_problems(draft: ContentDraft, spec: SlotSpec) -> list[str]:
    value = getattr(draft, SLOT_ATTRIBUTES[spec.slot_name])
    if spec.is_structured:
        if value is None:
            return ["parallaxConfig needs at least one layer"]
        return config_problems(value)
    if spec.is_required and not value.strip():
        return [f"{spec.slot_name} is required for {draft.variant}"]
    return []


def _drop_empty_layers(config: ParallaxConfig) -> ParallaxConfig:
    """Keep the first layer and every later layer that has an image."""
    layers = tuple(
        layer for i, layer in enumerate(config.layers) if i == 0 or layer.image_url.strip()
    )
    if len(layers) != len(config.layers):
        logger.debug("Dropping %d image-less parallax layer(s)", len(config.layers) - len(layers))
    return config.model_copy(update={"layers": layers})
