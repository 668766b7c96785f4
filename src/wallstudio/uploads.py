"""Upload collaborator results and the pre-upload file gate.

The engine only ever stores the URL an upload returns. Whether a file may be
uploaded into a slot at all is decided here, before any bytes leave the
caller.
"""

from __future__ import annotations

from pathlib import PurePath

from wallstudio.content.slots import AssetKind, SlotSpec
from wallstudio.errors import ValidationError
from wallstudio.wire import WireModel

IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"})
VIDEO_MIME_TYPES = frozenset({"video/mp4", "video/avi", "video/mov", "video/webm", "video/mkv"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mov", ".webm", ".mkv"})

_BY_KIND = {
    AssetKind.IMAGE: (IMAGE_MIME_TYPES, IMAGE_EXTENSIONS),
    AssetKind.VIDEO: (VIDEO_MIME_TYPES, VIDEO_EXTENSIONS),
}


class UploadedAsset(WireModel):
    """What the upload collaborator returns for an accepted file."""

    url: str
    filename: str = ""
    size: int = 0
    mime_type: str = ""


def check_asset(slot: SlotSpec, filename: str, mime_type: str, size_bytes: int) -> AssetKind:
    """Check that a file may be uploaded into ``slot``.

    Returns:
        The asset kind the file was accepted as.

    Raises:
        ValidationError: Wrong type, mismatched extension, or too large.
    """
    if slot.is_structured:
        raise ValidationError(f"{slot.slot_name} does not take a file upload")

    kind = next(
        (k for k in slot.accepted_kinds if mime_type in _BY_KIND[k][0]),
        None,
    )
    if kind is None:
        allowed = ", ".join(sorted(k.value for k in slot.accepted_kinds))
        raise ValidationError(f"Invalid file type {mime_type!r} for {slot.slot_name} ({allowed})")

    extension = PurePath(filename).suffix.lower()
    if extension not in _BY_KIND[kind][1]:
        raise ValidationError(f"Invalid file extension {extension or '(none)'!r}")

    if slot.size_ceiling is not None and size_bytes / 1024 / 1024 >= slot.size_ceiling:
        raise ValidationError(f"File must be smaller than {slot.size_ceiling}MB")
    return kind
