"""Category names that carry their content kind as a prefix.

The persistence layer only stores a single ``name`` string per category, so
the kind is folded into it: ``"QT_Motivation"`` is a quote category called
"Motivation", ``"ST_Ocean"`` a stock category called "Ocean", and a name with
no known prefix is a wallpaper category.

A wallpaper category whose display name itself starts with ``QT_`` or ``ST_``
cannot be told apart from a quote/stock one; such names do not round-trip.
"""

from __future__ import annotations

import logging
from enum import StrEnum

logger = logging.getLogger(__name__)


class CategoryKind(StrEnum):
    WALLPAPER = "WALLPAPER"
    QUOTE = "QUOTE"
    STOCK = "STOCK"


PREFIXES: dict[CategoryKind, str] = {
    CategoryKind.WALLPAPER: "",
    CategoryKind.QUOTE: "QT_",
    CategoryKind.STOCK: "ST_",
}

# Order in which prefixes are tried when decoding.
DECODE_ORDER = (CategoryKind.QUOTE, CategoryKind.STOCK)


def prefix(kind: CategoryKind | str) -> str:
    return PREFIXES[CategoryKind(kind)]


def encode(display_name: str, kind: CategoryKind | str = CategoryKind.WALLPAPER) -> str:
    """Fold ``kind`` into a storage name."""
    kind = CategoryKind(kind)
    storage_name = prefix(kind) + display_name
    if kind == CategoryKind.WALLPAPER and is_ambiguous(display_name):
        logger.warning(
            "Category %r starts with a reserved prefix and will decode as another kind",
            display_name,
        )
    return storage_name


def decode(storage_name: str) -> tuple[CategoryKind, str]:
    """Split a storage name into ``(kind, display_name)``.

    The matched prefix is removed at its first occurrence.
    """
    for kind in DECODE_ORDER:
        marker = PREFIXES[kind]
        if storage_name.startswith(marker):
            return kind, storage_name.replace(marker, "", 1)
    return CategoryKind.WALLPAPER, storage_name


def is_ambiguous(display_name: str) -> bool:
    """True if a wallpaper category with this display name would not round-trip."""
    return any(display_name.startswith(PREFIXES[kind]) for kind in DECODE_ORDER)
