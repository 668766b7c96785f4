"""Category kinds folded into names, and the category record."""

from wallstudio.categories.codec import CategoryKind, decode, encode
from wallstudio.categories.models import CategoryRecord

__all__ = ["CategoryKind", "CategoryRecord", "decode", "encode"]
