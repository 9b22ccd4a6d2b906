"""
Normalization of raw catalog billboard records.

Catalog rows arrive as loosely-typed mappings with inconsistent key casing
(``ID`` / ``id``, ``Size`` / ``size``, ``Faces_Count`` / ``faces``).  This is
the single place those variants are resolved; the engines only ever see
``BillboardLineItem``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from billboard_kernel.domain.values import BillboardLineItem
from billboard_kernel.exceptions import InvalidPricingInputError
from billboard_kernel.logging_config import get_logger

logger = get_logger("domain.normalize")

_ID_KEYS = ("billboard_id", "ID", "id", "Id")
_SIZE_KEYS = ("size_label", "Size", "size")
_FACES_KEYS = ("face_count", "Faces_Count", "faces_count", "faces")
_LEVEL_KEYS = ("level", "Level")
_SIZE_ID_KEYS = ("size_id", "Size_ID", "Size_Id")


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _face_count(raw: Any) -> int:
    # Catalog rows with a missing or non-numeric face count are single-faced.
    try:
        count = int(raw)
    except (TypeError, ValueError):
        return 1
    return count if count >= 1 else 1


def normalize_billboard(record: Mapping[str, Any] | BillboardLineItem) -> BillboardLineItem:
    """
    Build a ``BillboardLineItem`` from a raw catalog record.

    Raises:
        InvalidPricingInputError: If the record carries no identifier.
    """
    if isinstance(record, BillboardLineItem):
        return record

    billboard_id = _first(record, _ID_KEYS)
    if billboard_id is None:
        raise InvalidPricingInputError("billboard_id", None, "record has no identifier")

    level = _first(record, _LEVEL_KEYS)
    item = BillboardLineItem(
        billboard_id=str(billboard_id),
        size_label=str(_first(record, _SIZE_KEYS) or ""),
        face_count=_face_count(_first(record, _FACES_KEYS)),
        level=str(level) if level is not None else None,
        size_id=_first(record, _SIZE_ID_KEYS),
    )
    logger.debug("billboard_normalized", extra={
        "billboard_id": item.billboard_id,
        "size_label": item.size_label,
        "level": item.level,
    })
    return item


def normalize_billboards(
    records: Iterable[Mapping[str, Any] | BillboardLineItem],
) -> tuple[BillboardLineItem, ...]:
    """Normalize a selection, preserving order."""
    return tuple(normalize_billboard(r) for r in records)
