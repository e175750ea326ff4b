"""
Cell Rendering - Domain Service

Converts the multi-valued fields of a search hit into the string cells of
one output row.
"""

import logging
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

MULTI_VALUE_SEPARATOR = "\n"


class ScalarKind(Enum):
    """Kinds of scalar values a document field may hold"""
    TEXT = "text"
    BOOLEAN = "boolean"
    NUMBER = "number"
    UNKNOWN = "unknown"


def classify(item: Any) -> ScalarKind:
    """Get the scalar kind of a single field item"""
    if isinstance(item, str):
        return ScalarKind.TEXT
    # bool is a subclass of int, so it must be checked first
    if isinstance(item, bool):
        return ScalarKind.BOOLEAN
    if isinstance(item, (int, float)):
        return ScalarKind.NUMBER
    return ScalarKind.UNKNOWN


def render_item(item: Any) -> str:
    """
    Render one scalar item to text.

    Numbers use fixed decimal notation (``%f``) since the source serves every
    JSON number as floating point. Unknown kinds render empty and are logged.
    """
    kind = classify(item)

    if kind is ScalarKind.TEXT:
        return item
    if kind is ScalarKind.BOOLEAN:
        return "true" if item else "false"
    if kind is ScalarKind.NUMBER:
        return "%f" % item

    logger.error("unexpected type %s", type(item).__name__)
    return ""


def render_cell(value: Optional[Any], separator: str = MULTI_VALUE_SEPARATOR) -> str:
    """Render a field value, single or multi-valued, into one cell"""
    if value is None:
        return ""
    if not isinstance(value, (list, tuple)):
        value = [value]
    return separator.join(render_item(item) for item in value)


def render_row(hit_fields: Optional[Mapping[str, Any]], fields: Sequence[str]) -> List[str]:
    """
    Build the positional row for a hit.

    Args:
        hit_fields: The ``fields`` mapping of a search hit (may be missing)
        fields: Configured field names, in output column order

    Returns:
        One cell per configured field; missing fields are empty strings
    """
    hit_fields = hit_fields or {}
    return [render_cell(hit_fields.get(name)) for name in fields]


def header_row(fields: Iterable[str]) -> List[str]:
    return list(fields)
