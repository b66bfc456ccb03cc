"""
bpmnplus/geometry.py

Diagram geometry resolution.

Turns the source's shape hints into absolute top-left rectangles:

    1. Size defaults    → fill in a missing width/height from the kind table
    2. Center detection → a hint with neither width nor height records the
                          node's center, not its top-left corner
    3. Global offset    → shift everything so the diagram starts at the
                          configured margin (never shifted towards the origin)

Each step returns new ``ResolvedShape`` objects.
"""

from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, Optional, Tuple

from debug_trace import trace
from models import DEFAULT_TABLES, BpmnDocument, ConversionTables, ResolvedShape, Shape

DEFAULT_MARGIN = 100.0


def default_size(kind: str, tables: ConversionTables = DEFAULT_TABLES) -> Tuple[float, float]:
    """Return the default ``(width, height)`` for an element kind."""
    return tables.dimensions.get(kind, tables.default_size)


def resolve_shape(
    element_id: str,
    kind: str,
    shape: Optional[Shape],
    tables: ConversionTables = DEFAULT_TABLES,
) -> ResolvedShape:
    """Resolve one element's rectangle before the global offset.

    Args:
        element_id: Id of the decorated element.
        kind: The element's normalized kind, used for size defaults.
        shape: The matching shape hint, or ``None`` if there is none.
        tables: Dimension defaults.

    Returns:
        A ``ResolvedShape``; without a hint it carries no geometry at all.
    """
    if shape is None:
        return ResolvedShape(element_id=element_id, kind=kind)

    dw, dh = default_size(kind, tables)
    w = shape.width if shape.width is not None else dw
    h = shape.height if shape.height is not None else dh
    x, y = shape.x, shape.y

    if shape.width is None and shape.height is None:
        # Un-sized hints record the center point
        if x is not None:
            x -= w / 2
        if y is not None:
            y -= h / 2

    return ResolvedShape(
        element_id=element_id,
        kind=kind,
        di_id=f"{element_id}_di",
        x=x,
        y=y,
        w=w,
        h=h,
    )


def compute_offset(
    shapes: Iterable[ResolvedShape], margin: float = DEFAULT_MARGIN
) -> Tuple[float, float]:
    """Compute the ``(off_x, off_y)`` that moves the diagram to *margin*.

    Each axis is handled separately and only considers shapes that have a
    coordinate on that axis.  Offsets are never negative.
    """
    shapes = list(shapes)
    xs = [s.x for s in shapes if s.x is not None]
    ys = [s.y for s in shapes if s.y is not None]
    off_x = max(0.0, margin - min(xs)) if xs else 0.0
    off_y = max(0.0, margin - min(ys)) if ys else 0.0
    return off_x, off_y


def apply_offset(shape: ResolvedShape, offset: Tuple[float, float]) -> ResolvedShape:
    """Return *shape* translated by *offset*; absent coordinates stay absent."""
    off_x, off_y = offset
    if not off_x and not off_y:
        return shape
    return dataclasses.replace(
        shape,
        x=shape.x + off_x if shape.x is not None else None,
        y=shape.y + off_y if shape.y is not None else None,
    )


def resolve_diagram(
    document: BpmnDocument,
    tables: ConversionTables = DEFAULT_TABLES,
    margin: float = DEFAULT_MARGIN,
) -> Dict[str, ResolvedShape]:
    """Resolve the geometry of every element in *document*.

    Args:
        document: Parsed document.
        tables: Dimension defaults.
        margin: Minimum distance of the diagram from the origin.

    Returns:
        Element id → ``ResolvedShape``, in element order.  Shapes whose
        ``bpmn_element`` matches no element are ignored.
    """
    kinds: Dict[str, str] = {}
    for element in document.iter_elements():
        kinds[element.id] = element.kind

    hints: Dict[str, Shape] = {}
    for shape in document.shapes:
        if shape.bpmn_element in kinds:
            hints[shape.bpmn_element] = shape

    resolved = {
        element_id: resolve_shape(element_id, kind, hints.get(element_id), tables)
        for element_id, kind in kinds.items()
    }

    offset = compute_offset(resolved.values(), margin)
    trace(f"diagram offset ({offset[0]:g}, {offset[1]:g}) over {len(hints)} shapes", "LAYOUT")
    return {element_id: apply_offset(rs, offset) for element_id, rs in resolved.items()}
