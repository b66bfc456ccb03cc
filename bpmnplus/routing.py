"""
bpmnplus/routing.py

Orthogonal connector routing between two resolved rectangles.

Faces are picked with a dominant-axis rule (no collision avoidance), then
the connector is completed with a jog or a single bend.  Coordinates are
kept as floats; rounding happens at emission.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from models import BpmnDocument, Flow, ResolvedShape

Point = Tuple[float, float]

DEFAULT_JOG_THRESHOLD = 10.0


class Face:
    """Rectangle faces a connector can leave or enter through."""
    RIGHT = "right"
    LEFT = "left"
    BOTTOM = "bottom"
    TOP = "top"

    HORIZONTAL = (RIGHT, LEFT)


def select_faces(source: ResolvedShape, target: ResolvedShape) -> Tuple[str, str]:
    """Pick the exit face of *source* and the entry face of *target*.

    The axis with the larger center distance wins; ties go horizontal.
    """
    scx, scy = source.center
    tcx, tcy = target.center
    dx = tcx - scx
    dy = tcy - scy
    if abs(dx) >= abs(dy):
        return (Face.RIGHT, Face.LEFT) if dx >= 0 else (Face.LEFT, Face.RIGHT)
    return (Face.BOTTOM, Face.TOP) if dy >= 0 else (Face.TOP, Face.BOTTOM)


def boundary_point(shape: ResolvedShape, face: str) -> Point:
    """Return the midpoint of *face* on *shape*."""
    if face == Face.RIGHT:
        return shape.right, shape.y + shape.h / 2
    if face == Face.LEFT:
        return shape.x, shape.y + shape.h / 2
    if face == Face.BOTTOM:
        return shape.x + shape.w / 2, shape.bottom
    if face == Face.TOP:
        return shape.x + shape.w / 2, shape.y
    raise ValueError(f"Unknown face: {face!r}")


def route_between(
    start: Point,
    start_face: str,
    end: Point,
    end_face: str,
    jog_threshold: float = DEFAULT_JOG_THRESHOLD,
) -> List[Point]:
    """Build the waypoint list from *start* to *end*.

    Parallel faces get a two-point jog at the midpoint when the endpoints
    are misaligned by more than *jog_threshold*; perpendicular faces get a
    single L-bend.
    """
    x1, y1 = start
    x2, y2 = end
    points: List[Point] = [start]

    start_horizontal = start_face in Face.HORIZONTAL
    end_horizontal = end_face in Face.HORIZONTAL

    if start_horizontal and end_horizontal:
        if abs(y1 - y2) > jog_threshold:
            mid_x = (x1 + x2) / 2
            points.extend([(mid_x, y1), (mid_x, y2)])
    elif not start_horizontal and not end_horizontal:
        if abs(x1 - x2) > jog_threshold:
            mid_y = (y1 + y2) / 2
            points.extend([(x1, mid_y), (x2, mid_y)])
    elif start_horizontal:
        points.append((x2, y1))
    else:
        points.append((x1, y2))

    points.append(end)
    return points


def route_connector(
    source: ResolvedShape,
    target: ResolvedShape,
    jog_threshold: float = DEFAULT_JOG_THRESHOLD,
) -> List[Point]:
    """Route a connector between two resolved rectangles.

    Raises:
        ValueError: If either rectangle has no coordinates.
    """
    if not (source.has_coordinates and target.has_coordinates):
        raise ValueError(
            f"Cannot route {source.element_id!r} -> {target.element_id!r}: missing coordinates"
        )
    start_face, end_face = select_faces(source, target)
    return route_between(
        boundary_point(source, start_face), start_face,
        boundary_point(target, end_face), end_face,
        jog_threshold,
    )


def route_flows(
    document: BpmnDocument,
    resolved: Dict[str, ResolvedShape],
    jog_threshold: float = DEFAULT_JOG_THRESHOLD,
) -> List[Tuple[Flow, List[Point]]]:
    """Route every flow whose endpoints both have coordinates.

    Flows with a dangling or unplaced endpoint are left out; they remain in
    the process body.
    """
    routes: List[Tuple[Flow, List[Point]]] = []
    for flow in document.iter_flows():
        source = resolved.get(flow.source_ref)
        target = resolved.get(flow.target_ref)
        if source is None or target is None:
            continue
        if not (source.has_coordinates and target.has_coordinates):
            continue
        routes.append((flow, route_connector(source, target, jog_threshold)))
    return routes
