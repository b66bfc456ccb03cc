"""Tests for shape resolution and offset normalization in bpmnplus/geometry.py."""
from __future__ import annotations

import pytest

from bpmnplus.geometry import (
    apply_offset,
    compute_offset,
    default_size,
    resolve_diagram,
    resolve_shape,
)
from models import BpmnDocument, Element, Process, ResolvedShape, Shape


def _doc(elements, shapes) -> BpmnDocument:
    return BpmnDocument(
        definitions_id="D",
        processes=(Process(id="P", name="P", elements=tuple(elements)),),
        shapes=tuple(shapes),
    )


class TestDefaultSize:
    @pytest.mark.parametrize("kind", [
        "startEvent", "endEvent", "intermediateCatchEvent",
        "intermediateThrowEvent", "boundaryEvent",
    ])
    def test_events(self, kind):
        assert default_size(kind) == (36, 36)

    @pytest.mark.parametrize("kind", [
        "exclusiveGateway", "parallelGateway", "inclusiveGateway",
        "eventBasedGateway", "complexGateway",
    ])
    def test_gateways(self, kind):
        assert default_size(kind) == (50, 50)

    def test_tasks(self):
        assert default_size("userTask") == (100, 80)
        assert default_size("task") == (100, 80)

    def test_fallback(self):
        assert default_size("callActivity") == (100, 80)


class TestResolveShape:
    def test_no_hint(self):
        rs = resolve_shape("A", "task", None)
        assert rs.di_id is None
        assert not rs.has_coordinates

    def test_full_bounds_kept(self):
        rs = resolve_shape("T", "userTask", Shape("T", "s", 200, 90, 100, 80))
        assert (rs.x, rs.y, rs.w, rs.h) == (200, 90, 100, 80)
        assert rs.di_id == "T_di"

    def test_center_conversion(self):
        rs = resolve_shape("S", "startEvent", Shape("S", "s", 50, 50))
        assert (rs.x, rs.y) == (32, 32)
        assert (rs.w, rs.h) == (36, 36)

    def test_center_conversion_gateway(self):
        rs = resolve_shape("G", "exclusiveGateway", Shape("G", "s", 125, 125))
        assert (rs.x, rs.y, rs.w, rs.h) == (100, 100, 50, 50)

    def test_one_size_present_is_top_left(self):
        rs = resolve_shape("T", "task", Shape("T", "s", 10, 20, width=60))
        assert (rs.x, rs.y, rs.w, rs.h) == (10, 20, 60, 80)

    def test_missing_coordinate(self):
        rs = resolve_shape("T", "task", Shape("T", "s", x=10))
        assert rs.x == -40
        assert rs.y is None
        assert not rs.has_coordinates


class TestOffset:
    def test_shift_up_to_margin(self):
        shapes = [
            ResolvedShape("A", "task", "A_di", 32, 32, 36, 36),
            ResolvedShape("B", "task", "B_di", 200, -10, 100, 80),
        ]
        assert compute_offset(shapes) == (68, 110)

    def test_never_negative(self):
        shapes = [ResolvedShape("A", "task", "A_di", 300, 400, 10, 10)]
        assert compute_offset(shapes) == (0, 0)

    def test_axes_independent(self):
        shapes = [
            ResolvedShape("A", "task", "A_di", x=20),
            ResolvedShape("B", "task", "B_di", y=500),
        ]
        assert compute_offset(shapes) == (80, 0)

    def test_empty(self):
        assert compute_offset([]) == (0, 0)

    def test_custom_margin(self):
        shapes = [ResolvedShape("A", "task", "A_di", 0, 0, 10, 10)]
        assert compute_offset(shapes, margin=20) == (20, 20)

    def test_apply_keeps_absent(self):
        shifted = apply_offset(ResolvedShape("A", "task", "A_di", x=5), (10, 10))
        assert shifted.x == 15
        assert shifted.y is None

    def test_apply_returns_new_object(self):
        original = ResolvedShape("A", "task", "A_di", 1, 2, 3, 4)
        shifted = apply_offset(original, (1, 1))
        assert (original.x, original.y) == (1, 2)
        assert (shifted.x, shifted.y) == (2, 3)


class TestResolveDiagram:
    def test_every_element_seeded(self):
        doc = _doc(
            [Element("startEvent", "S"), Element("task", "T")],
            [Shape("S", "s1", 150, 150, 36, 36)],
        )
        resolved = resolve_diagram(doc)
        assert list(resolved) == ["S", "T"]
        assert resolved["S"].has_coordinates
        assert not resolved["T"].has_coordinates

    def test_unknown_shape_ignored(self):
        doc = _doc([Element("task", "T")], [Shape("ghost", "s", -500, -500, 10, 10)])
        resolved = resolve_diagram(doc)
        assert list(resolved) == ["T"]
        assert not resolved["T"].has_coordinates

    def test_later_shape_overrides(self):
        doc = _doc(
            [Element("task", "T")],
            [Shape("T", "s1", 100, 100, 10, 10), Shape("T", "s2", 300, 300, 20, 20)],
        )
        rs = resolve_diagram(doc)["T"]
        assert (rs.x, rs.y, rs.w) == (300, 300, 20)

    def test_offset_invariant(self):
        doc = _doc(
            [Element("startEvent", "S"), Element("endEvent", "E"), Element("task", "T")],
            [
                Shape("S", "s1", 50, 50),
                Shape("E", "s2", -200, 400, 36, 36),
                Shape("T", "s3", 10, -75, 100, 80),
            ],
        )
        placed = [rs for rs in resolve_diagram(doc).values() if rs.has_coordinates]
        assert min(rs.x for rs in placed) == 100
        assert min(rs.y for rs in placed) == 100

    def test_center_then_offset(self):
        doc = _doc([Element("startEvent", "S")], [Shape("S", "s", 50, 50)])
        rs = resolve_diagram(doc)["S"]
        assert (rs.x, rs.y) == (100, 100)

    def test_elements_of_all_processes(self):
        doc = BpmnDocument(
            definitions_id="D",
            processes=(
                Process("P1", "one", (Element("task", "A"),)),
                Process("P2", "two", (Element("task", "B"),)),
            ),
            shapes=(Shape("B", "s", 400, 400, 100, 80),),
        )
        resolved = resolve_diagram(doc)
        assert set(resolved) == {"A", "B"}
        assert (resolved["B"].x, resolved["B"].y) == (400, 400)
