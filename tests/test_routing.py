"""Tests for orthogonal connector routing in bpmnplus/routing.py."""
from __future__ import annotations

import pytest

from bpmnplus.routing import (
    Face,
    boundary_point,
    route_between,
    route_connector,
    route_flows,
    select_faces,
)
from models import BpmnDocument, Element, Flow, Process, ResolvedShape


def _box(element_id, x, y, w=100, h=80) -> ResolvedShape:
    return ResolvedShape(element_id, "task", f"{element_id}_di", x, y, w, h)


# ─────────────────────────────────────────────────────────
# Faces
# ─────────────────────────────────────────────────────────


class TestSelectFaces:
    def test_right_of(self):
        assert select_faces(_box("a", 100, 100), _box("b", 400, 120)) == (Face.RIGHT, Face.LEFT)

    def test_left_of(self):
        assert select_faces(_box("a", 400, 100), _box("b", 100, 120)) == (Face.LEFT, Face.RIGHT)

    def test_below(self):
        assert select_faces(_box("a", 100, 100), _box("b", 120, 400)) == (Face.BOTTOM, Face.TOP)

    def test_above(self):
        assert select_faces(_box("a", 100, 400), _box("b", 120, 100)) == (Face.TOP, Face.BOTTOM)

    def test_tie_goes_horizontal(self):
        assert select_faces(_box("a", 100, 100), _box("b", 300, 300)) == (Face.RIGHT, Face.LEFT)

    def test_same_center(self):
        assert select_faces(_box("a", 100, 100), _box("b", 100, 100)) == (Face.RIGHT, Face.LEFT)


class TestBoundaryPoint:
    def test_faces(self):
        box = _box("a", 100, 100, 100, 80)
        assert boundary_point(box, Face.RIGHT) == (200, 140)
        assert boundary_point(box, Face.LEFT) == (100, 140)
        assert boundary_point(box, Face.BOTTOM) == (150, 180)
        assert boundary_point(box, Face.TOP) == (150, 100)

    def test_unknown_face(self):
        with pytest.raises(ValueError):
            boundary_point(_box("a", 0, 0), "diagonal")


# ─────────────────────────────────────────────────────────
# Waypoints
# ─────────────────────────────────────────────────────────


class TestRouteBetween:
    def test_aligned_horizontal_is_straight(self):
        assert route_between((136, 118), Face.RIGHT, (200, 128), Face.LEFT) == [
            (136, 118), (200, 128),
        ]

    def test_horizontal_jog(self):
        assert route_between((100, 100), Face.RIGHT, (300, 200), Face.LEFT) == [
            (100, 100), (200, 100), (200, 200), (300, 200),
        ]

    def test_vertical_jog(self):
        assert route_between((100, 100), Face.BOTTOM, (200, 300), Face.TOP) == [
            (100, 100), (100, 200), (200, 200), (200, 300),
        ]

    def test_threshold_is_exclusive(self):
        assert len(route_between((0, 0), Face.RIGHT, (100, 10), Face.LEFT)) == 2
        assert len(route_between((0, 0), Face.RIGHT, (100, 10.5), Face.LEFT)) == 4

    def test_custom_threshold(self):
        assert len(route_between((0, 0), Face.RIGHT, (100, 30), Face.LEFT, jog_threshold=50)) == 2

    def test_l_bend_from_horizontal(self):
        assert route_between((100, 100), Face.RIGHT, (300, 300), Face.TOP) == [
            (100, 100), (300, 100), (300, 300),
        ]

    def test_l_bend_from_vertical(self):
        assert route_between((100, 100), Face.BOTTOM, (300, 300), Face.LEFT) == [
            (100, 100), (100, 300), (300, 300),
        ]

    def test_no_rounding(self):
        points = route_between((0.5, 0), Face.RIGHT, (100.25, 50), Face.LEFT)
        assert points[1] == (50.375, 0)


class TestRouteConnector:
    def test_symmetry(self):
        a = _box("a", 100, 100)
        b = _box("b", 400, 250)
        forward = route_connector(a, b)
        backward = route_connector(b, a)
        assert forward[0] == backward[-1]
        assert forward[-1] == backward[0]
        assert len(forward) == len(backward)

    def test_at_least_two_points(self):
        assert len(route_connector(_box("a", 100, 100), _box("b", 300, 100))) >= 2

    def test_missing_coordinates(self):
        unplaced = ResolvedShape("u", "task")
        with pytest.raises(ValueError, match="missing coordinates"):
            route_connector(_box("a", 100, 100), unplaced)


class TestRouteFlows:
    @pytest.fixture()
    def doc(self):
        return BpmnDocument(
            definitions_id="D",
            processes=(Process(
                id="P",
                name="P",
                elements=(Element("task", "a"), Element("task", "b"), Element("task", "c")),
                flows=(
                    Flow("f1", "a", "b"),
                    Flow("f2", "b", "ghost"),
                    Flow("f3", "b", "c"),
                    Flow("f4", "", ""),
                ),
            ),),
        )

    def test_dangling_and_unplaced_omitted(self, doc):
        resolved = {
            "a": _box("a", 100, 100),
            "b": _box("b", 300, 100),
            "c": ResolvedShape("c", "task"),
        }
        routes = route_flows(doc, resolved)
        assert [flow.id for flow, _ in routes] == ["f1"]
        assert routes[0][1] == [(200, 140), (300, 140)]

    def test_flows_of_later_processes_routed(self, doc):
        two = BpmnDocument(
            definitions_id="D",
            processes=doc.processes + (Process("Q", "Q", flows=(Flow("g1", "b", "a"),)),),
        )
        resolved = {"a": _box("a", 100, 100), "b": _box("b", 300, 100)}
        assert [flow.id for flow, _ in route_flows(two, resolved)] == ["f1", "g1"]
