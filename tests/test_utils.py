"""Tests for the helpers in utils.py."""
from __future__ import annotations

from pathlib import Path

import pytest

from utils import escape_xml, format_number, is_converted_name, output_path_for, round_half_up


class TestEscapeXml:
    def test_all_metacharacters(self):
        assert escape_xml("""<a href="x">Tom & Jerry's</a>""") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&apos;s&lt;/a&gt;"
        )

    def test_ampersand_first(self):
        assert escape_xml("&lt;") == "&amp;lt;"

    def test_none_and_empty(self):
        assert escape_xml(None) == ""
        assert escape_xml("") == ""

    def test_plain_text_unchanged(self):
        assert escape_xml("Review") == "Review"


class TestRounding:
    @pytest.mark.parametrize("value, expected", [
        (12.5, 13),
        (12.4999, 12),
        (13.5, 14),
        (-0.5, 0),
        (-1.5, -1),
        (-1.6, -2),
        (100.0, 100),
    ])
    def test_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_format_number(self):
        assert format_number(167.5) == "168"
        assert format_number(36.0) == "36"


class TestOutputNames:
    def test_next_to_input(self):
        assert output_path_for("diagrams/order.bpmn") == Path("diagrams/order_camunda.bpmn")

    def test_output_dir(self, tmp_path):
        assert output_path_for("diagrams/order.bpmn", output_dir=tmp_path) == tmp_path / "order_camunda.bpmn"

    def test_custom_suffix(self):
        assert output_path_for("order.xml", "_zeebe") == Path("order_zeebe.xml")

    def test_no_extension(self):
        assert output_path_for("order") == Path("order_camunda.bpmn")

    def test_converted_name(self):
        assert is_converted_name("order_camunda.bpmn")
        assert not is_converted_name("order.bpmn")
        assert is_converted_name(Path("x") / "order_zeebe.bpmn", "_zeebe")

    def test_empty_suffix_never_converted(self):
        assert not is_converted_name("order.bpmn", "")
