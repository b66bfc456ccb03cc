"""
utils.py

Utility functions shared by the converter and the command-line runner.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional, Union

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: Optional[str]) -> str:
    """
    Escape the five XML metacharacters for use in text or attribute values.

    ``&`` must be replaced first.

    Args:
        text: The raw string (``None`` is treated as empty)

    Returns:
        The escaped string
    """
    if not text:
        return ""
    for raw, entity in _XML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounded up."""
    return int(math.floor(value + 0.5))


def format_number(value: float) -> str:
    """Format a coordinate for emission as an integer string."""
    return str(round_half_up(value))


def output_path_for(input_path: Union[str, Path], suffix: str = "_camunda",
                    output_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Derive the output file path for a converted document.

    ``diagrams/order.bpmn`` becomes ``diagrams/order_camunda.bpmn``; the
    output keeps the input's extension (``.bpmn`` when it has none).

    Args:
        input_path: Path of the source document
        suffix: Marker appended to the stem
        output_dir: Directory for the output (defaults to the input's)

    Returns:
        The output path
    """
    src = Path(input_path)
    ext = src.suffix or ".bpmn"
    target_dir = Path(output_dir) if output_dir is not None else src.parent
    return target_dir / f"{src.stem}{suffix}{ext}"


def is_converted_name(path: Union[str, Path], suffix: str = "_camunda") -> bool:
    """Check whether a file name already carries the output suffix."""
    return bool(suffix) and suffix in Path(path).name
