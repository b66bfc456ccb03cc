"""
bpmnplus/patterns.py

Tolerant regex helpers for pulling attributes and tag bodies out of raw
BPMN-like markup.

This is pattern matching, not a grammar: tag names are case-sensitive,
any ``prefix:`` namespace qualifier is accepted and ignored, matching is
non-greedy and spans lines.  Fragments that do not match are simply not
returned.  Nested tags sharing a name (e.g. a ``task`` inside a
``subProcess`` inside another ``task``) are not guaranteed to pair up
correctly.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import List, Optional, Pattern, Tuple

# Optional namespace prefix in front of a tag name, e.g. ``bpmn:``
_PREFIX = r"(?:[\w.-]+:)?"

# Predefined XML entities and terminated character references only
_ENTITY_RE = re.compile(r"&(amp|lt|gt|quot|apos|#[0-9]+|#x[0-9a-fA-F]+);")
_NAMED_ENTITIES = {"amp": "&", "lt": "<", "gt": ">", "quot": "\"", "apos": "'"}

_CDATA_RE = re.compile(r"\A<!\[CDATA\[(.*)\]\]>\Z", re.DOTALL)


# ═══════════════════════════════════════════════════════════
# Pattern construction (compiled once per tag)
# ═══════════════════════════════════════════════════════════

@lru_cache(maxsize=None)
def _attr_pattern(name: str) -> Pattern[str]:
    return re.compile(
        r"(?<![\w:.-])" + re.escape(name) + r"""\s*=\s*(?:"([^"]*)"|'([^']*)')"""
    )


@lru_cache(maxsize=None)
def _opening_pattern(tag: str) -> Pattern[str]:
    # ``[^>]*?`` cannot cross ``>``, so a match never spans two tags
    return re.compile(r"<" + _PREFIX + re.escape(tag) + r"\b([^>]*?)(?<!/)>", re.DOTALL)


@lru_cache(maxsize=None)
def _block_pattern(tag: str) -> Pattern[str]:
    name = re.escape(tag)
    return re.compile(
        r"<" + _PREFIX + name + r"\b([^>]*?)(?<!/)>(.*?)</" + _PREFIX + name + r"\s*>",
        re.DOTALL,
    )


@lru_cache(maxsize=None)
def _self_closing_pattern(tag: str) -> Pattern[str]:
    return re.compile(r"<" + _PREFIX + re.escape(tag) + r"\b([^>]*?)/>", re.DOTALL)


@lru_cache(maxsize=None)
def _element_pattern(tag: str) -> Pattern[str]:
    name = re.escape(tag)
    return re.compile(
        r"<" + _PREFIX + name + r"\b([^>]*?)"
        r"(?:/>|(?<!/)>(.*?)</" + _PREFIX + name + r"\s*>)",
        re.DOTALL,
    )


# ═══════════════════════════════════════════════════════════
# Attribute extraction
# ═══════════════════════════════════════════════════════════

def _is_xml_char(code: int) -> bool:
    return (
        code in (0x9, 0xA, 0xD)
        or 0x20 <= code <= 0xD7FF
        or 0xE000 <= code <= 0xFFFD
        or 0x10000 <= code <= 0x10FFFF
    )


def _decode_entity(m: re.Match) -> str:
    ref = m.group(1)
    if not ref.startswith("#"):
        return _NAMED_ENTITIES[ref]
    code = int(ref[2:], 16) if ref[1] == "x" else int(ref[1:])
    return chr(code) if _is_xml_char(code) else m.group(0)


def unescape_xml(text: str) -> str:
    """Decode XML entity references in *text*.

    Only the five predefined entities and ``;``-terminated character
    references naming a legal XML character are decoded.  Anything else,
    such as ``&copy`` or ``&nbsp;``, is left as written.
    """
    if "&" not in text:
        return text
    return _ENTITY_RE.sub(_decode_entity, text)


def _text_value(body: str) -> str:
    body = body.strip()
    m = _CDATA_RE.match(body)
    if m:
        return m.group(1).strip()
    return unescape_xml(body)


def extract_attr(attrs: str, name: str) -> Optional[str]:
    """Return the quoted value of attribute *name* in an attribute span.

    Args:
        attrs: Text between the tag name and the closing ``>``.
        name: Attribute name, matched as a whole word.

    Returns:
        The unquoted value with entity references decoded (possibly
        empty), or ``None`` when absent.
    """
    if not attrs:
        return None
    m = _attr_pattern(name).search(attrs)
    if not m:
        return None
    value = m.group(1) if m.group(1) is not None else m.group(2)
    return unescape_xml(value)


def extract_number(attrs: str, name: str) -> Optional[float]:
    """Return attribute *name* as a float, or ``None`` if missing or non-numeric."""
    value = extract_attr(attrs, name)
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    # float() accepts "nan" and "inf"
    if not math.isfinite(number):
        return None
    return number


# ═══════════════════════════════════════════════════════════
# Tag extraction
# ═══════════════════════════════════════════════════════════

def find_opening_tags(text: str, tag: str) -> List[str]:
    """Return the attribute span of every non-self-closing opening *tag*."""
    return [m.group(1) for m in _opening_pattern(tag).finditer(text)]


def find_blocks(text: str, tag: str) -> List[Tuple[str, str]]:
    """Return ``(attrs, body)`` for every block-form ``<tag ...>body</tag>``.

    Self-closing occurrences are never reported here, and never swallow the
    body of a later block of the same tag.
    """
    return [(m.group(1), m.group(2)) for m in _block_pattern(tag).finditer(text)]


def find_self_closing(text: str, tag: str) -> List[str]:
    """Return the attribute span of every self-closing ``<tag .../>``."""
    return [m.group(1) for m in _self_closing_pattern(tag).finditer(text)]


def find_elements(text: str, tag: str) -> List[Tuple[str, Optional[str]]]:
    """Return both forms of *tag* in document order.

    Returns:
        ``(attrs, body)`` pairs; ``body`` is ``None`` for self-closing tags.
    """
    return [(m.group(1), m.group(2)) for m in _element_pattern(tag).finditer(text)]


def find_texts(text: str, tag: str) -> List[str]:
    """Return the stripped inner text of every block-form *tag*.

    A body wrapped in ``<![CDATA[...]]>`` is returned unwrapped and
    undecoded; any other body is passed through ``unescape_xml``.
    """
    return [_text_value(body) for _, body in find_blocks(text, tag)]
