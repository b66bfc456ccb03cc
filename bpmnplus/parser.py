"""
bpmnplus/parser.py

Regex-based structural parser for loosely-structured BPMN 2.0 XML.

Walks a raw document and extracts the definitions id, every ``process``
with its flow nodes and sequence flows, and the document-wide diagram
shape hints.  Non-standard tags listed in the custom tag table are mapped
onto standard element kinds.  Anything the patterns do not recognise is
skipped silently; missing identifiers are replaced by generated
placeholders.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from bpmnplus.patterns import (
    extract_attr,
    extract_number,
    find_blocks,
    find_elements,
    find_opening_tags,
    find_self_closing,
    find_texts,
)
from models import (
    DEFAULT_TABLES,
    BpmnDocument,
    ConversionTables,
    DocumentDefaults,
    Element,
    Flow,
    IdGenerator,
    Process,
    Shape,
    random_id,
)

log = logging.getLogger(__name__)

# Label bounds live inside BPMNLabel and must not be read as node bounds
_LABEL_RE = re.compile(
    r"<(?:[\w.-]+:)?BPMNLabel\b[^>]*?(?:/>|(?<!/)>.*?</(?:[\w.-]+:)?BPMNLabel\s*>)",
    re.DOTALL,
)


class NoProcessFoundError(ValueError):
    """Raised when a document contains no recognisable process."""


# ═══════════════════════════════════════════════════════════
# Element collection
# ═══════════════════════════════════════════════════════════

class _ElementCollector:
    """Accumulates the elements of one process, deduplicated by id.

    The first declaration of an id wins, except that a block-form
    declaration replaces an earlier self-closing one in place.
    """

    def __init__(self) -> None:
        self.elements: List[Element] = []
        self._index: Dict[str, int] = {}
        self._self_closing: set = set()

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._index

    def add_block(self, element: Element) -> None:
        pos = self._index.get(element.id)
        if pos is None:
            self._index[element.id] = len(self.elements)
            self.elements.append(element)
        elif element.id in self._self_closing:
            self.elements[pos] = element
            self._self_closing.discard(element.id)

    def add_self_closing(self, element: Element) -> None:
        if element.id in self._index:
            return
        self._index[element.id] = len(self.elements)
        self.elements.append(element)
        self._self_closing.add(element.id)


def _block_element(kind: str, attrs: str, body: str, multi_instance: bool) -> Optional[Element]:
    element_id = extract_attr(attrs, "id")
    if not element_id:
        return None
    return Element(
        kind=kind,
        id=element_id,
        name=extract_attr(attrs, "name") or "",
        incoming=tuple(find_texts(body, "incoming")),
        outgoing=tuple(find_texts(body, "outgoing")),
        is_multi_instance=multi_instance,
    )


def _parse_elements(body: str, tables: ConversionTables) -> List[Element]:
    """Extract standard and custom-tag flow nodes from a process body."""
    collector = _ElementCollector()

    # ── Standard vocabulary ──
    for tag in tables.flow_node_tags:
        for attrs, inner in find_blocks(body, tag):
            element = _block_element(tag, attrs, inner, False)
            if element is not None:
                collector.add_block(element)
        for attrs in find_self_closing(body, tag):
            element_id = extract_attr(attrs, "id")
            if element_id:
                collector.add_self_closing(
                    Element(kind=tag, id=element_id, name=extract_attr(attrs, "name") or "")
                )

    # ── Custom tags (never override standard declarations) ──
    for tag, mapping in tables.custom_tags.items():
        for attrs, inner in find_blocks(body, tag):
            element = _block_element(
                mapping.standard_kind, attrs, inner, mapping.forces_multi_instance
            )
            if element is not None and element.id not in collector:
                collector.add_block(element)
                log.debug("Mapped custom tag <%s id=%r> to %s", tag, element.id, mapping.standard_kind)

    return collector.elements


def _parse_flows(body: str, id_gen: IdGenerator) -> List[Flow]:
    """Extract sequence flows (block and self-closing) in document order."""
    flows: List[Flow] = []
    for attrs, inner in find_elements(body, "sequenceFlow"):
        condition = None
        if inner:
            conditions = find_texts(inner, "conditionExpression")
            if conditions:
                condition = conditions[0]
        flows.append(Flow(
            id=extract_attr(attrs, "id") or id_gen("Flow"),
            source_ref=extract_attr(attrs, "sourceRef") or "",
            target_ref=extract_attr(attrs, "targetRef") or "",
            name=extract_attr(attrs, "name") or "",
            condition=condition,
        ))
    return flows


def _parse_shapes(content: str, id_gen: IdGenerator) -> List[Shape]:
    """Extract every BPMNShape that carries node bounds."""
    shapes: List[Shape] = []
    for attrs, inner in find_blocks(content, "BPMNShape"):
        bpmn_element = extract_attr(attrs, "bpmnElement")
        if not bpmn_element:
            continue
        bounds = find_elements(_LABEL_RE.sub("", inner), "Bounds")
        if not bounds:
            continue
        b_attrs = bounds[0][0]
        shapes.append(Shape(
            bpmn_element=bpmn_element,
            id=extract_attr(attrs, "id") or id_gen("Shape"),
            x=extract_number(b_attrs, "x"),
            y=extract_number(b_attrs, "y"),
            width=extract_number(b_attrs, "width"),
            height=extract_number(b_attrs, "height"),
        ))
    return shapes


# ═══════════════════════════════════════════════════════════
# Main parser
# ═══════════════════════════════════════════════════════════

def parse_document(
    content: str,
    tables: ConversionTables = DEFAULT_TABLES,
    id_gen: Optional[IdGenerator] = None,
    defaults: Optional[DocumentDefaults] = None,
) -> BpmnDocument:
    """Parse raw BPMN-like markup into a ``BpmnDocument``.

    Args:
        content: Full document text.
        tables: Tag vocabulary and custom tag mappings.
        id_gen: Placeholder id generator, called with a prefix
            (``Process``, ``Flow``, ``Shape``).  Defaults to random ids.
        defaults: Placeholder definitions id and process name.

    Returns:
        The parsed document.  It may contain zero processes; see
        ``require_processes``.
    """
    id_gen = id_gen or random_id
    defaults = defaults or DocumentDefaults()

    definitions_id = defaults.definitions_id
    definitions = find_opening_tags(content, "definitions")
    if definitions:
        definitions_id = extract_attr(definitions[0], "id") or definitions_id

    processes: List[Process] = []
    seen_ids: set = set()
    for attrs, body in find_blocks(content, "process"):
        process_id = extract_attr(attrs, "id")
        if process_id in seen_ids:
            log.debug("Repeated process id %r replaced by a placeholder", process_id)
            process_id = None
        if not process_id:
            process_id = id_gen("Process")
        seen_ids.add(process_id)
        proc = Process(
            id=process_id,
            name=extract_attr(attrs, "name") or defaults.process_name,
            elements=tuple(_parse_elements(body, tables)),
            flows=tuple(_parse_flows(body, id_gen)),
        )
        log.debug(
            "Process %r: %d elements, %d flows",
            proc.id, len(proc.elements), len(proc.flows),
        )
        processes.append(proc)

    return BpmnDocument(
        definitions_id=definitions_id,
        processes=tuple(processes),
        shapes=tuple(_parse_shapes(content, id_gen)),
    )


def require_processes(document: BpmnDocument, filename: str = "<memory>") -> BpmnDocument:
    """Return *document* unchanged, or raise if it has no process.

    Raises:
        NoProcessFoundError: If no process container was recognised.
    """
    if not document.processes:
        raise NoProcessFoundError(f"No process found in {filename}")
    return document
