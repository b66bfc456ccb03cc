"""
models.py

Data models and lookup tables for the BPMN dialect converter.

The structural parser produces a ``BpmnDocument``; the diagram resolver
derives one ``ResolvedShape`` per element from it.  All model objects are
frozen: each conversion stage builds new objects rather than mutating the
previous stage's output.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple


# ----------------------------
# Process model
# ----------------------------

@dataclass(frozen=True)
class Element:
    """A flow node inside a process.

    Attributes:
        kind: Normalized BPMN type name (``userTask``, ``exclusiveGateway``...).
        id: Identifier, unique within its process.
        name: Display name (may be empty).
        incoming: Ids of incoming sequence flows, in source order.
        outgoing: Ids of outgoing sequence flows, in source order.
        is_multi_instance: True when the node runs once per collection item.
    """
    kind: str
    id: str
    name: str = ""
    incoming: Tuple[str, ...] = ()
    outgoing: Tuple[str, ...] = ()
    is_multi_instance: bool = False

    @property
    def is_gateway(self) -> bool:
        return "Gateway" in self.kind


@dataclass(frozen=True)
class Flow:
    """A directed sequence flow.  References are not validated."""
    id: str
    source_ref: str = ""
    target_ref: str = ""
    name: str = ""
    condition: Optional[str] = None


@dataclass(frozen=True)
class Process:
    """One executable process unit."""
    id: str
    name: str
    elements: Tuple[Element, ...] = ()
    flows: Tuple[Flow, ...] = ()


@dataclass(frozen=True)
class Shape:
    """Diagram hint for one element, as found in the source document.

    Any of the four bounds values may be missing.
    """
    bpmn_element: str
    id: str
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class BpmnDocument:
    """A parsed source document."""
    definitions_id: str
    processes: Tuple[Process, ...] = ()
    shapes: Tuple[Shape, ...] = ()

    def iter_elements(self):
        """Yield every element of every process, in document order."""
        for proc in self.processes:
            yield from proc.elements

    def iter_flows(self):
        """Yield every flow of every process, in document order."""
        for proc in self.processes:
            yield from proc.flows


@dataclass(frozen=True)
class ResolvedShape:
    """Resolved diagram geometry for one element.

    ``x``/``y`` are top-left and already include the global offset.  An
    element without a usable shape hint keeps ``di_id``, ``x`` and ``y``
    unset and is left out of the diagram.
    """
    element_id: str
    kind: str
    di_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.w / 2, self.y + self.h / 2

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h


# ----------------------------
# Lookup tables
# ----------------------------

@dataclass(frozen=True)
class CustomTagMapping:
    """Maps a non-standard tag onto a standard element kind."""
    standard_kind: str
    forces_multi_instance: bool = False


# Standard flow-node tags, in extraction order.
FLOW_NODE_TAGS: Tuple[str, ...] = (
    "startEvent", "endEvent",
    "userTask", "serviceTask", "scriptTask", "sendTask", "receiveTask",
    "manualTask", "businessRuleTask", "task",
    "exclusiveGateway", "parallelGateway", "inclusiveGateway",
    "eventBasedGateway", "complexGateway",
    "subProcess", "callActivity",
    "intermediateCatchEvent", "intermediateThrowEvent", "boundaryEvent",
)

# Non-standard tags found in vendor dialects.  Custom tags never override
# an element already declared with a standard tag.
CUSTOM_TAG_MAP: Mapping[str, CustomTagMapping] = MappingProxyType({
    "countersignTask":   CustomTagMapping("userTask", True),
    "multiInstanceTask": CustomTagMapping("userTask", True),
})

# Default (width, height) per element kind.
DIMENSIONS: Mapping[str, Tuple[float, float]] = MappingProxyType({
    # ── Events ──
    "startEvent":             (36, 36),
    "endEvent":               (36, 36),
    "intermediateCatchEvent": (36, 36),
    "intermediateThrowEvent": (36, 36),
    "boundaryEvent":          (36, 36),
    # ── Tasks ──
    "task":                   (100, 80),
    "userTask":               (100, 80),
    # ── Gateways ──
    "exclusiveGateway":       (50, 50),
    "parallelGateway":        (50, 50),
    "inclusiveGateway":       (50, 50),
    "eventBasedGateway":      (50, 50),
    "complexGateway":         (50, 50),
})

DEFAULT_SIZE: Tuple[float, float] = (100, 80)


@dataclass(frozen=True)
class ConversionTables:
    """Immutable lookup tables handed to the parser and the resolver.

    Attributes:
        flow_node_tags: Standard tag vocabulary, in extraction order.
        custom_tags: Non-standard tag → mapping onto a standard kind.
        dimensions: Element kind → default ``(width, height)``.
        default_size: Size used for kinds missing from ``dimensions``.
    """
    flow_node_tags: Tuple[str, ...] = FLOW_NODE_TAGS
    custom_tags: Mapping[str, CustomTagMapping] = field(default_factory=lambda: CUSTOM_TAG_MAP)
    dimensions: Mapping[str, Tuple[float, float]] = field(default_factory=lambda: DIMENSIONS)
    default_size: Tuple[float, float] = DEFAULT_SIZE


DEFAULT_TABLES = ConversionTables()


# ----------------------------
# Identifier generation
# ----------------------------

IdGenerator = Callable[[str], str]


def random_id(prefix: str) -> str:
    """Generate ``<prefix>_<7 hex chars>``, e.g. ``Flow_3fa85f6``."""
    return f"{prefix}_{uuid.uuid4().hex[:7]}"


def make_sequential_id_gen() -> IdGenerator:
    """Return a generator producing ``<prefix>_000001, <prefix>_000002, ...``.

    The counter is shared across prefixes so every generated id is unique.
    """
    counter = 0

    def _next_id(prefix: str) -> str:
        nonlocal counter
        counter += 1
        return f"{prefix}_{counter:06d}"

    return _next_id


# ----------------------------
# Document defaults
# ----------------------------

@dataclass(frozen=True)
class DocumentDefaults:
    """Placeholders used when the source omits a required identifier."""
    definitions_id: str = "Definitions_1"
    process_name: str = "Process_Name"


def defaults_from_settings(conversion) -> DocumentDefaults:
    """Build ``DocumentDefaults`` from a ``ConversionSettings`` section."""
    return DocumentDefaults(
        definitions_id=conversion.default_definitions_id,
        process_name=conversion.default_process_name,
    )

