"""
bpmnplus/emitter.py

Serialize a parsed document plus resolved geometry as Camunda Cloud
(Zeebe) flavoured BPMN 2.0 XML.

Output is built line by line so that the same input always produces the
same bytes.  All text and attribute values go through ``escape_xml``;
coordinates are rounded only here.
"""

from __future__ import annotations

from typing import AbstractSet, Dict, List, Optional, Sequence, Tuple

from models import BpmnDocument, Element, Flow, Process, ResolvedShape
from settings import TargetSettings
from utils import escape_xml as esc
from utils import format_number

Point = Tuple[float, float]

# Namespace declarations on the root element, in output order.
NAMESPACES: Tuple[Tuple[str, str], ...] = (
    ("bpmn", "http://www.omg.org/spec/BPMN/20100524/MODEL"),
    ("bpmndi", "http://www.omg.org/spec/BPMN/20100524/DI"),
    ("dc", "http://www.omg.org/spec/DD/20100524/DC"),
    ("xsi", "http://www.w3.org/2001/XMLSchema-instance"),
    ("zeebe", "http://camunda.org/schema/zeebe/1.0"),
    ("di", "http://www.omg.org/spec/DD/20100524/DI"),
    ("modeler", "http://camunda.org/schema/modeler/1.0"),
)

DIAGRAM_ID = "BPMNDiagram_1"
PLANE_ID = "BPMNPlane_1"


def _name_attr(name: Optional[str]) -> str:
    return f' name="{esc(name)}"' if name else ""


def _formal_condition(condition: str) -> str:
    """Prefix ``=`` so the target engine reads the condition as FEEL."""
    return condition if condition.startswith("=") else f"={condition}"


# ─────────────────────────────────────────────────────────
# Sections
# ─────────────────────────────────────────────────────────

def _header(document: BpmnDocument, target: TargetSettings) -> List[str]:
    xmlns = " ".join(f'xmlns:{prefix}="{uri}"' for prefix, uri in NAMESPACES)
    return [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<bpmn:definitions {xmlns} '
        f'id="{esc(document.definitions_id)}" '
        f'targetNamespace="{esc(target.target_namespace)}" '
        f'exporter="{esc(target.exporter)}" '
        f'exporterVersion="{esc(target.exporter_version)}" '
        f'modeler:executionPlatform="{esc(target.execution_platform)}" '
        f'modeler:executionPlatformVersion="{esc(target.execution_platform_version)}">',
    ]


def _element_lines(element: Element) -> List[str]:
    tag = f"bpmn:{element.kind}"
    lines = [f'    <{tag} id="{esc(element.id)}"{_name_attr(element.name)}>']
    for ref in element.incoming:
        lines.append(f"      <bpmn:incoming>{esc(ref)}</bpmn:incoming>")
    for ref in element.outgoing:
        lines.append(f"      <bpmn:outgoing>{esc(ref)}</bpmn:outgoing>")
    if element.is_multi_instance:
        lines.append("      <bpmn:multiInstanceLoopCharacteristics />")
    lines.append(f"    </{tag}>")
    return lines


def _flow_lines(flow: Flow, gateways: AbstractSet[str]) -> List[str]:
    lines = [
        f'    <bpmn:sequenceFlow id="{esc(flow.id)}" '
        f'sourceRef="{esc(flow.source_ref)}" '
        f'targetRef="{esc(flow.target_ref)}"{_name_attr(flow.name)}>'
    ]
    if flow.condition and flow.source_ref in gateways:
        lines.append(
            '      <bpmn:conditionExpression xsi:type="bpmn:tFormalExpression">'
            f"{esc(_formal_condition(flow.condition))}</bpmn:conditionExpression>"
        )
    lines.append("    </bpmn:sequenceFlow>")
    return lines


def _process_lines(proc: Process, gateways: AbstractSet[str]) -> List[str]:
    lines = [f'  <bpmn:process id="{esc(proc.id)}" name="{esc(proc.name)}" isExecutable="true">']
    for element in proc.elements:
        lines.extend(_element_lines(element))
    for flow in proc.flows:
        lines.extend(_flow_lines(flow, gateways))
    lines.append("  </bpmn:process>")
    return lines


def _shape_lines(shape: ResolvedShape) -> List[str]:
    return [
        f'      <bpmndi:BPMNShape id="{esc(shape.di_id)}" bpmnElement="{esc(shape.element_id)}">',
        f'        <dc:Bounds x="{format_number(shape.x)}" y="{format_number(shape.y)}" '
        f'width="{format_number(shape.w)}" height="{format_number(shape.h)}" />',
        "      </bpmndi:BPMNShape>",
    ]


def _edge_lines(flow: Flow, waypoints: Sequence[Point]) -> List[str]:
    lines = [f'      <bpmndi:BPMNEdge id="{esc(flow.id)}_di" bpmnElement="{esc(flow.id)}">']
    for x, y in waypoints:
        lines.append(f'        <di:waypoint x="{format_number(x)}" y="{format_number(y)}" />')
    lines.append("      </bpmndi:BPMNEdge>")
    return lines


def _diagram_lines(
    document: BpmnDocument,
    resolved: Dict[str, ResolvedShape],
    routes: Sequence[Tuple[Flow, Sequence[Point]]],
) -> List[str]:
    lines = [
        f'  <bpmndi:BPMNDiagram id="{DIAGRAM_ID}">',
        f'    <bpmndi:BPMNPlane id="{PLANE_ID}" bpmnElement="{esc(document.processes[0].id)}">',
    ]
    for shape in resolved.values():
        if shape.has_coordinates:
            lines.extend(_shape_lines(shape))
    for flow, waypoints in routes:
        lines.extend(_edge_lines(flow, waypoints))
    lines.append("    </bpmndi:BPMNPlane>")
    lines.append("  </bpmndi:BPMNDiagram>")
    return lines


# ─────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────

def emit_document(
    document: BpmnDocument,
    resolved: Dict[str, ResolvedShape],
    routes: Sequence[Tuple[Flow, Sequence[Point]]],
    target: Optional[TargetSettings] = None,
) -> str:
    """Serialize *document* with its resolved geometry.

    Args:
        document: Parsed document.
        resolved: Element id → resolved shape, from ``resolve_diagram``.
        routes: ``(flow, waypoints)`` pairs, from ``route_flows``.
        target: Platform metadata for the root element.

    Returns:
        The complete XML text (no trailing newline).
    """
    target = target or TargetSettings()
    gateways = {e.id for e in document.iter_elements() if e.is_gateway}

    lines = _header(document, target)
    for proc in document.processes:
        lines.extend(_process_lines(proc, gateways))
    if document.processes:
        lines.extend(_diagram_lines(document, resolved, routes))
    lines.append("</bpmn:definitions>")
    return "\n".join(lines)
