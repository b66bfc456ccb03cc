"""
bpmnplus/converter.py

Conversion entry point: raw document text in, target-dialect text (or an
explicit failure) out.

    parse → require a process → resolve geometry → route flows → emit

A conversion holds no state beyond the call, so independent documents may
be converted on concurrent workers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from bpmnplus.emitter import emit_document
from bpmnplus.geometry import resolve_diagram
from bpmnplus.parser import NoProcessFoundError, parse_document, require_processes
from bpmnplus.routing import route_flows
from debug_trace import trace, trace_call, trace_exception
from models import DEFAULT_TABLES, ConversionTables, IdGenerator, defaults_from_settings
from settings import AppSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one document.

    Attributes:
        filename: Advisory name of the source, used in diagnostics.
        content: Converted XML text, or ``None`` on failure.
        success: True when ``content`` holds a complete document.
        message: Diagnostic text for failures (empty on success).
    """
    filename: str
    content: Optional[str] = None
    success: bool = False
    message: str = ""


@trace_call("CONVERT")
def _convert(
    content: str,
    filename: str,
    settings: AppSettings,
    tables: ConversionTables,
    id_gen: Optional[IdGenerator],
) -> str:
    document = parse_document(
        content,
        tables=tables,
        id_gen=id_gen,
        defaults=defaults_from_settings(settings.conversion),
    )
    require_processes(document, filename)
    trace(
        f"{filename}: {len(document.processes)} processes, {len(document.shapes)} shapes",
        "PARSE",
    )

    resolved = resolve_diagram(document, tables, settings.layout.margin)
    routes = route_flows(document, resolved, settings.layout.jog_threshold)
    return emit_document(document, resolved, routes, settings.target)


def convert_document(
    content: str,
    filename: str = "<memory>",
    *,
    settings: Optional[AppSettings] = None,
    tables: ConversionTables = DEFAULT_TABLES,
    id_gen: Optional[IdGenerator] = None,
) -> ConversionResult:
    """Convert one document, never raising.

    Args:
        content: Raw document text.
        filename: Advisory name used only for diagnostics.
        settings: Settings to use; defaults to built-in ``AppSettings()``.
            The user settings file is never read here.
        tables: Tag vocabulary, custom tag mappings and size defaults.
        id_gen: Placeholder id generator; defaults to random ids.

    Returns:
        A ``ConversionResult``.  On failure ``content`` is ``None`` and
        ``message`` says why; a partial document is never returned.
    """
    if settings is None:
        settings = AppSettings()
    try:
        xml = _convert(content, filename, settings, tables, id_gen)
    except NoProcessFoundError as e:
        log.warning("%s", e)
        return ConversionResult(filename=filename, message=str(e))
    except Exception as e:
        trace_exception(f"Conversion error in {filename}")
        return ConversionResult(filename=filename, message=f"Conversion error in {filename}: {e}")
    return ConversionResult(filename=filename, content=xml, success=True)


def perform_conversion(
    content: str,
    filename: str = "<memory>",
    *,
    settings: Optional[AppSettings] = None,
    tables: ConversionTables = DEFAULT_TABLES,
    id_gen: Optional[IdGenerator] = None,
) -> Optional[str]:
    """Convert one document; return the XML text or ``None`` for no result."""
    return convert_document(
        content, filename, settings=settings, tables=tables, id_gen=id_gen
    ).content
