"""
debug_trace.py

Debug instrumentation for the conversion pipeline.

Library modules log through ``logging.getLogger(__name__)``; this module
installs the handlers for the ``bpmnplus`` hierarchy and offers the
``trace`` helpers used to follow a conversion stage by stage.  Tracing is
off until ``configure()`` is called with ``enabled = true``.
"""

from __future__ import annotations

import logging
import sys
from functools import wraps
from typing import Optional

LOGGER_NAME = "bpmnplus"

_logger = logging.getLogger(LOGGER_NAME)

# Set by configure(); trace() is a no-op while False
DEBUG_TRACE = False

# Handlers installed by configure(), removed again by close_log()
_handlers: list = []

_FORMAT = "[%(asctime)s.%(msecs)03d] [%(category)s] %(message)s"
_DATE_FORMAT = "%H:%M:%S"


class _CategoryFilter(logging.Filter):
    """Give records that did not come through ``trace()`` a category."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "category"):
            record.category = record.levelname
        return True


def configure(trace_settings=None, verbose: bool = False) -> None:
    """Install stderr (and optional file) handlers on the ``bpmnplus`` logger.

    Args:
        trace_settings: A ``TraceSettings`` section, or ``None`` for defaults.
        verbose: Force tracing on at DEBUG level regardless of settings.
    """
    global DEBUG_TRACE
    close_log()

    enabled = verbose or bool(trace_settings and trace_settings.enabled)
    level_name = "DEBUG" if verbose else (trace_settings.level if trace_settings else "INFO")
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(_FORMAT, _DATE_FORMAT)
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    stream.addFilter(_CategoryFilter())
    _handlers.append(stream)

    log_file = trace_settings.log_file if trace_settings else ""
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_CategoryFilter())
        _handlers.append(file_handler)

    for handler in _handlers:
        _logger.addHandler(handler)
    _logger.setLevel(level if enabled else logging.WARNING)
    DEBUG_TRACE = enabled


def trace(msg: str, category: str = "INFO") -> None:
    """Log a trace message tagged with *category*."""
    if not DEBUG_TRACE:
        return
    _logger.info(msg, extra={"category": category})


def trace_exception(msg: str = "Exception") -> None:
    """Log the exception currently being handled, with traceback."""
    _logger.error(msg, exc_info=True, extra={"category": "ERROR"})


def trace_call(category: str = "CALL"):
    """Decorator to trace entry into and exit from a function."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DEBUG_TRACE:
                return func(*args, **kwargs)
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
            trace(f"<<< {func_name}", category)
            return result
        return wrapper
    return decorator


def close_log(handler: Optional[logging.Handler] = None) -> None:
    """Detach and close the handlers installed by ``configure()``."""
    global DEBUG_TRACE
    for h in (list(_handlers) if handler is None else [handler]):
        _logger.removeHandler(h)
        h.close()
        if h in _handlers:
            _handlers.remove(h)
    if not _handlers:
        DEBUG_TRACE = False
