"""
bpmnplus package

Regex-tolerant conversion of non-standard BPMN 2.0 documents into
Camunda Cloud executable BPMN with a rebuilt diagram.
"""

from bpmnplus.converter import ConversionResult, convert_document, perform_conversion
from bpmnplus.parser import NoProcessFoundError

__all__ = ["ConversionResult", "NoProcessFoundError", "convert_document", "perform_conversion"]
