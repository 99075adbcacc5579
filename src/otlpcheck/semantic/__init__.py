"""Domain rules for OTLP payloads that structural schemas cannot express."""

from .common import SemanticContext, parse_unsigned
from .logs import validate_log_semantics
from .metrics import validate_metric_semantics
from .traces import validate_trace_semantics

__all__ = [
    "SemanticContext",
    "parse_unsigned",
    "validate_log_semantics",
    "validate_metric_semantics",
    "validate_trace_semantics",
]
