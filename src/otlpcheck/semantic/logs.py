"""Semantic validation for OTLP logs payloads."""

from typing import Any

from ..result import SemanticResult
from .common import (
    SemanticContext,
    is_zero_span_id,
    is_zero_trace_id,
    iter_records,
    parse_unsigned,
)

# (lowest severityNumber, highest severityNumber, canonical name)
SEVERITY_BANDS = (
    (0, 0, "UNSPECIFIED"),
    (1, 4, "TRACE"),
    (5, 8, "DEBUG"),
    (9, 12, "INFO"),
    (13, 16, "WARN"),
    (17, 20, "ERROR"),
    (21, 24, "FATAL"),
)


def severity_band(severity_number: Any) -> str | None:
    """Canonical severity name for a severityNumber, or None if out of range."""
    if isinstance(severity_number, float) and severity_number.is_integer():
        severity_number = int(severity_number)
    if isinstance(severity_number, bool) or not isinstance(severity_number, int):
        return None
    for low, high, name in SEVERITY_BANDS:
        if low <= severity_number <= high:
            return name
    return None


def validate_log_semantics(payload: Any, context: SemanticContext | None = None) -> SemanticResult:
    """Validate log-specific semantics for every log record in document order."""
    result = SemanticResult()

    for path, record in iter_records(payload, "resourceLogs", "scopeLogs", "logRecords"):
        if is_zero_trace_id(record.get("traceId")):
            result.error(
                f"{path}/traceId",
                "traceId must not be all zeros when present",
                "#/$defs/logRecord/properties/traceId",
            )
        if is_zero_span_id(record.get("spanId")):
            result.error(
                f"{path}/spanId",
                "spanId must not be all zeros when present",
                "#/$defs/logRecord/properties/spanId",
            )

        time_ns = parse_unsigned(record.get("timeUnixNano"))
        observed_ns = parse_unsigned(record.get("observedTimeUnixNano"))
        if time_ns is not None and observed_ns is not None and observed_ns < time_ns:
            result.warn(
                f"{path}/observedTimeUnixNano",
                "observedTimeUnixNano is earlier than timeUnixNano",
                "observedTimeUnixNano should typically be >= timeUnixNano",
            )

        _check_severity_text(path, record, result)

        if "body" not in record and "severityNumber" not in record:
            result.warn(
                path,
                "Log record has neither body nor severityNumber",
                "Consider adding a body or severity for meaningful logs",
            )

    return result


def _check_severity_text(path: str, record: dict[str, Any], result: SemanticResult):
    text = record.get("severityText")
    if not isinstance(text, str) or not text:
        return
    number = record.get("severityNumber")
    expected = severity_band(number)
    if expected is None:
        return
    # Variants such as INFO2 or "warning" still start with the band name.
    if not text.upper().startswith(expected):
        result.warn(
            f"{path}/severityText",
            f'severityText "{text}" may not match severityNumber {number}',
            f'Expected severity text to be "{expected}" or similar',
        )
