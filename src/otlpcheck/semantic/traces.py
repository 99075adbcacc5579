"""
Semantic validation for OTLP traces payloads.

Checks that a JSON Schema cannot express:
- traceId/spanId (span and links) must not be all zeros
- endTimeUnixNano >= startTimeUnixNano
- startTimeUnixNano not far in the future (warning)
- event timestamps within the span's time bounds (warning)
"""

from typing import Any

from ..result import SemanticResult
from .common import (
    SemanticContext,
    dict_items,
    is_zero_span_id,
    is_zero_trace_id,
    iter_records,
    parse_unsigned,
)


def validate_trace_semantics(
    payload: Any, context: SemanticContext | None = None
) -> SemanticResult:
    """Validate trace-specific semantics for every span in document order."""
    context = context or SemanticContext()
    result = SemanticResult()
    future_limit = context.now_ns() + context.clock_skew_grace_ns

    for path, span in iter_records(payload, "resourceSpans", "scopeSpans", "spans"):
        _check_span_ids(path, span, result)
        start, end = _check_span_times(path, span, future_limit, result)
        _check_events(path, span, start, end, result)
        _check_links(path, span, result)

    return result


def _check_span_ids(path: str, span: dict[str, Any], result: SemanticResult):
    if is_zero_trace_id(span.get("traceId")):
        result.error(
            f"{path}/traceId",
            "traceId must not be all zeros",
            "#/$defs/span/properties/traceId",
        )
    if is_zero_span_id(span.get("spanId")):
        result.error(
            f"{path}/spanId",
            "spanId must not be all zeros",
            "#/$defs/span/properties/spanId",
        )


def _check_span_times(
    path: str, span: dict[str, Any], future_limit: int, result: SemanticResult
) -> tuple[int | None, int | None]:
    start = parse_unsigned(span.get("startTimeUnixNano"))
    end = parse_unsigned(span.get("endTimeUnixNano"))

    if start is not None and end is not None and end < start:
        result.error(
            f"{path}/endTimeUnixNano",
            "endTimeUnixNano must be greater than or equal to startTimeUnixNano",
            "#/$defs/span/properties/endTimeUnixNano",
        )

    if start is not None and start > future_limit:
        result.warn(
            f"{path}/startTimeUnixNano",
            "startTimeUnixNano is significantly in the future, possible clock skew",
            "Verify timestamp is in nanoseconds since Unix epoch",
        )

    return start, end


def _check_events(
    path: str,
    span: dict[str, Any],
    start: int | None,
    end: int | None,
    result: SemanticResult,
):
    if start is None or end is None:
        return
    for idx, event in dict_items(span, "events"):
        event_time = parse_unsigned(event.get("timeUnixNano"))
        if event_time is None:
            continue
        if event_time < start or event_time > end:
            result.warn(
                f"{path}/events/{idx}/timeUnixNano",
                "Event timestamp is outside span time bounds",
                "Event should occur between span start and end times",
            )


def _check_links(path: str, span: dict[str, Any], result: SemanticResult):
    for idx, link in dict_items(span, "links"):
        if is_zero_trace_id(link.get("traceId")):
            result.error(
                f"{path}/links/{idx}/traceId",
                "Link traceId must not be all zeros",
                "#/$defs/link/properties/traceId",
            )
        if is_zero_span_id(link.get("spanId")):
            result.error(
                f"{path}/links/{idx}/spanId",
                "Link spanId must not be all zeros",
                "#/$defs/link/properties/spanId",
            )
