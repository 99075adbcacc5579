"""
OTLP/JSON encoding of OpenTelemetry SDK telemetry.

Exporters turn SDK spans, log records and metrics into OTLP/JSON export
requests, the document shape the validator checks:
- hex traceId/spanId, integer enums, decimal-string timestamps
- typed AnyValue attributes
- records grouped by resource, then by instrumentation scope

Encoded requests are kept in memory and optionally appended to a JSON Lines
file (one export request per line) for offline validation.
"""

import base64
import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from opentelemetry.sdk._logs.export import LogExporter, LogExportResult
from opentelemetry.sdk.metrics.export import (
    ExponentialHistogram,
    Gauge,
    Histogram,
    MetricExporter,
    MetricExportResult,
    MetricsData,
    Sum,
)
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

logger = logging.getLogger(__name__)

# Python SpanKind starts at INTERNAL=0; OTLP reserves 0 for UNSPECIFIED.
_OTLP_SPAN_KIND_OFFSET = 1


def _nanos(value: int | None) -> str | None:
    return str(value) if value is not None else None


def _trace_id(value: int | None) -> str | None:
    return format(value, "032x") if value else None


def _span_id(value: int | None) -> str | None:
    return format(value, "016x") if value else None


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop unset fields; OTLP/JSON omits default values."""
    return {k: v for k, v in data.items() if v is not None}


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a Python attribute value as an OTLP AnyValue."""
    if value is None:
        return {}
    if isinstance(value, bool):
        return {"boolValue": value}
    if isinstance(value, int):
        return {"intValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (bytes, bytearray)):
        return {"bytesValue": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, Mapping):
        return {"kvlistValue": {"values": encode_attributes(value)}}
    if isinstance(value, Sequence):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    return {"stringValue": str(value)}


def encode_attributes(attributes: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    if not attributes:
        return []
    return [{"key": str(k), "value": encode_value(v)} for k, v in attributes.items()]


def _encode_resource(resource: Any) -> dict[str, Any]:
    if resource is None:
        return {"attributes": []}
    return {"attributes": encode_attributes(resource.attributes)}


def _encode_scope(scope: Any) -> dict[str, Any]:
    if scope is None:
        return {}
    return _compact(
        {
            "name": scope.name,
            "version": scope.version or None,
            "attributes": encode_attributes(getattr(scope, "attributes", None)) or None,
        }
    )


class _Grouper:
    """Group records by resource, then scope, preserving first-seen order."""

    def __init__(self, scope_key: str, record_key: str):
        self.scope_key = scope_key
        self.record_key = record_key
        self._resources: dict[int, dict[str, Any]] = {}
        self._scopes: dict[tuple[int, str, str, str], dict[str, Any]] = {}

    def add(self, resource: Any, scope: Any, record: dict[str, Any]):
        resource_id = id(resource)
        if resource_id not in self._resources:
            container: dict[str, Any] = {
                "resource": _encode_resource(resource),
                self.scope_key: [],
            }
            schema_url = getattr(resource, "schema_url", "") if resource is not None else ""
            if schema_url:
                container["schemaUrl"] = schema_url
            self._resources[resource_id] = container
        scope_id = (
            resource_id,
            getattr(scope, "name", "") or "",
            getattr(scope, "version", "") or "",
            getattr(scope, "schema_url", "") or "",
        )
        if scope_id not in self._scopes:
            scope_container: dict[str, Any] = {"scope": _encode_scope(scope), self.record_key: []}
            if scope_id[3]:
                scope_container["schemaUrl"] = scope_id[3]
            self._scopes[scope_id] = scope_container
            self._resources[resource_id][self.scope_key].append(scope_container)
        self._scopes[scope_id][self.record_key].append(record)

    def containers(self) -> list[dict[str, Any]]:
        return list(self._resources.values())


def encode_span(span: ReadableSpan) -> dict[str, Any]:
    """Encode one SDK span as an OTLP/JSON Span."""
    context = span.context
    trace_state = context.trace_state.to_header() if context.trace_state else ""
    encoded = _compact(
        {
            "traceId": _trace_id(context.trace_id),
            "spanId": _span_id(context.span_id),
            "traceState": trace_state or None,
            "parentSpanId": _span_id(span.parent.span_id) if span.parent else None,
            "flags": int(context.trace_flags),
            "name": span.name,
            "kind": span.kind.value + _OTLP_SPAN_KIND_OFFSET,
            "startTimeUnixNano": _nanos(span.start_time),
            "endTimeUnixNano": _nanos(span.end_time),
            "attributes": encode_attributes(span.attributes),
            "droppedAttributesCount": span.dropped_attributes or None,
            "events": [
                _compact(
                    {
                        "timeUnixNano": _nanos(event.timestamp),
                        "name": event.name,
                        "attributes": encode_attributes(event.attributes),
                    }
                )
                for event in span.events
            ],
            "droppedEventsCount": span.dropped_events or None,
            "links": [
                _compact(
                    {
                        "traceId": _trace_id(link.context.trace_id),
                        "spanId": _span_id(link.context.span_id),
                        "attributes": encode_attributes(link.attributes),
                    }
                )
                for link in span.links
            ],
            "droppedLinksCount": span.dropped_links or None,
        }
    )
    status: dict[str, Any] = {"code": span.status.status_code.value}
    if span.status.description:
        status["message"] = span.status.description
    encoded["status"] = status
    return encoded


def encode_spans(spans: Iterable[ReadableSpan]) -> dict[str, Any]:
    """Encode SDK spans as an ExportTraceServiceRequest."""
    grouper = _Grouper("scopeSpans", "spans")
    for span in spans:
        grouper.add(span.resource, span.instrumentation_scope, encode_span(span))
    return {"resourceSpans": grouper.containers()}


def encode_log_record(record: Any) -> dict[str, Any]:
    """Encode one SDK log record as an OTLP/JSON LogRecord."""
    severity = getattr(record, "severity_number", None)
    body = getattr(record, "body", None)
    return _compact(
        {
            "timeUnixNano": _nanos(getattr(record, "timestamp", None)),
            "observedTimeUnixNano": _nanos(getattr(record, "observed_timestamp", None)),
            "severityNumber": severity.value if severity is not None else None,
            "severityText": getattr(record, "severity_text", None) or None,
            "body": encode_value(body) if body is not None else None,
            "attributes": encode_attributes(getattr(record, "attributes", None)),
            "traceId": _trace_id(getattr(record, "trace_id", None)),
            "spanId": _span_id(getattr(record, "span_id", None)),
            "flags": int(record.trace_flags) if getattr(record, "trace_flags", None) else None,
            "eventName": getattr(record, "event_name", None) or None,
        }
    )


def encode_logs(batch: Iterable[Any]) -> dict[str, Any]:
    """Encode an SDK log export batch as an ExportLogsServiceRequest.

    Batch items carry the record either directly or as ``log_record``; the
    resource lives on the item or on the record depending on SDK version.
    """
    grouper = _Grouper("scopeLogs", "logRecords")
    for item in batch:
        record = getattr(item, "log_record", item)
        resource = getattr(item, "resource", None)
        if resource is None:
            resource = getattr(record, "resource", None)
        scope = getattr(item, "instrumentation_scope", None)
        grouper.add(resource, scope, encode_log_record(record))
    return {"resourceLogs": grouper.containers()}


def _encode_exemplars(point: Any) -> list[dict[str, Any]] | None:
    exemplars = getattr(point, "exemplars", None)
    if not exemplars:
        return None
    encoded = []
    for exemplar in exemplars:
        value = exemplar.value
        encoded.append(
            _compact(
                {
                    "filteredAttributes": encode_attributes(exemplar.filtered_attributes) or None,
                    "timeUnixNano": _nanos(exemplar.time_unix_nano),
                    "asInt": str(value) if isinstance(value, int) else None,
                    "asDouble": value if isinstance(value, float) else None,
                    "traceId": _trace_id(exemplar.trace_id),
                    "spanId": _span_id(exemplar.span_id),
                }
            )
        )
    return encoded


def _encode_point_base(point: Any) -> dict[str, Any]:
    return {
        "attributes": encode_attributes(point.attributes),
        "startTimeUnixNano": _nanos(getattr(point, "start_time_unix_nano", None)),
        "timeUnixNano": _nanos(point.time_unix_nano),
        "exemplars": _encode_exemplars(point),
    }


def _encode_number_point(point: Any) -> dict[str, Any]:
    encoded = _encode_point_base(point)
    if isinstance(point.value, int):
        encoded["asInt"] = str(point.value)
    else:
        encoded["asDouble"] = point.value
    return _compact(encoded)


def _encode_histogram_point(point: Any) -> dict[str, Any]:
    encoded = _encode_point_base(point)
    encoded.update(
        {
            "count": str(point.count),
            "sum": point.sum,
            "bucketCounts": [str(c) for c in point.bucket_counts],
            "explicitBounds": list(point.explicit_bounds),
            "min": point.min if point.count else None,
            "max": point.max if point.count else None,
        }
    )
    return _compact(encoded)


def _encode_buckets(buckets: Any) -> dict[str, Any]:
    return {"offset": buckets.offset, "bucketCounts": [str(c) for c in buckets.bucket_counts]}


def _encode_exponential_point(point: Any) -> dict[str, Any]:
    encoded = _encode_point_base(point)
    encoded.update(
        {
            "count": str(point.count),
            "sum": point.sum,
            "scale": point.scale,
            "zeroCount": str(point.zero_count),
            "positive": _encode_buckets(point.positive),
            "negative": _encode_buckets(point.negative),
            "min": point.min if point.count else None,
            "max": point.max if point.count else None,
        }
    )
    return _compact(encoded)


def encode_metric(metric: Any) -> dict[str, Any]:
    """Encode one SDK metric; the data shape becomes its single variant field."""
    encoded = _compact(
        {
            "name": metric.name,
            "description": metric.description or None,
            "unit": metric.unit or None,
        }
    )
    data = metric.data
    if isinstance(data, Sum):
        encoded["sum"] = {
            "dataPoints": [_encode_number_point(p) for p in data.data_points],
            "aggregationTemporality": int(data.aggregation_temporality),
            "isMonotonic": data.is_monotonic,
        }
    elif isinstance(data, Gauge):
        encoded["gauge"] = {"dataPoints": [_encode_number_point(p) for p in data.data_points]}
    elif isinstance(data, Histogram):
        encoded["histogram"] = {
            "dataPoints": [_encode_histogram_point(p) for p in data.data_points],
            "aggregationTemporality": int(data.aggregation_temporality),
        }
    elif isinstance(data, ExponentialHistogram):
        encoded["exponentialHistogram"] = {
            "dataPoints": [_encode_exponential_point(p) for p in data.data_points],
            "aggregationTemporality": int(data.aggregation_temporality),
        }
    else:
        raise TypeError(f"Unsupported metric data type: {type(data).__name__}")
    return encoded


def encode_metrics(metrics_data: MetricsData) -> dict[str, Any]:
    """Encode SDK MetricsData as an ExportMetricsServiceRequest."""
    grouper = _Grouper("scopeMetrics", "metrics")
    for resource_metrics in metrics_data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                grouper.add(resource_metrics.resource, scope_metrics.scope, encode_metric(metric))
    return {"resourceMetrics": grouper.containers()}


def merge_requests(requests: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Concatenate export requests of the same signal into one request."""
    merged: dict[str, list[Any]] = {}
    for request in requests:
        for key, containers in request.items():
            merged.setdefault(key, []).extend(containers)
    return merged


class _JsonRequestSink:
    """Keep encoded requests and optionally append them to a JSON Lines file."""

    def __init__(self, output_path: str | Path | None = None, append: bool = True):
        self.requests: list[dict[str, Any]] = []
        self.output_path = Path(output_path) if output_path else None
        if self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            if not append and self.output_path.exists():
                self.output_path.unlink()

    def emit(self, request: dict[str, Any]):
        self.requests.append(request)
        if self.output_path is not None:
            with open(self.output_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(request) + "\n")


class OtlpJsonSpanExporter(SpanExporter):
    """Export spans as OTLP/JSON ExportTraceServiceRequest documents."""

    def __init__(self, output_path: str | Path | None = None, append: bool = True):
        self._sink = _JsonRequestSink(output_path, append)

    @property
    def requests(self) -> list[dict[str, Any]]:
        return self._sink.requests

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Encode spans and keep/write the request."""
        try:
            self._sink.emit(encode_spans(spans))
        except Exception:
            logger.exception("Failed to export %d span(s) as OTLP/JSON", len(spans))
            return SpanExportResult.FAILURE
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        """Shutdown exporter."""

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Force flush."""
        return True


class OtlpJsonMetricExporter(MetricExporter):
    """Export metrics as OTLP/JSON ExportMetricsServiceRequest documents."""

    def __init__(self, output_path: str | Path | None = None, append: bool = True):
        super().__init__()
        self._sink = _JsonRequestSink(output_path, append)

    @property
    def requests(self) -> list[dict[str, Any]]:
        return self._sink.requests

    def export(
        self,
        metrics_data: MetricsData,
        timeout_millis: float = 10000,
        **kwargs,
    ) -> MetricExportResult:
        """Encode metrics and keep/write the request."""
        try:
            self._sink.emit(encode_metrics(metrics_data))
        except Exception:
            logger.exception("Failed to export metrics as OTLP/JSON")
            return MetricExportResult.FAILURE
        return MetricExportResult.SUCCESS

    def shutdown(self, timeout_millis: float = 30000, **kwargs) -> None:
        """Shutdown exporter."""

    def force_flush(self, timeout_millis: float = 10000) -> bool:
        """Force flush."""
        return True


class OtlpJsonLogExporter(LogExporter):
    """Export log records as OTLP/JSON ExportLogsServiceRequest documents."""

    def __init__(self, output_path: str | Path | None = None, append: bool = True):
        self._sink = _JsonRequestSink(output_path, append)

    @property
    def requests(self) -> list[dict[str, Any]]:
        return self._sink.requests

    def export(self, batch: Sequence) -> LogExportResult:  # type: ignore[override]
        """Encode log records and keep/write the request."""
        try:
            self._sink.emit(encode_logs(batch))
        except Exception:
            logger.exception("Failed to export %d log record(s) as OTLP/JSON", len(batch))
            return LogExportResult.FAILURE
        return LogExportResult.SUCCESS

    def shutdown(self) -> None:
        """Shutdown exporter."""

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Force flush."""
        return True
