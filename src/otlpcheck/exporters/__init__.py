"""OTLP/JSON exporters for OpenTelemetry SDK telemetry."""

from .otlp_json import (
    OtlpJsonLogExporter,
    OtlpJsonMetricExporter,
    OtlpJsonSpanExporter,
    encode_logs,
    encode_metrics,
    encode_spans,
    encode_value,
    merge_requests,
)

__all__ = [
    "OtlpJsonSpanExporter",
    "OtlpJsonMetricExporter",
    "OtlpJsonLogExporter",
    "encode_spans",
    "encode_logs",
    "encode_metrics",
    "encode_value",
    "merge_requests",
]
