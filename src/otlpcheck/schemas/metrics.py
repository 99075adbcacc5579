"""JSON Schema for OTLP metrics (ExportMetricsServiceRequest)."""

from .common import (
    Schema,
    array_of,
    attributes_field,
    bool_field,
    double_field,
    enum_field,
    int64_field,
    int_field,
    obj,
    ref,
    request_schema,
    span_id_field,
    string_field,
    timestamp_field,
    trace_id_field,
    uint64_field,
)

AGGREGATION_TEMPORALITIES = {0: "UNSPECIFIED", 1: "DELTA", 2: "CUMULATIVE"}

# Metric data-shape fields; a metric carries exactly one of them.
METRIC_DATA_TYPES = ("gauge", "sum", "histogram", "exponentialHistogram", "summary")


def _point_base() -> dict[str, Schema]:
    return {
        "attributes": attributes_field(),
        "startTimeUnixNano": timestamp_field("startTimeUnixNano"),
        "timeUnixNano": timestamp_field("timeUnixNano"),
        "flags": int_field("flags"),
    }


def _temporality() -> Schema:
    return enum_field("aggregationTemporality", AGGREGATION_TEMPORALITIES)


def metrics_defs() -> dict[str, Schema]:
    return {
        "exemplar": obj(
            "exemplar",
            {
                "filteredAttributes": attributes_field("filteredAttributes"),
                "timeUnixNano": timestamp_field("timeUnixNano"),
                "asDouble": double_field("asDouble"),
                "asInt": int64_field("asInt"),
                "spanId": span_id_field(),
                "traceId": trace_id_field(),
            },
        ),
        "numberDataPoint": obj(
            "dataPoint",
            {
                **_point_base(),
                "asDouble": double_field("asDouble"),
                "asInt": int64_field("asInt"),
                "exemplars": array_of(ref("exemplar"), "exemplars"),
            },
        ),
        "histogramDataPoint": obj(
            "dataPoint",
            {
                **_point_base(),
                "count": uint64_field("count"),
                "sum": double_field("sum"),
                "bucketCounts": array_of(uint64_field("bucketCounts"), "bucketCounts"),
                "explicitBounds": array_of(double_field("explicitBounds"), "explicitBounds"),
                "exemplars": array_of(ref("exemplar"), "exemplars"),
                "min": double_field("min"),
                "max": double_field("max"),
            },
        ),
        "buckets": obj(
            "buckets",
            {
                "offset": int_field("offset"),
                "bucketCounts": array_of(uint64_field("bucketCounts"), "bucketCounts"),
            },
        ),
        "exponentialHistogramDataPoint": obj(
            "dataPoint",
            {
                **_point_base(),
                "count": uint64_field("count"),
                "sum": double_field("sum"),
                "scale": int_field("scale"),
                "zeroCount": uint64_field("zeroCount"),
                "positive": ref("buckets"),
                "negative": ref("buckets"),
                "exemplars": array_of(ref("exemplar"), "exemplars"),
                "min": double_field("min"),
                "max": double_field("max"),
                "zeroThreshold": double_field("zeroThreshold"),
            },
        ),
        "valueAtQuantile": obj(
            "quantileValue",
            {
                "quantile": double_field("quantile"),
                "value": double_field("value"),
            },
        ),
        "summaryDataPoint": obj(
            "dataPoint",
            {
                **_point_base(),
                "count": uint64_field("count"),
                "sum": double_field("sum"),
                "quantileValues": array_of(ref("valueAtQuantile"), "quantileValues"),
            },
        ),
        "gauge": obj("gauge", {"dataPoints": array_of(ref("numberDataPoint"), "dataPoints")}),
        "sum": obj(
            "sum",
            {
                "dataPoints": array_of(ref("numberDataPoint"), "dataPoints"),
                "aggregationTemporality": _temporality(),
                "isMonotonic": bool_field("isMonotonic"),
            },
        ),
        "histogram": obj(
            "histogram",
            {
                "dataPoints": array_of(ref("histogramDataPoint"), "dataPoints"),
                "aggregationTemporality": _temporality(),
            },
        ),
        "exponentialHistogram": obj(
            "exponentialHistogram",
            {
                "dataPoints": array_of(ref("exponentialHistogramDataPoint"), "dataPoints"),
                "aggregationTemporality": _temporality(),
            },
        ),
        "summary": obj(
            "summary", {"dataPoints": array_of(ref("summaryDataPoint"), "dataPoints")}
        ),
        "metric": obj(
            "metric",
            {
                "name": string_field("name"),
                "description": string_field("description"),
                "unit": string_field("unit"),
                "metadata": attributes_field("metadata"),
                **{data_type: ref(data_type) for data_type in METRIC_DATA_TYPES},
            },
        ),
        "scopeMetrics": obj(
            "scopeMetrics",
            {
                "scope": ref("instrumentationScope"),
                "metrics": array_of(ref("metric"), "metrics"),
                "schemaUrl": string_field("schemaUrl"),
            },
        ),
        "resourceMetrics": obj(
            "resourceMetrics",
            {
                "resource": ref("resource"),
                "scopeMetrics": array_of(ref("scopeMetrics"), "scopeMetrics"),
                "schemaUrl": string_field("schemaUrl"),
            },
        ),
    }


def metrics_schema() -> Schema:
    return request_schema("resourceMetrics", "resourceMetrics", metrics_defs())
