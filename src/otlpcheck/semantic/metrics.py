"""
Semantic validation for OTLP metrics payloads.

A metric is a tagged union over its data shape: exactly one of gauge, sum,
histogram, exponentialHistogram or summary must be present. Data points of
the selected shape are then checked for time ordering, histogram bucket
consistency and exemplar identifiers.
"""

from dataclasses import dataclass
from typing import Any

from ..result import SemanticResult
from ..schemas.metrics import METRIC_DATA_TYPES
from .common import (
    SemanticContext,
    dict_items,
    is_real_number,
    is_zero_span_id,
    is_zero_trace_id,
    iter_records,
    parse_unsigned,
)

AGGREGATION_TEMPORALITY_DELTA = 1


@dataclass(frozen=True)
class MetricShape:
    """The one data-shape variant selected by a metric."""

    data_type: str
    data: Any

    def __post_init__(self):
        if self.data_type not in METRIC_DATA_TYPES:
            raise ValueError(f"Unknown metric data type: {self.data_type}")

    @classmethod
    def from_metric(cls, metric: dict[str, Any]) -> "MetricShape":
        """Select the metric's variant; raises ValueError unless exactly one is present."""
        data_types = present_data_types(metric)
        if len(data_types) != 1:
            raise ValueError(f"Expected exactly one metric data type, found {len(data_types)}")
        return cls(data_types[0], metric[data_types[0]])


def present_data_types(metric: dict[str, Any]) -> list[str]:
    """Data-shape fields present on a metric, in canonical order."""
    return [data_type for data_type in METRIC_DATA_TYPES if data_type in metric]


def validate_metric_semantics(
    payload: Any, context: SemanticContext | None = None
) -> SemanticResult:
    """Validate metric-specific semantics for every metric in document order."""
    result = SemanticResult()

    for path, metric in iter_records(payload, "resourceMetrics", "scopeMetrics", "metrics"):
        data_types = present_data_types(metric)

        if not data_types:
            result.error(
                path,
                "Metric must have exactly one data type "
                "(gauge, sum, histogram, exponentialHistogram, or summary)",
                "#/$defs/metric",
            )
            continue
        if len(data_types) > 1:
            result.error(
                path,
                f"Metric has multiple data types: {', '.join(data_types)}. Only one is allowed.",
                "#/$defs/metric",
            )

        if len(data_types) == 1:
            shape = MetricShape.from_metric(metric)
        else:
            # With several variants present the first one in canonical order is checked.
            shape = MetricShape(data_types[0], metric[data_types[0]])
        data_type, metric_data = shape.data_type, shape.data
        if not isinstance(metric_data, dict):
            continue

        for dp_idx, point in dict_items(metric_data, "dataPoints"):
            dp_path = f"{path}/{data_type}/dataPoints/{dp_idx}"
            _check_point_times(dp_path, point, result)
            if data_type == "histogram":
                _check_histogram_buckets(dp_path, point, result)
            _check_exemplars(dp_path, point, result)

        if (
            data_type == "sum"
            and metric_data.get("isMonotonic") is True
            and metric_data.get("aggregationTemporality") == AGGREGATION_TEMPORALITY_DELTA
        ):
            result.warn(
                f"{path}/sum",
                "Monotonic sum with DELTA aggregation temporality is uncommon",
                "Verify this is intentional; CUMULATIVE is more common for monotonic sums",
            )

    return result


def _check_point_times(dp_path: str, point: dict[str, Any], result: SemanticResult):
    start = parse_unsigned(point.get("startTimeUnixNano"))
    end = parse_unsigned(point.get("timeUnixNano"))
    if start is not None and end is not None and end < start:
        result.error(
            f"{dp_path}/timeUnixNano",
            "timeUnixNano must be >= startTimeUnixNano",
            "#/$defs/numberDataPoint/properties/timeUnixNano",
        )


def _check_histogram_buckets(dp_path: str, point: dict[str, Any], result: SemanticResult):
    bucket_counts = point.get("bucketCounts")
    bounds = point.get("explicitBounds")

    if isinstance(bucket_counts, list) and isinstance(bounds, list):
        if len(bucket_counts) != len(bounds) + 1:
            result.error(
                f"{dp_path}/bucketCounts",
                f"bucketCounts length ({len(bucket_counts)}) must be "
                f"explicitBounds length + 1 ({len(bounds) + 1})",
                "#/$defs/histogramDataPoint/properties/bucketCounts",
            )

    if not isinstance(bounds, list):
        return
    for i in range(1, len(bounds)):
        previous, current = bounds[i - 1], bounds[i]
        if not (is_real_number(previous) and is_real_number(current)):
            continue
        if current <= previous:
            result.error(
                f"{dp_path}/explicitBounds/{i}",
                f"explicitBounds must be strictly increasing ({current} <= {previous})",
                "#/$defs/histogramDataPoint/properties/explicitBounds",
            )
            break


def _check_exemplars(dp_path: str, point: dict[str, Any], result: SemanticResult):
    for ex_idx, exemplar in dict_items(point, "exemplars"):
        if is_zero_trace_id(exemplar.get("traceId")):
            result.warn(
                f"{dp_path}/exemplars/{ex_idx}/traceId",
                "Exemplar traceId is all zeros",
                "Consider omitting traceId if no trace context exists",
            )
        if is_zero_span_id(exemplar.get("spanId")):
            result.warn(
                f"{dp_path}/exemplars/{ex_idx}/spanId",
                "Exemplar spanId is all zeros",
                "Consider omitting spanId if no trace context exists",
            )
