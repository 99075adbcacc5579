"""Tests for the structural JSON Schema layer."""

import logging
import sys
from types import MappingProxyType

import pytest
from otlp_payloads import (
    SPAN_PATH,
    histogram_metric,
    log_record,
    logs,
    metrics,
    number_point,
    span,
    sum_metric,
    traces,
)

from otlpcheck.result import PayloadType
from otlpcheck.schemas import default_schema_set, describe_schemas, json_pointer
from otlpcheck.schemas.registry import DEPTH_LIMIT_MESSAGE

LOG_RECORD_PATH = "/resourceLogs/0/scopeLogs/0/logRecords/0"


def check(payload_type: PayloadType, payload: dict):
    return default_schema_set().check(payload_type, payload)


def test_well_formed_payloads_have_no_errors() -> None:
    """Complete traces, logs and metrics requests pass the structural check."""
    assert check(PayloadType.TRACES, traces(span())) == []
    assert check(PayloadType.LOGS, logs(log_record())) == []
    assert check(PayloadType.METRICS, metrics(sum_metric(), histogram_metric())) == []


def test_span_kind_name_is_a_type_error() -> None:
    """Enum names are rejected; kind must be the integer value."""
    errors = check(PayloadType.TRACES, traces({"kind": "SERVER"}))
    assert len(errors) == 1
    assert errors[0].path == f"{SPAN_PATH}/kind"
    assert errors[0].keyword == "type"
    assert "kind must be an integer" in errors[0].message


def test_span_kind_out_of_range() -> None:
    """kind above 5 reports a range error listing the enum values."""
    errors = check(PayloadType.TRACES, traces(span(kind=6)))
    assert [e.keyword for e in errors] == ["range"]
    assert errors[0].message.startswith("kind must be <= 5 (UNSPECIFIED=0, INTERNAL=1, SERVER=2")


def test_status_code_range() -> None:
    """status.code accepts 0-2 only."""
    errors = check(PayloadType.TRACES, traces(span(status={"code": 3})))
    assert [(e.path, e.keyword) for e in errors] == [(f"{SPAN_PATH}/status/code", "range")]


def test_identifier_patterns() -> None:
    """traceId and spanId must be 32 and 16 hex characters."""
    payload = traces(span(traceId="xyz", spanId="abc123"))
    errors = check(PayloadType.TRACES, payload)
    assert [(e.path, e.keyword) for e in errors] == [
        (f"{SPAN_PATH}/spanId", "pattern"),
        (f"{SPAN_PATH}/traceId", "pattern"),
    ]


def test_identifiers_are_case_insensitive_and_optional() -> None:
    """Upper-case hex is accepted and identifiers may be omitted."""
    upper = span(traceId="5B8EFFF798038103D269B633813FC60C", spanId="EEE19B7EC3C1B174")
    assert check(PayloadType.TRACES, traces(upper)) == []
    assert check(PayloadType.TRACES, traces({"name": "anonymous"})) == []


@pytest.mark.parametrize("value", ["123456789012345", 123456789012345, "-5", 0])
def test_int64_accepts_string_or_number(value: object) -> None:
    """asInt takes a decimal string or a JSON integer interchangeably."""
    payload = metrics(sum_metric(number_point(asInt=value)))
    assert check(PayloadType.METRICS, payload) == []


@pytest.mark.parametrize(
    ("value", "keyword"),
    [(True, "type"), (1.5, "type"), ({"v": 1}, "type"), ("12a", "pattern")],
)
def test_int64_rejects_other_values(value: object, keyword: str) -> None:
    """Booleans, fractions, objects and non-decimal strings are rejected."""
    payload = metrics(sum_metric(number_point(asInt=value)))
    errors = check(PayloadType.METRICS, payload)
    assert [e.keyword for e in errors] == [keyword]
    assert errors[0].path.endswith("/sum/dataPoints/0/asInt")


@pytest.mark.parametrize(
    ("value", "keyword"),
    [("abc", "pattern"), (-1, "range"), ({}, "type"), ("-1", "pattern")],
)
def test_timestamp_rejects_invalid_values(value: object, keyword: str) -> None:
    """Timestamps are non-negative decimal strings or integers."""
    errors = check(PayloadType.TRACES, traces(span(startTimeUnixNano=value)))
    assert [(e.path, e.keyword) for e in errors] == [(f"{SPAN_PATH}/startTimeUnixNano", keyword)]


def test_timestamp_accepts_number() -> None:
    """A numeric timestamp is accepted as well as a string."""
    payload = traces(span(startTimeUnixNano=1_700_000_000_000_000_000))
    assert check(PayloadType.TRACES, payload) == []


@pytest.mark.parametrize("value", ["18446744073709551616", "99999999999999999999999", 2**64])
def test_timestamp_above_uint64_is_a_range_error(value: object) -> None:
    """Timestamps beyond 2^64-1 are rejected in either encoding."""
    errors = check(PayloadType.TRACES, traces(span(startTimeUnixNano=value)))
    assert [(e.path, e.keyword) for e in errors] == [(f"{SPAN_PATH}/startTimeUnixNano", "range")]
    assert errors[0].message == "startTimeUnixNano must be <= 18446744073709551615"


@pytest.mark.parametrize("value", ["18446744073709551615", "000000000000000000000000001"])
def test_timestamp_upper_bound_is_inclusive(value: str) -> None:
    assert check(PayloadType.TRACES, traces(span(startTimeUnixNano=value))) == []


@pytest.mark.parametrize(
    "value", ["9223372036854775808", "-9223372036854775809", 2**63, -(2**63) - 1]
)
def test_int64_out_of_range(value: object) -> None:
    """asInt must fit a signed 64-bit integer."""
    errors = check(PayloadType.METRICS, metrics(sum_metric(number_point(asInt=value))))
    assert [e.keyword for e in errors] == ["range"]
    assert errors[0].path.endswith("/sum/dataPoints/0/asInt")


@pytest.mark.parametrize("value", ["9223372036854775807", "-9223372036854775808"])
def test_int64_bounds_are_inclusive(value: str) -> None:
    assert check(PayloadType.METRICS, metrics(sum_metric(number_point(asInt=value)))) == []


def test_unknown_fields_are_tolerated() -> None:
    """Extra fields at any level do not produce errors."""
    payload = traces(span(futureField={"x": 1}))
    payload["extension"] = True
    payload["resourceSpans"][0]["custom"] = [1, 2, 3]
    payload["resourceSpans"][0]["scopeSpans"][0]["scope"]["vendor"] = "acme"
    assert check(PayloadType.TRACES, payload) == []


def test_attribute_key_is_required() -> None:
    """KeyValue entries must carry a key; the error points at the missing field."""
    payload = traces(span(attributes=[{"value": {"stringValue": "x"}}]))
    errors = check(PayloadType.TRACES, payload)
    assert len(errors) == 1
    assert errors[0].keyword == "required"
    assert errors[0].path == f"{SPAN_PATH}/attributes/0/key"


def test_recursive_any_value_is_checked_at_depth() -> None:
    """Errors inside nested arrays and key/value lists carry the full path."""
    nested = {
        "key": "nested",
        "value": {
            "arrayValue": {
                "values": [
                    {"kvlistValue": {"values": [{"key": "flag", "value": {"intValue": True}}]}}
                ]
            }
        },
    }
    errors = check(PayloadType.TRACES, traces(span(attributes=[nested])))
    assert len(errors) == 1
    assert errors[0].keyword == "type"
    assert errors[0].path == (
        f"{SPAN_PATH}/attributes/0/value/arrayValue/values/0/kvlistValue/values/0/value/intValue"
    )


def test_any_value_with_several_fields_is_accepted() -> None:
    """More than one populated AnyValue field is tolerated."""
    attribute = {"key": "k", "value": {"stringValue": "a", "intValue": "1"}}
    assert check(PayloadType.TRACES, traces(span(attributes=[attribute]))) == []


def deeply_nested_value(depth: int) -> dict:
    value: dict = {"stringValue": "leaf"}
    for _ in range(depth):
        value = {"arrayValue": {"values": [value]}}
    return value


def test_excessive_nesting_is_a_depth_error(caplog: pytest.LogCaptureFixture) -> None:
    """Nesting past the recursion limit gives one root error instead of an exception."""
    attribute = {"key": "deep", "value": deeply_nested_value(sys.getrecursionlimit())}
    with caplog.at_level(logging.WARNING, logger="otlpcheck.schemas.registry"):
        errors = check(PayloadType.TRACES, traces(span(attributes=[attribute])))
    assert [(e.path, e.keyword, e.message) for e in errors] == [
        ("", "depth", DEPTH_LIMIT_MESSAGE)
    ]
    assert "recursion limit" in caplog.text


def test_moderate_nesting_is_checked_normally() -> None:
    attribute = {"key": "deep", "value": deeply_nested_value(20)}
    assert check(PayloadType.TRACES, traces(span(attributes=[attribute]))) == []


def test_all_violations_are_collected_in_document_order() -> None:
    """The check does not stop at the first violation."""
    payload = traces(span(kind="SERVER"), span(spanId="nope", status={"code": -1}))
    errors = check(PayloadType.TRACES, payload)
    assert [e.path for e in errors] == [
        f"{SPAN_PATH}/kind",
        "/resourceSpans/0/scopeSpans/0/spans/1/spanId",
        "/resourceSpans/0/scopeSpans/0/spans/1/status/code",
    ]


def test_log_severity_number_rules() -> None:
    """severityNumber must be an integer between 0 and 24."""
    errors = check(PayloadType.LOGS, logs(log_record(severityNumber=25)))
    assert [(e.path, e.keyword) for e in errors] == [(f"{LOG_RECORD_PATH}/severityNumber", "range")]
    errors = check(PayloadType.LOGS, logs(log_record(severityNumber="INFO")))
    assert [e.keyword for e in errors] == ["type"]


def test_aggregation_temporality_name_is_rejected() -> None:
    """aggregationTemporality must be the integer value."""
    metric = sum_metric()
    metric["sum"]["aggregationTemporality"] = "DELTA"
    errors = check(PayloadType.METRICS, metrics(metric))
    assert [e.keyword for e in errors] == ["type"]
    assert errors[0].path.endswith("/sum/aggregationTemporality")


def test_root_array_type() -> None:
    """The top-level container must be an array."""
    errors = check(PayloadType.TRACES, {"resourceSpans": "spans"})
    assert [(e.path, e.keyword) for e in errors] == [("/resourceSpans", "type")]


def test_errors_carry_schema_path() -> None:
    """Every structural error references the schema rule it violated."""
    errors = check(PayloadType.TRACES, traces(span(kind=9)))
    assert errors[0].schema_path.startswith("#/")
    assert errors[0].schema_path.endswith("maximum")


def test_json_pointer() -> None:
    """Pointers start at '/' and escape '~' and '/'."""
    assert json_pointer([]) == "/"
    assert json_pointer(["resourceSpans", 0, "spans"]) == "/resourceSpans/0/spans"
    assert json_pointer(["a/b", "c~d"]) == "/a~1b/c~0d"


def test_schema_set_is_shared_and_read_only() -> None:
    """The compiled set is built once and cannot be modified."""
    schema_set = default_schema_set()
    assert default_schema_set() is schema_set
    assert isinstance(schema_set.validators, MappingProxyType)
    with pytest.raises(TypeError):
        schema_set.validators[PayloadType.TRACES] = None  # type: ignore[index]


def test_describe_schemas() -> None:
    """Summary lists each signal's root field and definitions."""
    summary = describe_schemas()
    assert summary["traces"]["root"] == "resourceSpans"
    assert summary["logs"]["root"] == "resourceLogs"
    assert summary["metrics"]["root"] == "resourceMetrics"
    assert "anyValue" in summary["metrics"]["definitions"]
    assert "span" in summary["traces"]["definitions"]
