"""Tests for the OTLP/JSON exporters and the SDK sample generator."""

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.trace import SpanKind

from otlpcheck.exporters import OtlpJsonSpanExporter, encode_value, merge_requests
from otlpcheck.exporters.otlp_json import encode_metric
from otlpcheck.generators import SampleGenerator
from otlpcheck.result import PayloadType
from otlpcheck.validators import OtlpValidator


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("GET", {"stringValue": "GET"}),
        (True, {"boolValue": True}),
        (200, {"intValue": "200"}),
        (0.5, {"doubleValue": 0.5}),
        (b"\x00\x01", {"bytesValue": "AAE="}),
        (None, {}),
    ],
)
def test_encode_scalar_values(value: object, expected: dict) -> None:
    """Scalars map to the matching AnyValue field; ints become decimal strings."""
    assert encode_value(value) == expected


def test_encode_nested_values() -> None:
    """Sequences and mappings become arrayValue and kvlistValue."""
    encoded = encode_value({"codes": (1, 2), "name": "x"})
    assert encoded == {
        "kvlistValue": {
            "values": [
                {
                    "key": "codes",
                    "value": {"arrayValue": {"values": [{"intValue": "1"}, {"intValue": "2"}]}},
                },
                {"key": "name", "value": {"stringValue": "x"}},
            ]
        }
    }


def _export_spans(exporter: OtlpJsonSpanExporter) -> TracerProvider:
    provider = TracerProvider(resource=Resource.create({"service.name": "exporter-test"}))
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    tracer = provider.get_tracer("exporter-test", "0.1.0")
    with tracer.start_as_current_span("parent", kind=SpanKind.SERVER):
        with tracer.start_as_current_span("child", kind=SpanKind.INTERNAL) as child:
            child.set_attribute("retries", 2)
    provider.shutdown()
    return provider


def test_span_exporter_encodes_otlp_json() -> None:
    """Span kinds are shifted to OTLP values and the child references its parent."""
    exporter = OtlpJsonSpanExporter()
    _export_spans(exporter)

    request = merge_requests(exporter.requests)
    assert len(request["resourceSpans"]) == 1
    scope_spans = request["resourceSpans"][0]["scopeSpans"]
    assert [s["scope"]["name"] for s in scope_spans] == ["exporter-test"]
    spans = {s["name"]: s for s in scope_spans[0]["spans"]}

    assert spans["parent"]["kind"] == 2
    assert spans["child"]["kind"] == 1
    assert spans["child"]["parentSpanId"] == spans["parent"]["spanId"]
    assert spans["child"]["traceId"] == spans["parent"]["traceId"]
    assert len(spans["child"]["traceId"]) == 32
    assert spans["child"]["attributes"] == [{"key": "retries", "value": {"intValue": "2"}}]
    assert isinstance(spans["child"]["startTimeUnixNano"], str)
    assert spans["child"]["status"] == {"code": 0}


def test_span_exporter_writes_json_lines(tmp_path: Path) -> None:
    """Each export call appends one request per line."""
    output = tmp_path / "out" / "spans.jsonl"
    exporter = OtlpJsonSpanExporter(output_path=output)
    _export_spans(exporter)

    lines = output.read_text(encoding="utf-8").splitlines()
    assert len(lines) == len(exporter.requests) == 2
    assert json.loads(lines[0]) == exporter.requests[0]


def test_span_exporter_truncates_when_not_appending(tmp_path: Path) -> None:
    output = tmp_path / "spans.jsonl"
    output.write_text("stale\n", encoding="utf-8")
    _export_spans(OtlpJsonSpanExporter(output_path=output, append=False))
    assert "stale" not in output.read_text(encoding="utf-8")


def test_unsupported_metric_data_is_rejected() -> None:
    metric = SimpleNamespace(name="m", description="", unit="", data=object())
    with pytest.raises(TypeError):
        encode_metric(metric)


def test_merge_requests_concatenates_containers() -> None:
    merged = merge_requests([{"resourceSpans": [1]}, {"resourceSpans": [2, 3]}])
    assert merged == {"resourceSpans": [1, 2, 3]}
    assert merge_requests([]) == {}


@pytest.mark.parametrize("payload_type", list(PayloadType))
def test_generated_samples_validate_cleanly(payload_type: PayloadType) -> None:
    """SDK output encoded by the exporters passes both validation layers."""
    payload = SampleGenerator(service_name="sample-test").generate(payload_type)
    result = OtlpValidator().validate(payload)
    assert result.payload_type is payload_type
    assert result.errors == []
    assert result.valid is True


def test_trace_sample_contents() -> None:
    payload = SampleGenerator().traces()
    spans = [
        s
        for rs in payload["resourceSpans"]
        for ss in rs["scopeSpans"]
        for s in ss["spans"]
    ]
    assert sorted(s["kind"] for s in spans) == [2, 3, 4, 5]
    consumer = next(s for s in spans if s["kind"] == 5)
    assert consumer["status"] == {"code": 2, "message": "smtp timeout"}
    assert len(consumer["links"]) == 1


def test_metric_sample_has_every_shape() -> None:
    payload = SampleGenerator().metrics()
    metrics = [
        m
        for rm in payload["resourceMetrics"]
        for sm in rm["scopeMetrics"]
        for m in sm["metrics"]
    ]
    expected = {"sum", "gauge", "histogram", "exponentialHistogram"}
    assert {name for m in metrics for name in expected if name in m} == expected


def test_log_sample_correlates_with_span() -> None:
    payload = SampleGenerator().logs()
    records = [
        r
        for rl in payload["resourceLogs"]
        for sl in rl["scopeLogs"]
        for r in sl["logRecords"]
    ]
    assert len(records) == 4
    assert "traceId" not in records[0]
    assert all("traceId" in r for r in records[1:])
    assert [r["severityNumber"] for r in records] == [5, 9, 13, 17]
