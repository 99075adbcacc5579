"""JSON Schema for OTLP traces (ExportTraceServiceRequest)."""

from .common import (
    Schema,
    array_of,
    attributes_field,
    count_field,
    enum_field,
    int_field,
    obj,
    ref,
    request_schema,
    span_id_field,
    string_field,
    timestamp_field,
    trace_id_field,
)

SPAN_KINDS = {
    0: "UNSPECIFIED",
    1: "INTERNAL",
    2: "SERVER",
    3: "CLIENT",
    4: "PRODUCER",
    5: "CONSUMER",
}

STATUS_CODES = {0: "UNSET", 1: "OK", 2: "ERROR"}


def traces_defs() -> dict[str, Schema]:
    return {
        "status": obj(
            "status",
            {
                "message": string_field("status.message"),
                "code": enum_field("status.code", STATUS_CODES),
            },
        ),
        "event": obj(
            "event",
            {
                "timeUnixNano": timestamp_field("timeUnixNano"),
                "name": string_field("name"),
                "attributes": attributes_field(),
                "droppedAttributesCount": count_field("droppedAttributesCount"),
            },
        ),
        "link": obj(
            "link",
            {
                "traceId": trace_id_field(),
                "spanId": span_id_field(),
                "traceState": string_field("traceState"),
                "attributes": attributes_field(),
                "droppedAttributesCount": count_field("droppedAttributesCount"),
                "flags": int_field("flags"),
            },
        ),
        "span": obj(
            "span",
            {
                "traceId": trace_id_field(),
                "spanId": span_id_field(),
                "traceState": string_field("traceState"),
                "parentSpanId": span_id_field("parentSpanId"),
                "name": string_field("name"),
                "kind": enum_field("kind", SPAN_KINDS),
                "startTimeUnixNano": timestamp_field("startTimeUnixNano"),
                "endTimeUnixNano": timestamp_field("endTimeUnixNano"),
                "attributes": attributes_field(),
                "droppedAttributesCount": count_field("droppedAttributesCount"),
                "events": array_of(ref("event"), "events"),
                "droppedEventsCount": count_field("droppedEventsCount"),
                "links": array_of(ref("link"), "links"),
                "droppedLinksCount": count_field("droppedLinksCount"),
                "status": ref("status"),
                "flags": int_field("flags"),
            },
        ),
        "scopeSpans": obj(
            "scopeSpans",
            {
                "scope": ref("instrumentationScope"),
                "spans": array_of(ref("span"), "spans"),
                "schemaUrl": string_field("schemaUrl"),
            },
        ),
        "resourceSpans": obj(
            "resourceSpans",
            {
                "resource": ref("resource"),
                "scopeSpans": array_of(ref("scopeSpans"), "scopeSpans"),
                "schemaUrl": string_field("schemaUrl"),
            },
        ),
    }


def traces_schema() -> Schema:
    return request_schema("resourceSpans", "resourceSpans", traces_defs())
