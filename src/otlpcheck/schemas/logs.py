"""JSON Schema for OTLP logs (ExportLogsServiceRequest)."""

from .common import (
    Schema,
    array_of,
    attributes_field,
    count_field,
    int_field,
    obj,
    ref,
    request_schema,
    span_id_field,
    string_field,
    timestamp_field,
    trace_id_field,
)

SEVERITY_LEGEND = (
    "UNSPECIFIED=0, TRACE=1-4, DEBUG=5-8, INFO=9-12, WARN=13-16, ERROR=17-20, FATAL=21-24"
)


def logs_defs() -> dict[str, Schema]:
    return {
        "logRecord": obj(
            "logRecord",
            {
                "timeUnixNano": timestamp_field("timeUnixNano"),
                "observedTimeUnixNano": timestamp_field("observedTimeUnixNano"),
                "severityNumber": int_field(
                    "severityNumber", minimum=0, maximum=24, legend=SEVERITY_LEGEND
                ),
                "severityText": string_field("severityText"),
                "body": ref("anyValue"),
                "attributes": attributes_field(),
                "droppedAttributesCount": count_field("droppedAttributesCount"),
                "flags": int_field("flags"),
                "traceId": trace_id_field(),
                "spanId": span_id_field(),
                "eventName": string_field("eventName"),
            },
        ),
        "scopeLogs": obj(
            "scopeLogs",
            {
                "scope": ref("instrumentationScope"),
                "logRecords": array_of(ref("logRecord"), "logRecords"),
                "schemaUrl": string_field("schemaUrl"),
            },
        ),
        "resourceLogs": obj(
            "resourceLogs",
            {
                "resource": ref("resource"),
                "scopeLogs": array_of(ref("scopeLogs"), "scopeLogs"),
                "schemaUrl": string_field("schemaUrl"),
            },
        ),
    }


def logs_schema() -> Schema:
    return request_schema("resourceLogs", "resourceLogs", logs_defs())
