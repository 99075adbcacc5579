"""
Shared JSON Schema building blocks for OTLP/JSON export requests.

Field names follow the OTLP JSON encoding (lowerCamelCase). Definitions that
are referenced from more than one place live under $defs and are pulled in
with $ref; the recursive AnyValue type is only ever referenced, never inlined,
so the validator resolves nested arrays and key/value lists lazily.

Schemas may carry an "x-messages" mapping of validator keyword -> message.
Unknown keywords are ignored by JSON Schema, and the structural checker uses
these to replace the generic jsonschema wording.

64-bit integers travel as decimal strings, so "decimalMinimum" and
"decimalMaximum" bound the string form the way minimum/maximum bound the
number form. The registry registers both keywords with the validator.
"""

from typing import Any

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

TRACE_ID_PATTERN = "^[0-9a-fA-F]{32}$"
SPAN_ID_PATTERN = "^[0-9a-fA-F]{16}$"
UINT64_PATTERN = "^[0-9]+$"
INT64_PATTERN = "^-?[0-9]+$"

UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

Schema = dict[str, Any]


def ref(name: str) -> Schema:
    """Reference a definition under $defs."""
    return {"$ref": f"#/$defs/{name}"}


def array_of(items: Schema, name: str) -> Schema:
    return {
        "type": "array",
        "items": items,
        "x-messages": {"type": f"{name} must be an array"},
    }


def string_field(name: str) -> Schema:
    return {"type": "string", "x-messages": {"type": f"{name} must be a string"}}


def bool_field(name: str) -> Schema:
    return {"type": "boolean", "x-messages": {"type": f"{name} must be a boolean"}}


def double_field(name: str) -> Schema:
    return {"type": "number", "x-messages": {"type": f"{name} must be a number"}}


def int_field(
    name: str,
    minimum: int | None = None,
    maximum: int | None = None,
    legend: str | None = None,
) -> Schema:
    """Integer-only field, optionally range-limited; legend documents enum values."""
    suffix = f" ({legend})" if legend else ""
    schema: Schema = {
        "type": "integer",
        "x-messages": {"type": f"{name} must be an integer{suffix}"},
    }
    if minimum is not None:
        schema["minimum"] = minimum
        schema["x-messages"]["minimum"] = f"{name} must be >= {minimum}"
    if maximum is not None:
        schema["maximum"] = maximum
        schema["x-messages"]["maximum"] = f"{name} must be <= {maximum}{suffix}"
    return schema


def enum_field(name: str, values: dict[int, str]) -> Schema:
    """Enum encoded as its integer value; names are not accepted."""
    legend = ", ".join(f"{label}={number}" for number, label in sorted(values.items()))
    return int_field(name, minimum=min(values), maximum=max(values), legend=legend)


def count_field(name: str) -> Schema:
    """Non-negative 32-bit counters (dropped*Count)."""
    return int_field(name, minimum=0)


def int64_field(name: str) -> Schema:
    """Signed 64-bit integer: decimal string or JSON number."""
    return {
        "type": ["string", "integer"],
        "pattern": INT64_PATTERN,
        "minimum": INT64_MIN,
        "maximum": INT64_MAX,
        "decimalMinimum": INT64_MIN,
        "decimalMaximum": INT64_MAX,
        "x-messages": {
            "type": f"{name} must be an integer or a decimal string",
            "pattern": f"{name} must be a decimal integer string",
            "minimum": f"{name} must be >= {INT64_MIN}",
            "maximum": f"{name} must be <= {INT64_MAX}",
            "decimalMinimum": f"{name} must be >= {INT64_MIN}",
            "decimalMaximum": f"{name} must be <= {INT64_MAX}",
        },
    }


def uint64_field(name: str) -> Schema:
    """Unsigned 64-bit integer (timestamps, counts): decimal string or JSON number."""
    return {
        "type": ["string", "integer"],
        "pattern": UINT64_PATTERN,
        "minimum": 0,
        "maximum": UINT64_MAX,
        "decimalMaximum": UINT64_MAX,
        "x-messages": {
            "type": f"{name} must be an integer or a decimal string",
            "pattern": f"{name} must be a non-negative decimal integer string",
            "minimum": f"{name} must be >= 0",
            "maximum": f"{name} must be <= {UINT64_MAX}",
            "decimalMaximum": f"{name} must be <= {UINT64_MAX}",
        },
    }


def timestamp_field(name: str) -> Schema:
    return uint64_field(name)


def trace_id_field(name: str = "traceId") -> Schema:
    return {
        "type": "string",
        "pattern": TRACE_ID_PATTERN,
        "x-messages": {
            "type": f"{name} must be a string",
            "pattern": f"{name} must be a 32-character hex string",
        },
    }


def span_id_field(name: str = "spanId") -> Schema:
    return {
        "type": "string",
        "pattern": SPAN_ID_PATTERN,
        "x-messages": {
            "type": f"{name} must be a string",
            "pattern": f"{name} must be a 16-character hex string",
        },
    }


def obj(name: str, properties: dict[str, Schema], required: list[str] | None = None) -> Schema:
    """Object schema that tolerates unknown fields."""
    schema: Schema = {
        "type": "object",
        "properties": properties,
        "x-messages": {"type": f"{name} must be an object"},
    }
    if required:
        schema["required"] = required
        schema["x-messages"]["required"] = f"{name} requires: {', '.join(required)}"
    return schema


def attributes_field(name: str = "attributes") -> Schema:
    return array_of(ref("keyValue"), name)


def common_defs() -> dict[str, Schema]:
    """Definitions shared by the traces, logs and metrics schemas."""
    return {
        "anyValue": obj(
            "AnyValue",
            {
                "stringValue": string_field("stringValue"),
                "boolValue": bool_field("boolValue"),
                "intValue": int64_field("intValue"),
                "doubleValue": double_field("doubleValue"),
                "arrayValue": ref("arrayValue"),
                "kvlistValue": ref("kvlistValue"),
                "bytesValue": string_field("bytesValue"),
            },
        ),
        "arrayValue": obj("arrayValue", {"values": array_of(ref("anyValue"), "values")}),
        "kvlistValue": obj("kvlistValue", {"values": array_of(ref("keyValue"), "values")}),
        "keyValue": obj(
            "attribute",
            {"key": string_field("key"), "value": ref("anyValue")},
            required=["key"],
        ),
        "resource": obj(
            "resource",
            {
                "attributes": attributes_field(),
                "droppedAttributesCount": count_field("droppedAttributesCount"),
            },
        ),
        "instrumentationScope": obj(
            "scope",
            {
                "name": string_field("name"),
                "version": string_field("version"),
                "attributes": attributes_field(),
                "droppedAttributesCount": count_field("droppedAttributesCount"),
            },
        ),
    }


def request_schema(root_key: str, container_def: str, defs: dict[str, Schema]) -> Schema:
    """Top-level export request: {root_key: [container_def, ...]}."""
    return {
        "$schema": JSON_SCHEMA_DIALECT,
        "type": "object",
        "properties": {root_key: array_of(ref(container_def), root_key)},
        "$defs": {**common_defs(), **defs},
    }
