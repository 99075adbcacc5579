"""
Compiled structural schemas and translation of jsonschema errors.

The schema set is compiled once per process (default_schema_set) and never
mutated afterwards; validators share it without coordination.
"""

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import cache
from types import MappingProxyType
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaViolation
from jsonschema.validators import extend

from ..result import PayloadType, ValidationError
from .common import Schema
from .logs import logs_schema
from .metrics import metrics_schema
from .traces import traces_schema

logger = logging.getLogger(__name__)

# jsonschema validator keyword -> reported keyword
_KEYWORD_ALIASES = {
    "minimum": "range",
    "maximum": "range",
    "exclusiveMinimum": "range",
    "exclusiveMaximum": "range",
    "decimalMinimum": "range",
    "decimalMaximum": "range",
}

_SCHEMA_BUILDERS = {
    PayloadType.TRACES: traces_schema,
    PayloadType.LOGS: logs_schema,
    PayloadType.METRICS: metrics_schema,
}

DEPTH_LIMIT_MESSAGE = "Payload is nested too deeply to validate"

_DECIMAL = re.compile(r"-?[0-9]+")
# Longer digit strings are far outside any 64-bit bound; compare a stand-in.
_DECIMAL_DIGIT_LIMIT = 40


def _decimal_value(instance: Any) -> int | None:
    if not isinstance(instance, str) or not _DECIMAL.fullmatch(instance):
        return None
    sign = -1 if instance.startswith("-") else 1
    digits = instance.lstrip("-").lstrip("0") or "0"
    if len(digits) > _DECIMAL_DIGIT_LIMIT:
        return sign * 10**_DECIMAL_DIGIT_LIMIT
    return sign * int(digits)


def _decimal_minimum(
    validator: Any, minimum: int, instance: Any, schema: Schema
) -> Iterator[SchemaViolation]:
    value = _decimal_value(instance)
    if value is not None and value < minimum:
        yield SchemaViolation(f"{instance!r} is less than the minimum of {minimum}")


def _decimal_maximum(
    validator: Any, maximum: int, instance: Any, schema: Schema
) -> Iterator[SchemaViolation]:
    value = _decimal_value(instance)
    if value is not None and value > maximum:
        yield SchemaViolation(f"{instance!r} is greater than the maximum of {maximum}")


# Draft 2020-12 plus range checks on decimal-string integers.
OtlpSchemaValidator = extend(
    Draft202012Validator,
    {"decimalMinimum": _decimal_minimum, "decimalMaximum": _decimal_maximum},
)


def json_pointer(parts: Iterable[Any]) -> str:
    """RFC 6901 pointer for a document location; the root is '/'."""
    tokens = [str(p).replace("~", "~0").replace("/", "~1") for p in parts]
    return "/" + "/".join(tokens)


def _document_order(violation: SchemaViolation) -> list[tuple[int, Any]]:
    # Array indices and object keys never compete at the same depth of one parent.
    return [(0, p) if isinstance(p, int) else (1, str(p)) for p in violation.absolute_path]


def _missing_property(violation: SchemaViolation) -> str | None:
    instance = violation.instance
    if not isinstance(instance, dict):
        return None
    for name in violation.validator_value:
        if name not in instance and repr(name) in violation.message:
            return name
    return None


def _translate(violation: SchemaViolation) -> ValidationError:
    keyword = str(violation.validator)
    messages = violation.schema.get("x-messages", {}) if isinstance(violation.schema, dict) else {}
    message = messages.get(keyword, violation.message)
    path = list(violation.absolute_path)
    if keyword == "required":
        missing = _missing_property(violation)
        if missing is not None:
            path.append(missing)
            message = f"{missing} is required"
    return ValidationError(
        path=json_pointer(path),
        message=message,
        keyword=_KEYWORD_ALIASES.get(keyword, keyword),
        schema_path="#/" + "/".join(str(p) for p in violation.absolute_schema_path),
    )


@dataclass(frozen=True)
class StructuralSchemaSet:
    """Read-only set of compiled schemas, one per payload type."""

    schemas: Mapping[PayloadType, Schema]
    validators: Mapping[PayloadType, Any]

    def check(self, payload_type: PayloadType, payload: Any) -> list[ValidationError]:
        """Collect every structural violation, ordered by document location."""
        validator = self.validators[payload_type]
        try:
            violations = sorted(validator.iter_errors(payload), key=_document_order)
        except RecursionError:
            logger.warning(
                "Structural check of %s payload hit the recursion limit", payload_type.value
            )
            return [
                ValidationError(
                    path="",
                    message=DEPTH_LIMIT_MESSAGE,
                    keyword="depth",
                    schema_path="#",
                )
            ]
        return [_translate(v) for v in violations]

    def describe(self) -> dict[str, dict[str, Any]]:
        """Summary of each schema: its root array field and definition names."""
        summary: dict[str, dict[str, Any]] = {}
        for payload_type, schema in self.schemas.items():
            summary[payload_type.value] = {
                "root": next(iter(schema["properties"])),
                "definitions": sorted(schema["$defs"]),
            }
        return summary


def build_schema_set() -> StructuralSchemaSet:
    """Build and compile all structural schemas."""
    schemas: dict[PayloadType, Schema] = {}
    validators: dict[PayloadType, Any] = {}
    for payload_type, builder in _SCHEMA_BUILDERS.items():
        schema = builder()
        OtlpSchemaValidator.check_schema(schema)
        schemas[payload_type] = schema
        validators[payload_type] = OtlpSchemaValidator(schema)
    logger.debug("Compiled structural schemas: %s", ", ".join(t.value for t in schemas))
    return StructuralSchemaSet(
        schemas=MappingProxyType(schemas),
        validators=MappingProxyType(validators),
    )


@cache
def default_schema_set() -> StructuralSchemaSet:
    """Process-wide schema set, compiled on first use."""
    return build_schema_set()


def describe_schemas() -> dict[str, dict[str, Any]]:
    return default_schema_set().describe()
