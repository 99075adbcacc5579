"""Structural JSON Schemas for OTLP/JSON export requests."""

from .registry import (
    StructuralSchemaSet,
    build_schema_set,
    default_schema_set,
    describe_schemas,
    json_pointer,
)

__all__ = [
    "StructuralSchemaSet",
    "build_schema_set",
    "default_schema_set",
    "describe_schemas",
    "json_pointer",
]
