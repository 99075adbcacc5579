"""Validators for OTLP/JSON payloads."""

from .detector import detect_payload_type
from .otlp_validator import OtlpValidator, validate_otlp_payload

__all__ = [
    "OtlpValidator",
    "detect_payload_type",
    "validate_otlp_payload",
]
