"""
Validate OTLP/JSON export requests (traces, logs, metrics).

Pipeline:
- Detect the payload type from its top-level array field
- Structural check against the compiled JSON Schema for that type
- Semantic check for the same type, run even when the structural check failed
- Merge structural and semantic errors; semantic warnings are kept separately
"""

import logging
from collections.abc import Callable
from functools import cache
from typing import Any

from ..config import ValidatorSettings
from ..result import PayloadType, SemanticResult, ValidationError, ValidationResult
from ..schemas.registry import StructuralSchemaSet, default_schema_set
from ..semantic import (
    SemanticContext,
    validate_log_semantics,
    validate_metric_semantics,
    validate_trace_semantics,
)
from .detector import detect_payload_type

logger = logging.getLogger(__name__)

UNDETECTED_TYPE_MESSAGE = (
    "Unable to detect payload type. Expected object with "
    '"resourceSpans", "resourceLogs", or "resourceMetrics" array'
)

SemanticChecker = Callable[[Any, SemanticContext], SemanticResult]

_SEMANTIC_CHECKERS: dict[PayloadType, SemanticChecker] = {
    PayloadType.TRACES: validate_trace_semantics,
    PayloadType.LOGS: validate_log_semantics,
    PayloadType.METRICS: validate_metric_semantics,
}


class OtlpValidator:
    """Validate decoded OTLP/JSON payloads against structure and OTel semantics."""

    def __init__(
        self,
        settings: ValidatorSettings | None = None,
        schema_set: StructuralSchemaSet | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        :param settings: Validator settings; defaults are used when omitted.
        :param schema_set: Compiled schemas; the process-wide set when omitted.
        :param clock: Current time in ns since epoch, for clock-skew checks.
        """
        self.settings = settings or ValidatorSettings()
        self.schema_set = schema_set or default_schema_set()
        context_kwargs: dict[str, Any] = {
            "clock_skew_grace_ns": self.settings.clock_skew_grace_ns
        }
        if clock is not None:
            context_kwargs["clock"] = clock
        self.context = SemanticContext(**context_kwargs)

    def validate(self, payload: Any) -> ValidationResult:
        """Validate a JSON-decoded payload; never raises on malformed input."""
        payload_type = detect_payload_type(payload)

        if payload_type is None:
            logger.debug("Payload type not detected")
            return ValidationResult(
                valid=False,
                payload_type=None,
                errors=[
                    ValidationError(
                        path="",
                        message=UNDETECTED_TYPE_MESSAGE,
                        keyword="type",
                        schema_path="#",
                    )
                ],
            )

        structural_errors = self.schema_set.check(payload_type, payload)
        semantic = _SEMANTIC_CHECKERS[payload_type](payload, self.context)

        errors = [*structural_errors, *semantic.errors]
        logger.debug(
            "Validated %s payload: %d structural error(s), %d semantic error(s), %d warning(s)",
            payload_type.value,
            len(structural_errors),
            len(semantic.errors),
            len(semantic.warnings),
        )
        return ValidationResult(
            valid=not errors,
            payload_type=payload_type,
            errors=errors,
            warnings=list(semantic.warnings),
        )


@cache
def default_validator() -> OtlpValidator:
    """Shared validator with default settings."""
    return OtlpValidator()


def validate_otlp_payload(payload: Any) -> ValidationResult:
    """Validate with the shared default-configured validator."""
    return default_validator().validate(payload)
