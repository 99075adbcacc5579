"""Result types shared by the structural and semantic validation layers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PayloadType(Enum):
    """OTLP signal carried by an export request."""

    TRACES = "traces"
    LOGS = "logs"
    METRICS = "metrics"


@dataclass(frozen=True)
class ValidationError:
    """A single validation error; any error makes the payload invalid."""

    path: str
    message: str
    keyword: str
    schema_path: str

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "message": self.message,
            "keyword": self.keyword,
            "schemaPath": self.schema_path,
        }

    def __str__(self) -> str:
        return f"[{self.keyword}] {self.path or '(root)'}: {self.message}"


@dataclass(frozen=True)
class ValidationWarning:
    """An advisory finding; never affects validity."""

    path: str
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"path": self.path, "message": self.message}
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data

    def __str__(self) -> str:
        hint = f" ({self.suggestion})" if self.suggestion else ""
        return f"{self.path or '(root)'}: {self.message}{hint}"


@dataclass
class SemanticResult:
    """Errors and warnings produced by one semantic checker."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    def error(self, path: str, message: str, schema_path: str) -> None:
        self.errors.append(
            ValidationError(path=path, message=message, keyword="semantic", schema_path=schema_path)
        )

    def warn(self, path: str, message: str, suggestion: str | None = None) -> None:
        self.warnings.append(ValidationWarning(path=path, message=message, suggestion=suggestion))


@dataclass
class ValidationResult:
    """Result of validating an OTLP payload."""

    valid: bool
    payload_type: PayloadType | None = None
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    def merge(self, other: "ValidationResult"):
        """Merge another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.valid:
            self.valid = False

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with camelCase keys."""
        return {
            "valid": self.valid,
            "payloadType": self.payload_type.value if self.payload_type else None,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def __str__(self) -> str:
        lines = []
        label = f" ({self.payload_type.value})" if self.payload_type else ""
        if self.valid:
            lines.append(f"✅ Validation passed{label}")
        else:
            lines.append(f"❌ Validation failed{label}")

        if self.errors:
            lines.append(f"\nErrors ({len(self.errors)}):")
            for err in self.errors:
                lines.append(f"  - {err}")

        if self.warnings:
            lines.append(f"\nWarnings ({len(self.warnings)}):")
            for warn in self.warnings:
                lines.append(f"  - {warn}")

        return "\n".join(lines)
