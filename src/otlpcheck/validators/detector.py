"""Classify a decoded JSON document as an OTLP traces, logs or metrics request."""

from typing import Any

from ..result import PayloadType

# Checked in this order; the first array-valued key wins.
PAYLOAD_ROOT_KEYS: tuple[tuple[str, PayloadType], ...] = (
    ("resourceSpans", PayloadType.TRACES),
    ("resourceLogs", PayloadType.LOGS),
    ("resourceMetrics", PayloadType.METRICS),
)


def detect_payload_type(payload: Any) -> PayloadType | None:
    """Return the signal type from top-level keys only, or None if unrecognized."""
    if not isinstance(payload, dict):
        return None
    for key, payload_type in PAYLOAD_ROOT_KEYS:
        if isinstance(payload.get(key), list):
            return payload_type
    return None
