"""
OTLP payload validator - structural and semantic checks for OTLP/JSON.

Validates OpenTelemetry export requests (traces, logs, metrics) encoded as
JSON and reports every violation with a JSON Pointer location.
"""

__version__ = "1.0.0"
