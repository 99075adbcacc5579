"""
Framework-free HTTP boundary for the validator.

Maps a request (method, content type, raw body) to a status code, headers and
JSON body. Decoding and content negotiation happen here so the engine only
ever sees JSON-decoded values.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from .result import ValidationError, ValidationResult
from .validators.otlp_validator import OtlpValidator, default_validator

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPES = ("application/json",)
PROTOBUF_CONTENT_TYPES = ("application/x-protobuf", "application/protobuf")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@dataclass
class ApiResponse:
    """HTTP response produced by the validate endpoint."""

    status: int
    body: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))
    # Engine result behind a 200/400 validation response; not serialized.
    result: ValidationResult | None = field(default=None, repr=False)

    def json(self) -> str:
        return json.dumps(self.body, indent=2) if self.body is not None else ""


def _failure(status: int, message: str, keyword: str) -> ApiResponse:
    error = ValidationError(path="", message=message, keyword=keyword, schema_path="#")
    headers = {"Content-Type": "application/json", **CORS_HEADERS}
    return ApiResponse(
        status=status,
        body={"success": False, "payloadType": None, "errors": [error.to_dict()]},
        headers=headers,
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def _parse_json(text: str) -> Any:
    """Strict JSON: NaN, Infinity and -Infinity are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def _decode_body(content_type: str, body: bytes) -> tuple[Any, ApiResponse | None]:
    """Return (payload, None) or (None, error response)."""
    ctype = content_type.lower()

    if any(t in ctype for t in JSON_CONTENT_TYPES):
        text = body.decode("utf-8", errors="replace")
        if not text.strip():
            return None, _failure(400, "Request body is empty", "required")
        try:
            return _parse_json(text), None
        except ValueError as e:
            return None, _failure(400, f"Invalid JSON: {e}", "format")

    if any(t in ctype for t in PROTOBUF_CONTENT_TYPES):
        if not body:
            return None, _failure(400, "Request body is empty", "required")
        # Some clients send JSON with a protobuf content type.
        try:
            return _parse_json(body.decode("utf-8")), None
        except ValueError:
            return None, _failure(
                415,
                "Binary protobuf decoding is not supported. "
                "Please use JSON format (application/json) or send JSON data.",
                "format",
            )

    return None, _failure(
        415,
        f'Unsupported content type: "{content_type}". '
        "Use application/json or application/x-protobuf",
        "contentType",
    )


def handle_validate_request(
    method: str,
    content_type: str | None,
    body: bytes,
    validator: OtlpValidator | None = None,
) -> ApiResponse:
    """
    Handle a request to the validate endpoint.

    :param method: HTTP method; POST validates, OPTIONS answers CORS preflight.
    :param content_type: Content-Type header value (may be None).
    :param body: Raw request body.
    :param validator: Validator to use; the shared default when omitted.
    :return: ApiResponse with status 200, 204, 400, 405, 415 or 500.
    """
    method = method.upper()
    if method == "OPTIONS":
        return ApiResponse(status=204)
    if method != "POST":
        response = _failure(405, f"Method not allowed: {method}", "method")
        response.headers["Allow"] = "POST, OPTIONS"
        return response

    try:
        payload, error_response = _decode_body(content_type or "", body)
        if error_response is not None:
            return error_response
        result = (validator or default_validator()).validate(payload)
    except Exception as e:
        logger.exception("Validation failed unexpectedly")
        return _failure(500, f"Internal error: {e}", "internal")

    headers = {"Content-Type": "application/json", **CORS_HEADERS}
    payload_type = result.payload_type.value if result.payload_type else None
    if result.valid:
        return ApiResponse(
            status=200,
            body={
                "success": True,
                "payloadType": payload_type,
                "message": f"Valid {payload_type} payload",
            },
            headers=headers,
            result=result,
        )

    response_body: dict[str, Any] = {
        "success": False,
        "payloadType": payload_type,
        "errors": [e.to_dict() for e in result.errors],
    }
    if result.warnings:
        response_body["warnings"] = [w.to_dict() for w in result.warnings]
    return ApiResponse(status=400, body=response_body, headers=headers, result=result)
