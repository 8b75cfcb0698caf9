"""Boundary validation for inbound headers and outbound relay requests.

Each validator takes an untyped mapping and returns a typed record, or raises
``ValidationError`` naming the first offending field.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import pydantic

from src.webhook.errors import InternalError, ValidationError
from src.webhook.models import RelayRequest, WebhookHeaders


def _to_validation_error(exc: pydantic.ValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "value"
    if first["type"] == "missing":
        return ValidationError(field, "field is required")
    return ValidationError(field, first["msg"])


def validate_headers(headers: Mapping[str, Any]) -> WebhookHeaders:
    """Validate inbound webhook headers. Every field is optional."""
    if not isinstance(headers, Mapping):
        raise ValidationError("headers", "expected a mapping")
    lowered = {str(k).lower(): v for k, v in headers.items()}
    try:
        return WebhookHeaders.model_validate(lowered)
    except pydantic.ValidationError as exc:
        raise _to_validation_error(exc) from exc


def validate_relay_request(request: Mapping[str, Any]) -> RelayRequest:
    """Validate an outbound relay request: method, url and headers are required."""
    if not isinstance(request, Mapping):
        raise ValidationError("request", "expected a mapping")
    try:
        return RelayRequest.model_validate(dict(request))
    except pydantic.ValidationError as exc:
        raise _to_validation_error(exc) from exc


def _reject_constant(name: str) -> Any:
    # json.loads accepts non-finite constants; JSON does not
    raise ValueError(f"{name} is not valid JSON")


def parse_payload(raw_payload: bytes) -> Any:
    """Decode the inbound body as JSON, raising InternalError when it is not."""
    try:
        return json.loads(raw_payload, parse_constant=_reject_constant)
    except ValueError as exc:
        raise InternalError("Invalid JSON payload") from exc
