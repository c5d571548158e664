"""
fieldrules HTTP Error Responses
===============================

Renders a failed ValidationResult as a 422 JSON error body for HTTP
layers. Framework-agnostic: returns the status, headers and body bytes,
leaving the request/response objects to the host framework.

Example:
    result = validation.run(rules, request_params)
    response = error_response(result)
    if response is not None:
        return framework_response(
            response.body,
            status=response.status_code,
            headers=response.headers,
        )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import orjson

from fieldrules.validation.validator import ValidationResult


UNPROCESSABLE_ENTITY = 422

DEFAULT_ERROR_MESSAGE = "The given data was invalid."


def error_body(
    result: ValidationResult,
    message: str = DEFAULT_ERROR_MESSAGE,
) -> Dict[str, Any]:
    """Build the JSON-serializable error document."""
    return {
        "message": message,
        "errors": result.get_error_messages(),
    }


@dataclass
class ValidationErrorResponse:
    """422 response payload for a failed validation."""

    content: Dict[str, Any]
    status_code: int = UNPROCESSABLE_ENTITY
    headers: Dict[str, str] = field(default_factory=dict)

    media_type = "application/json"

    def __post_init__(self) -> None:
        self.headers.setdefault("Content-Type", self.media_type)

    @property
    def body(self) -> bytes:
        """Serialize content to JSON bytes."""
        return orjson.dumps(self.content)


def error_response(
    result: ValidationResult,
    message: str = DEFAULT_ERROR_MESSAGE,
) -> Optional[ValidationErrorResponse]:
    """
    Build a 422 response for a failed result.

    Returns:
        Response payload, or None if the result passed
    """
    if result.passes():
        return None
    return ValidationErrorResponse(content=error_body(result, message))
