"""
API error types.

Non-2xx responses become ``ApiError`` subclasses. Transport failures are not
wrapped; they surface as ``requests`` exceptions.
"""

from typing import Any, Dict, Optional

import requests

from auth_template.utils.logger import get_logger

logger = get_logger(__name__)


def parse_validation_errors(payload: Dict[str, Any]) -> Dict[str, str]:
    """
    Flatten a validation error body into field -> message.

    Args:
        payload: ``{"errors": [{"field": ..., "message": ...}, ...]}``.

    Returns:
        Dict[str, str]: Message per field. A later entry for the same field
        replaces an earlier one.
    """
    errors: Dict[str, str] = {}

    for error in payload.get("errors") or []:
        if isinstance(error, dict) and "field" in error:
            errors[str(error["field"])] = str(error.get("message", ""))

    return errors


class ApiError(RuntimeError):
    """Raised when the backend answers with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        response: Optional[requests.Response] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.response = response

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiError":
        """
        Build the most specific error for a failed response.

        Args:
            response: Non-success response.

        Returns:
            ApiError: ``ValidationFailedError`` when the body lists field
            errors, ``UnauthorizedError`` for 401, otherwise ``ApiError``.
        """
        status_code = response.status_code
        message = f"Request failed with status {status_code}"
        error_code = None

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            if isinstance(payload.get("errors"), list):
                return ValidationFailedError(
                    "Validation failed",
                    field_errors=parse_validation_errors(payload),
                    status_code=status_code,
                    error_code="VALIDATION_ERROR",
                    response=response,
                )

            error = payload.get("error")
            if isinstance(error, dict):
                message = error.get("message") or message
                error_code = error.get("code")
            elif isinstance(payload.get("message"), str):
                message = payload["message"]

        error_cls = UnauthorizedError if status_code == 401 else ApiError

        return error_cls(
            message,
            status_code=status_code,
            error_code=error_code,
            response=response,
        )


class UnauthorizedError(ApiError):
    """Raised on 401: expired, missing or rejected credentials."""


class ValidationFailedError(ApiError):
    """Raised when the backend rejects request fields."""

    def __init__(self, message: str, *, field_errors: Dict[str, str], **kwargs):
        super().__init__(message, **kwargs)
        self.field_errors = field_errors


class InvalidResponseError(ApiError):
    """Raised when a success response does not carry the expected JSON."""
