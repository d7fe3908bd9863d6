# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Responder error codes and exception classes.

Only request-level failures are raised. Problems with individual fields of
business data never surface here: they degrade into ledger entries or
best-effort substitute values.

Error body schema:
```json
{
  "error": {
    "code": "INVALID_OPTIONS",
    "message": "Options node for 'owner' must be an object, got list",
    "details": {"path": "owner"}
  }
}
```
"""

from enum import Enum
from typing import Any


class ResponderErrorCode(str, Enum):
    """Standard responder error codes.

    Each code maps to a specific HTTP status.
    """

    # 400 Bad Request
    INVALID_OPTIONS = "INVALID_OPTIONS"
    INVALID_PARAMS = "INVALID_PARAMS"
    PARAMS_PARSE_ERROR = "PARAMS_PARSE_ERROR"

    # 415 Unsupported Media Type
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"

    # 500 Internal Server Error
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # 501 Not Implemented
    NOT_SUPPORTED = "NOT_SUPPORTED"


ERROR_CODE_TO_HTTP_STATUS: dict[ResponderErrorCode, int] = {
    # 400
    ResponderErrorCode.INVALID_OPTIONS: 400,
    ResponderErrorCode.INVALID_PARAMS: 400,
    ResponderErrorCode.PARAMS_PARSE_ERROR: 400,
    # 415
    ResponderErrorCode.UNSUPPORTED_MEDIA_TYPE: 415,
    # 500
    ResponderErrorCode.INTERNAL_ERROR: 500,
    # 501
    ResponderErrorCode.NOT_SUPPORTED: 501,
}


class ResponderError(Exception):
    """Base exception for responder errors.

    Usage:
        raise ResponderError(
            code=ResponderErrorCode.INVALID_PARAMS,
            message="page must be an integer",
            details={"param": "page"},
        )
    """

    def __init__(
        self,
        code: ResponderErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code if isinstance(code, ResponderErrorCode) else ResponderErrorCode(code)
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def http_status(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_CODE_TO_HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Specific Error Classes (Convenience)
# =============================================================================


class InvalidOptionsError(ResponderError):
    """Raised when a joins/options tree has a node of an unsupported shape."""

    def __init__(self, path: str, message: str):
        super().__init__(
            code=ResponderErrorCode.INVALID_OPTIONS,
            message=message,
            details={"path": path},
        )


class InvalidParamsError(ResponderError):
    """Raised when a request parameter cannot be interpreted."""

    def __init__(self, param: str, message: str | None = None):
        super().__init__(
            code=ResponderErrorCode.INVALID_PARAMS,
            message=message or f"Invalid value for parameter '{param}'",
            details={"param": param},
        )


class ParamsParseError(ResponderError):
    """Raised when the request input cannot be parsed at all."""

    def __init__(self, message: str, content_type: str | None = None):
        super().__init__(
            code=ResponderErrorCode.PARAMS_PARSE_ERROR,
            message=message,
            details={"content_type": content_type} if content_type else None,
        )


class UnsupportedMediaTypeError(ResponderError):
    """Raised when the codec cannot encode for the negotiated media type."""

    def __init__(self, media_type: str):
        super().__init__(
            code=ResponderErrorCode.UNSUPPORTED_MEDIA_TYPE,
            message=f"No encoder available for '{media_type}'",
            details={"media_type": media_type},
        )


class UnsupportedOperationError(ResponderError):
    """Raised for operations the envelope format can never perform."""

    def __init__(self, operation: str):
        super().__init__(
            code=ResponderErrorCode.NOT_SUPPORTED,
            message=f"{operation} not supported",
            details={"operation": operation},
        )
