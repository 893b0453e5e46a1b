"""
Custom exceptions for the Pinecone SDK.

Provides a hierarchy of exceptions for better error handling and debugging.
"""

import json
from typing import Any, Dict, Optional


class PineconeSDKError(Exception):
    """Base exception for all SDK errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(PineconeSDKError):
    """Raised when there are configuration issues."""
    pass


class ValidationError(PineconeSDKError):
    """Raised when request parameters are missing or malformed."""
    pass


class PineconeApiError(PineconeSDKError):
    """
    The service answered with an unexpected HTTP status.

    ``str(error)`` is a JSON object carrying the status code, the raw body
    and, when the body could be decoded, the service error code, message
    and details.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        error_code: str = "",
        body: str = "",
        details: Optional[str] = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.body = body
        self.error_details = details
        super().__init__(self._render(status_code, message, error_code, body, details))
        self.message = message

    @staticmethod
    def _render(status_code, message, error_code, body, details) -> str:
        payload: Dict[str, Any] = {"status_code": status_code}
        if body:
            payload["body"] = body
        if error_code:
            payload["error_code"] = error_code
        if message:
            payload["message"] = message
        if details:
            payload["details"] = details
        return json.dumps(payload)

    @property
    def code(self) -> int:
        return self.status_code


class PineconeTransportError(PineconeSDKError):
    """The request never produced an HTTP response."""
    pass


class PineconeTimeoutError(PineconeTransportError):
    """Operation timeout errors."""
    pass


class PineconeConnectionError(PineconeTransportError):
    """The index or controller host could not be reached."""
    pass
