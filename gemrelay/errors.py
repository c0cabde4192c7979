"""Relay error types.

Each error names the HTTP status it is answered with; the app-level handler in
``gemrelay.server`` renders any of them as ``{"error": message}``.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    code = "RELAY_ERROR"
    http_status = 500

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.data = data or {}

    def to_dict(self) -> Dict[str, Any]:
        """Structured form used in debug logs."""
        return {
            "code": self.code,
            "status": self.http_status,
            "message": self.message,
            "data": self.data,
        }

    def __str__(self) -> str:
        return self.message


# 400s: the client sent something the relay will not forward.

class InvalidInputError(RelayError):
    code = "INVALID_INPUT"
    http_status = 400


class MissingFileError(InvalidInputError):
    code = "MISSING_FILE"


class UnsupportedMediaTypeError(RelayError):
    code = "UNSUPPORTED_MEDIA_TYPE"
    http_status = 400


# 500s

class ProviderError(RelayError):
    """The generative model call failed (transport, HTTP or blocked output)."""

    code = "EXTERNAL_PROVIDER_ERROR"


class UploadStorageError(RelayError):
    """Reading or writing a temporary upload failed."""

    code = "FILESYSTEM_ERROR"


class ConfigurationError(RelayError):
    code = "CONFIGURATION_ERROR"
