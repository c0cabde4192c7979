# ---------------------------------------------------------------------------
# Public library API – import-light facade
# ---------------------------------------------------------------------------

from .errors import (  # noqa: F401
    InvalidInputError,
    MissingFileError,
    ProviderError,
    RelayError,
    UnsupportedMediaTypeError,
    UploadStorageError,
)
from .llm import GeminiModel  # noqa: F401
from .mime import resolve_mime_type  # noqa: F401
from .server import create_app  # noqa: F401

__all__ = [
    "create_app",
    "GeminiModel",
    "resolve_mime_type",
    "RelayError",
    "InvalidInputError",
    "MissingFileError",
    "UnsupportedMediaTypeError",
    "ProviderError",
    "UploadStorageError",
]
