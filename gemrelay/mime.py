"""Filename-extension based MIME lookup.

Only a fallback: uploads normally carry the content type declared by the
client, and routes prefer that value.
"""

from pathlib import PurePath

from loguru import logger

FALLBACK_MIME_TYPE = "application/octet-stream"

SUPPORTED_IMAGE_MIME_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")

_EXTENSION_MAP = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def resolve_mime_type(file_path: str) -> str:
    """Return the MIME type for *file_path* based on its extension.

    Matching is case-insensitive.  Unknown extensions resolve to
    ``application/octet-stream`` and emit a warning.
    """
    ext = PurePath(file_path or "").suffix.lower()
    mime_type = _EXTENSION_MAP.get(ext)
    if mime_type is None:
        logger.warning(f'Unrecognized file extension "{ext}". Defaulting to "{FALLBACK_MIME_TYPE}".')
        return FALLBACK_MIME_TYPE
    return mime_type
