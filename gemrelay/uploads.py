from __future__ import annotations

"""Temporary storage for multipart uploads.

Each upload is spooled to its own uniquely named file inside the upload
directory and handed to the route as a :class:`TemporaryUpload`.  Callers use
the ``temporary()`` async context manager:

```python
async with store.temporary(upload_file) as upload:
    part = await upload.to_inline_part()
```

The file is deleted when the block exits, whatever the outcome (errors,
timeouts and cancellation included).
"""

import asyncio
import base64
import shutil
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional

from fastapi import UploadFile
from loguru import logger

from gemrelay.errors import UploadStorageError
from gemrelay.mime import resolve_mime_type
from gemrelay.schemas import InlinePart


@dataclass
class TemporaryUpload:
    path: Path
    mime_type: str
    filename: str
    size: int

    async def read_base64(self) -> str:
        """Read the stored bytes off the event loop and base64-encode them."""
        try:
            data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as exc:
            raise UploadStorageError(f"Could not read uploaded file: {exc}") from exc
        return base64.b64encode(data).decode("ascii")

    async def to_inline_part(self) -> InlinePart:
        return InlinePart(data=await self.read_base64(), mime_type=self.mime_type)


class UploadStore:
    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _new_path(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory / uuid.uuid4().hex

    @staticmethod
    def _spool(source: BinaryIO, destination: Path) -> int:
        source.seek(0)
        with open(destination, "wb") as fh:
            shutil.copyfileobj(source, fh)
            return fh.tell()

    @staticmethod
    def detect_mime_type(upload: UploadFile) -> str:
        """Prefer the declared content type; fall back to the filename extension."""
        if upload.content_type:
            return upload.content_type
        return resolve_mime_type(upload.filename or "")

    def discard(self, path: Path) -> None:
        """Delete *path* if it still exists. Never raises."""
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Temporary file already removed: {path}")
        except OSError as exc:
            logger.error(f"Failed to delete temporary file {path}: {exc}")
        else:
            logger.info(f"Deleted temporary file: {path}")

    @asynccontextmanager
    async def temporary(self, upload: UploadFile) -> AsyncIterator[TemporaryUpload]:
        path: Optional[Path] = None
        try:
            try:
                path = self._new_path()
                size = await asyncio.to_thread(self._spool, upload.file, path)
            except OSError as exc:
                raise UploadStorageError(f"Could not store uploaded file: {exc}") from exc
            yield TemporaryUpload(
                path=path,
                mime_type=self.detect_mime_type(upload),
                filename=upload.filename or path.name,
                size=size,
            )
        finally:
            if path is not None:
                self.discard(path)
