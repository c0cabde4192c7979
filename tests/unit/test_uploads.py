"""
Tests for temporary upload storage.
"""

import asyncio
import base64
import io

import pytest
from fastapi import UploadFile
from fastapi.datastructures import Headers

from gemrelay.errors import UploadStorageError
from gemrelay.uploads import TemporaryUpload, UploadStore


def make_upload(data=b"payload", filename="photo.png", content_type=None):
    headers = Headers({"content-type": content_type}) if content_type else None
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=headers)


@pytest.fixture
def store(tmp_path):
    return UploadStore(tmp_path / "uploads")


class TestDetectMimeType:
    def test_prefers_declared_content_type(self):
        upload = make_upload(filename="photo.png", content_type="image/gif")
        assert UploadStore.detect_mime_type(upload) == "image/gif"

    def test_falls_back_to_extension(self):
        upload = make_upload(filename="photo.JPG")
        assert UploadStore.detect_mime_type(upload) == "image/jpeg"

    def test_unknown_without_declared_type(self):
        upload = make_upload(filename="blob")
        assert UploadStore.detect_mime_type(upload) == "application/octet-stream"


class TestTemporaryUpload:
    @pytest.mark.asyncio
    async def test_spools_and_removes(self, store):
        async with store.temporary(make_upload(b"hello", content_type="image/png")) as upload:
            assert isinstance(upload, TemporaryUpload)
            assert upload.path.parent == store.directory
            assert upload.path.read_bytes() == b"hello"
            assert upload.size == 5
            assert upload.mime_type == "image/png"
            assert upload.filename == "photo.png"
            path = upload.path

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_each_upload_gets_its_own_path(self, store):
        async with store.temporary(make_upload(b"a")) as first:
            async with store.temporary(make_upload(b"b")) as second:
                assert first.path != second.path

    @pytest.mark.asyncio
    async def test_removed_when_block_raises(self, store):
        with pytest.raises(RuntimeError):
            async with store.temporary(make_upload()) as upload:
                path = upload.path
                raise RuntimeError("generation failed")

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_removed_on_cancellation(self, store):
        with pytest.raises(asyncio.CancelledError):
            async with store.temporary(make_upload()) as upload:
                path = upload.path
                raise asyncio.CancelledError()

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_already_deleted_file_is_fine(self, store):
        async with store.temporary(make_upload()) as upload:
            upload.path.unlink()

        assert list(store.directory.iterdir()) == []

    @pytest.mark.asyncio
    async def test_inline_part(self, store):
        data = bytes(range(256))
        async with store.temporary(make_upload(data, content_type="audio/wav")) as upload:
            part = await upload.to_inline_part()

        assert part.mime_type == "audio/wav"
        assert base64.b64decode(part.data) == data

    @pytest.mark.asyncio
    async def test_read_missing_file(self, store):
        async with store.temporary(make_upload()) as upload:
            upload.path.unlink()
            with pytest.raises(UploadStorageError):
                await upload.read_base64()


def test_discard_missing_path_does_not_raise(store, tmp_path):
    store.discard(tmp_path / "never-created")
