"""Tests for SkyFile and the built-in blob stores."""

import pytest

from skydb.blob import (
    DEFAULT_CONTENT_TYPE,
    FileSystemBlobStore,
    MemoryBlobStore,
    SkyFile,
    compute_locator,
)
from skydb.errors import EncodingError, IntegrityError, NotFoundError


class TestSkyFile:
    """Test SkyFile construction."""

    def test_new_guesses_content_type(self):
        f = SkyFile.new("thisistext", "foo.txt")
        assert f.data == b"thisistext"
        assert f.content_type == "text/plain"
        assert len(f) == 10

    def test_unknown_extension(self):
        assert SkyFile.new(b"\x00", "blob.unknownext").content_type == DEFAULT_CONTENT_TYPE

    def test_from_path(self, tmp_path):
        path = tmp_path / "notes.json"
        path.write_bytes(b"{}")
        f = SkyFile.from_path(path)
        assert f.filename == "notes.json"
        assert f.content_type == "application/json"
        assert f.data == b"{}"


class TestComputeLocator:
    """Test content addressing."""

    def test_shape(self):
        locator = compute_locator(b"hello")
        assert len(locator) == 46
        assert "=" not in locator

    def test_content_addressed(self):
        assert compute_locator(b"hello") == compute_locator(b"hello")
        assert compute_locator(b"hello") != compute_locator(b"hellO")


@pytest.fixture(params=["memory", "filesystem"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryBlobStore()
    return FileSystemBlobStore(tmp_path / "blobs")


class TestBlobStores:
    """Behavior shared by all built-in stores."""

    @pytest.mark.asyncio
    async def test_put_get(self, store):
        locator = await store.put(SkyFile.new(b"thisistext", "foo.txt"))
        assert locator == compute_locator(b"thisistext")
        assert await store.get(locator) == b"thisistext"

    @pytest.mark.asyncio
    async def test_put_is_idempotent(self, store):
        a = await store.put(SkyFile.new(b"same", "a.txt"))
        b = await store.put(SkyFile.new(b"same", "b.txt"))
        assert a == b

    @pytest.mark.asyncio
    async def test_unknown_locator(self, store):
        with pytest.raises(NotFoundError):
            await store.get(compute_locator(b"never stored"))


class TestFileSystemBlobStore:
    """Directory layout specifics."""

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        locator = await FileSystemBlobStore(tmp_path).put(SkyFile.new(b"durable", "d.txt"))
        assert await FileSystemBlobStore(tmp_path).get(locator) == b"durable"

    @pytest.mark.asyncio
    async def test_malformed_locator(self, tmp_path):
        with pytest.raises(EncodingError):
            await FileSystemBlobStore(tmp_path).get("../../etc/passwd")

    @pytest.mark.asyncio
    async def test_corrupted_body_rejected(self, tmp_path):
        store = FileSystemBlobStore(tmp_path)
        locator = await store.put(SkyFile.new(b"thisistext", "foo.txt"))
        store._path(locator).write_bytes(b"thisis")

        with pytest.raises(IntegrityError):
            await store.get(locator)

    @pytest.mark.asyncio
    async def test_put_repairs_truncated_body(self, tmp_path):
        store = FileSystemBlobStore(tmp_path)
        locator = compute_locator(b"thisistext")
        path = store._path(locator)
        path.parent.mkdir(parents=True)
        path.write_bytes(b"this")

        assert await store.put(SkyFile.new(b"thisistext", "foo.txt")) == locator
        assert await store.get(locator) == b"thisistext"

    @pytest.mark.asyncio
    async def test_no_temporary_files_left(self, tmp_path):
        store = FileSystemBlobStore(tmp_path)
        locator = await store.put(SkyFile.new(b"thisistext", "foo.txt"))
        names = sorted(p.name for p in store._path(locator).parent.iterdir())
        assert names == [store._path(locator).name, store._path(locator).name + ".json"]
