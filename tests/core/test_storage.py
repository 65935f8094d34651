"""Tests for core.storage: backends, compression and the key-value facade."""

import pytest

from barakah.core.storage import (
    CompressionType,
    KeyValueStore,
    LocalStorage,
    MemoryStorage,
    StorageKeyError,
    StoragePermissionError,
    compress_bytes,
    decompress_bytes,
)
from barakah.core.storage.compression import get_compression_for_content_type

# ── Compression utilities ───────────────────────────────────────────


class TestCompression:
    def test_gzip_roundtrip(self):
        data = b'{"portfolio": "Family"}' * 100
        compressed = compress_bytes(data, CompressionType.GZIP)
        assert compressed != data
        assert decompress_bytes(compressed, CompressionType.GZIP) == data

    def test_none_passthrough(self):
        data = b"untouched"
        assert compress_bytes(data, CompressionType.NONE) is data
        assert decompress_bytes(data, CompressionType.NONE) is data

    def test_content_type_routing(self):
        assert get_compression_for_content_type("application/json") == CompressionType.GZIP
        assert get_compression_for_content_type("text/plain") == CompressionType.GZIP
        assert get_compression_for_content_type("application/octet-stream") == CompressionType.NONE


# ── LocalStorage ────────────────────────────────────────────────────


class TestLocalStorage:
    @pytest.fixture
    def storage(self, tmp_path):
        return LocalStorage(base_path=str(tmp_path / "store"))

    @pytest.mark.asyncio
    async def test_save_and_load(self, storage):
        data = b"test data content"
        meta = await storage.save("test/file.bin", data)
        assert meta.key == "test/file.bin"
        assert meta.compression is None
        assert await storage.load("test/file.bin") == data

    @pytest.mark.asyncio
    async def test_json_is_gzipped_on_disk(self, storage):
        data = b'{"a": 1}' * 50
        meta = await storage.save("doc", data, content_type="application/json")
        assert meta.compression == "gzip"
        assert (storage.base_path / "doc.gz").exists()
        assert not (storage.base_path / "doc").exists()
        assert await storage.load("doc") == data

    @pytest.mark.asyncio
    async def test_overwrite_replaces_other_encoding(self, storage):
        await storage.save("doc", b"plain")
        await storage.save("doc", b'{"b": 2}', content_type="application/json")
        assert not (storage.base_path / "doc").exists()
        assert await storage.load("doc") == b'{"b": 2}'

    @pytest.mark.asyncio
    async def test_no_tmp_file_left_behind(self, storage):
        await storage.save("doc", b"data")
        assert [p.name for p in storage.base_path.iterdir()] == ["doc"]

    @pytest.mark.asyncio
    async def test_load_missing_raises(self, storage):
        with pytest.raises(StorageKeyError):
            await storage.load("nonexistent")

    @pytest.mark.asyncio
    async def test_exists(self, storage):
        assert not await storage.exists("nope")
        await storage.save("yep", b"data", content_type="application/json")
        assert await storage.exists("yep")

    @pytest.mark.asyncio
    async def test_delete(self, storage):
        await storage.save("del-me", b"data")
        assert await storage.delete("del-me") is True
        assert not await storage.exists("del-me")
        assert await storage.delete("del-me") is False

    @pytest.mark.asyncio
    async def test_list_keys_strips_suffix(self, storage):
        await storage.save("portfolios/a", b"1", content_type="application/json")
        await storage.save("portfolios/b", b"2")
        await storage.save("other/c", b"3")

        keys = [k async for k in storage.list_keys(prefix="portfolios/")]
        assert sorted(keys) == ["portfolios/a", "portfolios/b"]

    @pytest.mark.asyncio
    async def test_list_keys_with_limit(self, storage):
        for i in range(5):
            await storage.save(f"item{i}", b"x")
        keys = [k async for k in storage.list_keys(limit=3)]
        assert len(keys) == 3

    @pytest.mark.parametrize("key", ["", "../escape", "/etc/passwd", "~/secrets", "a\\b"])
    @pytest.mark.asyncio
    async def test_rejects_unsafe_keys(self, storage, key):
        with pytest.raises(StoragePermissionError):
            await storage.save(key, b"nope")


# ── MemoryStorage ───────────────────────────────────────────────────


class TestMemoryStorage:
    @pytest.mark.asyncio
    async def test_roundtrip_and_delete(self):
        storage = MemoryStorage()
        await storage.save("k", b"v", content_type="application/json")
        assert await storage.load("k") == b"v"
        assert await storage.delete("k") is True
        with pytest.raises(StorageKeyError):
            await storage.load("k")

    @pytest.mark.asyncio
    async def test_list_keys_prefix(self):
        storage = MemoryStorage()
        await storage.save("p/1", b"")
        await storage.save("q/1", b"")
        assert [k async for k in storage.list_keys(prefix="p/")] == ["p/1"]


# ── KeyValueStore ───────────────────────────────────────────────────


class TestKeyValueStore:
    def test_save_load_json(self):
        store = KeyValueStore(MemoryStorage())
        store.save("portfolio-1", {"name": "Family", "records": []})
        assert store.load("portfolio-1") == {"name": "Family", "records": []}

    def test_load_missing_returns_default(self):
        store = KeyValueStore(MemoryStorage())
        assert store.load("missing") is None
        assert store.load("missing", default={}) == {}

    def test_namespace_is_hidden_from_keys(self):
        backend = MemoryStorage()
        store = KeyValueStore(backend, namespace="portfolios")
        store.save("a", 1)
        store.save("b", 2)
        assert sorted(store.keys()) == ["a", "b"]
        assert store.delete("a") is True
        assert store.keys() == ["b"]

    def test_over_local_storage(self, tmp_path):
        store = KeyValueStore(LocalStorage(base_path=str(tmp_path)))
        store.save("state", {"active_portfolio_id": "p1"})
        assert (tmp_path / "state.gz").exists()
        assert store.load("state") == {"active_portfolio_id": "p1"}
