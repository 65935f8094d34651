"""In-memory storage backend for tests and embedding in a host application."""

from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from .base import StorageBackend, StorageKeyError, StorageMetadata


class MemoryStorage(StorageBackend):
    """Dict-backed storage. Compression flags are accepted and ignored."""

    def __init__(self, **config):
        super().__init__(**config)
        self._objects: dict[str, bytes] = {}

    async def save(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        compress: bool = True,
        metadata: dict[str, Any] | None = None,
    ) -> StorageMetadata:
        self._objects[key] = bytes(data)
        return StorageMetadata(
            key=key,
            size=len(data),
            modified_at=datetime.now(),
            content_type=content_type,
            custom_metadata=metadata or {},
        )

    async def load(self, key: str) -> bytes:
        try:
            return self._objects[key]
        except KeyError:
            raise StorageKeyError(f"Key not found: {key}") from None

    async def exists(self, key: str) -> bool:
        return key in self._objects

    async def delete(self, key: str) -> bool:
        return self._objects.pop(key, None) is not None

    async def list_keys(self, prefix: str = "", limit: int | None = None) -> AsyncIterator[str]:
        count = 0
        for key in sorted(self._objects):
            if prefix and not key.startswith(prefix):
                continue
            yield key
            count += 1
            if limit and count >= limit:
                return
