"""Synchronous key-value facade over an async storage backend.

The calculation engine is synchronous; this adapter gives it the
``save(key, value)`` / ``load(key)`` / ``delete(key)`` contract it needs,
storing values as JSON documents.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from .base import StorageBackend, StorageKeyError

T = TypeVar("T")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a backend coroutine to completion from synchronous code.

    Inside a running event loop (a web handler, a notebook) the coroutine
    gets its own loop on a worker thread, since the current one cannot be
    re-entered.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


class KeyValueStore:
    """JSON documents keyed by an opaque identifier."""

    def __init__(self, backend: StorageBackend, namespace: str = ""):
        self.backend = backend
        self.namespace = namespace.strip("/")

    def _key(self, key: str) -> str:
        return f"{self.namespace}/{key}" if self.namespace else key

    def save(self, key: str, value: Any) -> None:
        data = json.dumps(value, default=str, sort_keys=True).encode("utf-8")
        _run(self.backend.save(self._key(key), data, content_type="application/json"))

    def load(self, key: str, default: Any = None) -> Any:
        """Load a document; return ``default`` when the key does not exist."""
        try:
            data = _run(self.backend.load(self._key(key)))
        except StorageKeyError:
            return default
        return json.loads(data.decode("utf-8"))

    def delete(self, key: str) -> bool:
        return _run(self.backend.delete(self._key(key)))

    def keys(self) -> list[str]:
        async def _collect() -> list[str]:
            prefix = f"{self.namespace}/" if self.namespace else ""
            return [k[len(prefix) :] async for k in self.backend.list_keys(prefix=prefix)]

        return _run(_collect())
