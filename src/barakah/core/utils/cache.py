"""
Last-known-value cache for provider quotes.

Live exchange rates and gold prices are remembered here so that, when the
live source fails, the engine can fall back to the most recent real quote
before dropping to the static table. Entries carry the time they were stored
and an expiry; expired entries are still returned by ``get_stale`` because a
stale quote beats a hard-coded one.

Note: Uses pickle for serialization. Only data the engine itself stored is
read back; this is a local cache for trusted data, not for external input.
"""

from __future__ import annotations

import os
import pickle
import re
from datetime import datetime, timedelta
from typing import Any

_SAFE_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]+")


class Cache:
    """Quote cache with TTL-based expiry, in memory and optionally on disk."""

    def __init__(self, cache_dir: str | None = None, ttl: timedelta = timedelta(hours=12)):
        """
        Args:
            cache_dir: Directory for persisted entries. None keeps everything in memory.
            ttl: How long an entry counts as fresh.
        """
        self.cache_dir = os.path.expanduser(cache_dir) if cache_dir else None
        self.ttl = ttl
        self._memory: dict[str, dict[str, Any]] = {}
        if self.cache_dir:
            os.makedirs(self.cache_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.cache_dir, f"{_SAFE_KEY_RE.sub('_', key)}.pkl")

    def put(self, key: str, data: Any, now: datetime | None = None) -> None:
        """Store data, stamped with the time it was observed."""
        stored_at = now or datetime.now()
        entry = {"data": data, "stored_at": stored_at, "expiry": stored_at + self.ttl}
        self._memory[key] = entry
        if self.cache_dir:
            with open(self._path(key), "wb") as f:
                pickle.dump(entry, f)

    def _entry(self, key: str) -> dict[str, Any] | None:
        if key in self._memory:
            return self._memory[key]
        if self.cache_dir and os.path.exists(self._path(key)):
            with open(self._path(key), "rb") as f:
                entry = pickle.load(f)
            self._memory[key] = entry
            return entry
        return None

    def get(self, key: str, now: datetime | None = None) -> Any | None:
        """Return cached data if present and not expired."""
        entry = self._entry(key)
        if entry and entry["expiry"] > (now or datetime.now()):
            return entry["data"]
        return None

    def get_stale(self, key: str) -> tuple[Any, datetime] | None:
        """Return ``(data, stored_at)`` regardless of expiry, or None."""
        entry = self._entry(key)
        if entry is None:
            return None
        return entry["data"], entry["stored_at"]

    def clear(self, key: str | None = None) -> None:
        """Clear a specific key or all cached data."""
        if key:
            self._memory.pop(key, None)
            if self.cache_dir and os.path.exists(self._path(key)):
                os.remove(self._path(key))
            return
        self._memory.clear()
        if self.cache_dir:
            for file in os.listdir(self.cache_dir):
                if file.endswith(".pkl"):
                    os.remove(os.path.join(self.cache_dir, file))
