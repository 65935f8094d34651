"""
Storage backends for barakah.

The engine only needs ``save`` / ``load`` / ``delete`` by opaque key. Backends
are async (local filesystem, in-memory); ``KeyValueStore`` is the synchronous
JSON facade the portfolio repository talks to.
"""

from .base import (
    StorageBackend,
    StorageError,
    StorageKeyError,
    StorageMetadata,
    StoragePermissionError,
)
from .compression import CompressionType, compress_bytes, decompress_bytes
from .kv import KeyValueStore
from .local import LocalStorage
from .memory import MemoryStorage

__all__ = [
    "CompressionType",
    "KeyValueStore",
    "LocalStorage",
    "MemoryStorage",
    "StorageBackend",
    "StorageError",
    "StorageKeyError",
    "StorageMetadata",
    "StoragePermissionError",
    "compress_bytes",
    "decompress_bytes",
]
