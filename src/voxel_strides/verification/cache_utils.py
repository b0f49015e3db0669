"""Bounded caches and cache directories shared by the verification components."""

import hashlib
import threading
from collections import OrderedDict
from collections.abc import Hashable
from pathlib import Path
from typing import Any


class LRUCache:
    """Thread-safe least-recently-used cache with a fixed capacity."""

    def __init__(self, max_entries: int) -> None:
        """
        Initialize the cache.

        Args:
            max_entries: Maximum number of entries kept before eviction
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value and mark it recently used, or None."""
        with self._lock:
            if key not in self._entries:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return self._entries[key]

    def put(self, key: Hashable, value: Any) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        """Drop all entries and reset counters."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict[str, int]:
        """Get hit/miss counters and current size."""
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "size": len(self._entries),
                "max_entries": self.max_entries,
            }


def content_hash(*parts: str | bytes) -> str:
    """
    Hash an ordered sequence of text or byte parts.

    Parts are length-prefixed so ("ab", "c") and ("a", "bc") differ.

    Args:
        parts: Values to hash

    Returns:
        Hex SHA-256 digest
    """
    digest = hashlib.sha256()
    for part in parts:
        data = part.encode("utf-8") if isinstance(part, str) else part
        digest.update(len(data).to_bytes(8, "big"))
        digest.update(data)
    return digest.hexdigest()


def get_cache_root(cache_name: str | None = None) -> Path:
    """
    Get the root cache directory for verification data.

    Args:
        cache_name: Optional subdirectory name within the cache root

    Returns:
        Path to the cache directory
    """
    cache_root = Path.home() / ".cache" / "voxel_strides" / "verification"

    if cache_name:
        cache_root = cache_root / cache_name

    cache_root.mkdir(parents=True, exist_ok=True)
    return cache_root


def get_models_cache_dir() -> Path:
    """Get the models cache directory."""
    return get_cache_root("models")
