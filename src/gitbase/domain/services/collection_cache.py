"""Collection cache service with TTL support.

Keeps the last known contents and version token of each collection in
process memory. Entries are trusted only until their TTL runs out and are
evicted as soon as a write conflict is detected for the collection.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    """Cache entry with TTL support.

    Attributes:
        records: Decoded records of the collection.
        fetched_at: Clock reading when the records were fetched or written.
        version_token: Version token of the persisted document, if known.
    """

    records: list[dict[str, Any]]
    fetched_at: float
    version_token: str | None = None


class CollectionCache:
    """TTL-based cache keyed by collection name.

    The cache is owned by a single store instance and is only touched from
    the event loop, so it needs no locking.
    """

    def __init__(
        self,
        ttl_seconds: float = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Time-to-live for cache entries in seconds (default: 30).
            clock: Monotonic time source, injectable for tests.
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._generations: dict[str, int] = {}

    def is_fresh(self, entry: CacheEntry) -> bool:
        return entry.fetched_at + self.ttl_seconds > self._clock()

    def get(self, collection: str) -> CacheEntry | None:
        """Get the cache entry for a collection.

        Args:
            collection: Collection name.

        Returns:
            The entry if present and within its TTL, None otherwise.
        """
        entry = self._entries.get(collection)
        if entry is None:
            return None

        if not self.is_fresh(entry):
            del self._entries[collection]
            return None

        return entry

    def get_version_token(self, collection: str) -> str | None:
        """Return the cached version token, ignoring expired entries."""
        entry = self.get(collection)
        return entry.version_token if entry else None

    def generation(self, collection: str) -> int:
        """Counter bumped by every write and invalidation of a collection.

        A fetch reads the generation before going to the remote and passes it
        back to ``set``; if a write landed in between, the fetched snapshot is
        older than what the cache already knows and is dropped.
        """
        return self._generations.get(collection, 0)

    def _bump(self, collection: str) -> None:
        self._generations[collection] = self.generation(collection) + 1

    def set(
        self,
        collection: str,
        records: list[dict[str, Any]],
        version_token: str | None,
        generation: int | None = None,
    ) -> bool:
        """Store a collection snapshot stamped with the current time.

        Args:
            collection: Collection name.
            records: Records to cache. The cache keeps the list as given.
            version_token: Version token of the persisted document.
            generation: For fetched snapshots, the generation read before the
                fetch started. Omit for the result of a successful write.

        Returns:
            True if the snapshot was stored, False if it was outdated.
        """
        if generation is None:
            self._bump(collection)
        elif generation != self.generation(collection):
            return False

        self._entries[collection] = CacheEntry(
            records=records,
            fetched_at=self._clock(),
            version_token=version_token,
        )
        return True

    def invalidate(self, collection: str) -> None:
        self._entries.pop(collection, None)
        self._bump(collection)

    def invalidate_all(self) -> None:
        """Clear entire cache."""
        for collection in set(self._entries) | set(self._generations):
            self._bump(collection)
        self._entries.clear()

    def cleanup_expired(self) -> int:
        """Remove all expired entries from cache.

        Returns:
            Number of entries removed.
        """
        expired = [name for name, entry in self._entries.items() if not self.is_fresh(entry)]
        for name in expired:
            del self._entries[name]
        return len(expired)

    def keys(self) -> list[str]:
        return list(self._entries.keys())

    def size(self) -> int:
        """Get current cache size.

        Returns:
            Number of entries in cache.
        """
        return len(self._entries)
