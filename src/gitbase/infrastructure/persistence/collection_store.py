"""Collection store backed by a remote content repository.

Each collection is one JSON document holding a list of records. Reads go
through a short-lived cache; writes always rewrite the whole document with a
compare-and-swap against the last known version token and are retried on
conflict according to the store's ``RetryPolicy``.

Queueing:
    ``get`` runs under ``read_<collection>``. ``save_collection``, ``insert``,
    ``update`` and ``delete`` run under ``write_<collection>``, and each
    mutation covers its full read, mutate and write cycle in that one queued
    operation. Creating a missing collection on first ``get`` also runs under
    ``write_<collection>``. Reads and writes of the same collection are not
    mutually exclusive, so ``get`` is a best-effort snapshot.
"""

import asyncio
import copy
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from gitbase.core.exceptions import (
    ConflictError,
    GitBaseError,
    RecordNotFoundError,
    TransientError,
)
from gitbase.core.logging import LoggingContext, get_logger
from gitbase.domain.services.collection_cache import CollectionCache
from gitbase.domain.services.id_generator import generate_id
from gitbase.domain.services.operation_queue import OperationQueue
from gitbase.domain.services.retry_policy import RetryPolicy
from gitbase.domain.services.slug_generator import SlugGenerator
from gitbase.infrastructure.persistence.collection_codec import CollectionCodec
from gitbase.infrastructure.remote.base import RemoteContentClient, RemoteNotFoundError

logger = get_logger(__name__)

T = TypeVar("T")

Record = dict[str, Any]

# Returns the records to write (None to skip the write) and the caller's result
Mutation = Callable[[list[Record]], tuple[list[Record] | None, T]]

# Called once per write attempt; returns (records, expected token, result)
PrepareWrite = Callable[[int], Awaitable[tuple[list[Record] | None, str | None, T]]]

_MISSING = object()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def matches(record: Record, criteria: dict[str, Any]) -> bool:
    """Whether every criterion key is present in ``record`` with an equal value."""
    return all(record.get(key, _MISSING) == value for key, value in criteria.items())


class CollectionStore:
    """Document store with one remote file per collection.

    Example:
        async with CollectionStore(InMemoryContentClient()) as store:
            site = await store.insert("websites", {"name": "Acme"})
            await store.update("websites", site["id"], {"status": "published"})
    """

    def __init__(
        self,
        client: RemoteContentClient,
        *,
        branch: str = "main",
        base_path: str = "db",
        file_extension: str = "json",
        cache_ttl_seconds: float = 30,
        retry_policy: RetryPolicy | None = None,
        seed_collections: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the store.

        Args:
            client: Remote content client used for all persistence.
            branch: Branch (or ref) holding the collection documents.
            base_path: Directory of the collection documents.
            file_extension: Extension of the collection documents.
            cache_ttl_seconds: How long a fetched collection is trusted.
            retry_policy: Conflict retry policy (default: 3 attempts, 0.5s linear backoff).
            seed_collections: Collections created by ``ensure_collections``.
            clock: Monotonic time source for the cache.
        """
        self.client = client
        self.branch = branch
        self.base_path = base_path.strip("/")
        self.file_extension = file_extension.lstrip(".")
        self.retry_policy = retry_policy or RetryPolicy()
        self.seed_collections = list(seed_collections)
        self.cache = CollectionCache(ttl_seconds=cache_ttl_seconds, clock=clock)
        self.queue = OperationQueue()

    async def __aenter__(self) -> "CollectionStore":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def collection_path(self, collection: str) -> str:
        """Path of the document holding ``collection``."""
        if self.base_path:
            return f"{self.base_path}/{collection}.{self.file_extension}"
        return f"{collection}.{self.file_extension}"

    @staticmethod
    def read_key(collection: str) -> str:
        return f"read_{collection}"

    @staticmethod
    def write_key(collection: str) -> str:
        return f"write_{collection}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, collection: str) -> list[Record]:
        """Return every record of a collection.

        A fresh cache entry is served without a remote call. Otherwise the
        fetch is queued per collection, so concurrent callers share a single
        fetch. A missing document is created empty. Any other failure is
        logged and an empty list is returned.
        """
        entry = self.cache.get(collection)
        if entry is None:
            records = await self.queue.run(
                self.read_key(collection), lambda: self._load(collection)
            )
        else:
            records = entry.records
        return copy.deepcopy(records)

    async def _load(self, collection: str) -> list[Record]:
        # An earlier queued read may already have filled the cache
        entry = self.cache.get(collection)
        if entry is not None:
            return entry.records

        with LoggingContext(collection=collection):
            try:
                records, _ = await self._fetch(collection)
                return records
            except RemoteNotFoundError:
                logger.info("Collection not found, creating empty collection")
            except GitBaseError as e:
                logger.error("Error loading collection", error=str(e), error_kind=e.kind.value)
                return []

            try:
                return await self._create_if_absent(collection)
            except GitBaseError as e:
                logger.warning("Could not create empty collection", error=str(e))
                return []

    async def _create_if_absent(self, collection: str) -> list[Record]:
        """Persist an empty document unless one exists by the time the write queue runs.

        Returns:
            The records of the collection after the step: ``[]`` if it was
            created, the existing records otherwise.
        """

        async def prepare(attempt: int) -> tuple[list[Record] | None, None, list[Record]]:
            current, token = await self._snapshot_for_write(collection)
            if token is not None:
                # Created by a write queued ahead of us
                return None, None, current
            return [], None, []

        return await self.queue.run(
            self.write_key(collection), lambda: self._write_with_retry(collection, prepare)
        )

    async def _fetch(self, collection: str) -> tuple[list[Record], str]:
        """Fetch and decode a collection, caching it unless a write overtook it."""
        generation = self.cache.generation(collection)
        remote_file = await self.client.get_file(self.collection_path(collection), self.branch)
        records = CollectionCodec.decode(collection, remote_file.content)
        self.cache.set(collection, records, remote_file.version_token, generation=generation)
        return records, remote_file.version_token

    async def get_item(self, collection: str, record_id: str) -> Record | None:
        records = await self.get(collection)
        return next((record for record in records if record.get("id") == record_id), None)

    async def find(self, collection: str, criteria: dict[str, Any]) -> list[Record]:
        """Return the records whose fields equal every value in ``criteria``."""
        records = await self.get(collection)
        return [record for record in records if matches(record, criteria)]

    async def find_one(self, collection: str, criteria: dict[str, Any]) -> Record | None:
        results = await self.find(collection, criteria)
        return results[0] if results else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save_collection(self, collection: str, records: list[Record]) -> None:
        """Overwrite a collection document with ``records``.

        The expected version token comes from the cache, or from the remote
        when nothing is cached. On conflict the cache entry is evicted and the
        write is retried with a refreshed token.

        Raises:
            ConflictError: If every attempt of the retry policy conflicted.
            TransientError: If the remote failed for another reason.
        """
        snapshot = copy.deepcopy(list(records))

        async def prepare(attempt: int) -> tuple[list[Record], str | None, None]:
            return snapshot, await self._current_version_token(collection), None

        await self.queue.run(
            self.write_key(collection), lambda: self._write_with_retry(collection, prepare)
        )

    async def _current_version_token(self, collection: str) -> str | None:
        token = self.cache.get_version_token(collection)
        if token is not None:
            return token
        try:
            remote_file = await self.client.get_file(
                self.collection_path(collection), self.branch
            )
        except RemoteNotFoundError:
            return None
        return remote_file.version_token

    async def _snapshot_for_write(self, collection: str) -> tuple[list[Record], str | None]:
        entry = self.cache.get(collection)
        if entry is not None:
            return copy.deepcopy(entry.records), entry.version_token
        try:
            records, token = await self._fetch(collection)
        except RemoteNotFoundError:
            return [], None
        return copy.deepcopy(records), token

    async def _write_with_retry(self, collection: str, prepare: PrepareWrite) -> Any:
        path = self.collection_path(collection)
        policy = self.retry_policy
        attempt = 0

        with LoggingContext(collection=collection):
            while True:
                attempt += 1
                records, expected_token, result = await prepare(attempt)
                if records is None:
                    return result

                try:
                    new_token = await self.client.put_file(
                        path,
                        CollectionCodec.encode(records),
                        self.branch,
                        expected_version_token=expected_token,
                        message=f"Update {collection} - {utc_now_iso()}",
                    )
                except ConflictError as e:
                    self.cache.invalidate(collection)
                    logger.warning(
                        "Version conflict, refreshing and retrying",
                        attempt=attempt,
                        max_attempts=policy.max_attempts,
                    )
                    if not policy.should_retry(attempt):
                        raise ConflictError(collection, attempts=attempt) from e
                    await policy.wait(attempt)
                    continue
                except TransientError:
                    # The write may or may not have landed
                    self.cache.invalidate(collection)
                    raise

                self.cache.set(collection, records, new_token)
                logger.info("Saved collection", attempt=attempt, record_count=len(records))
                return result

    async def _mutate(self, collection: str, mutation: Mutation[T]) -> T:
        """Run a read, mutate and write cycle as one queued write operation.

        ``mutation`` receives a private copy of the current records and is
        called again with fresh records after every conflict.
        """

        async def prepare(attempt: int) -> tuple[list[Record] | None, str | None, T]:
            current, token = await self._snapshot_for_write(collection)
            next_records, result = mutation(current)
            return next_records, token, result

        return await self.queue.run(
            self.write_key(collection), lambda: self._write_with_retry(collection, prepare)
        )

    async def insert(self, collection: str, record: Record) -> Record:
        """Append a record, generating an ``id`` if it has none.

        Returns:
            The stored record, including its id.
        """
        stored = copy.deepcopy(record)
        if not stored.get("id"):
            stored["id"] = generate_id()

        def append(current: list[Record]) -> tuple[list[Record], None]:
            current.append(copy.deepcopy(stored))
            return current, None

        await self._mutate(collection, append)
        return stored

    async def update(self, collection: str, record_id: str, patch: dict[str, Any]) -> Record:
        """Merge ``patch`` into a record and stamp ``updatedAt``.

        Raises:
            RecordNotFoundError: If no record has ``record_id``.
        """

        def merge(current: list[Record]) -> tuple[list[Record], Record]:
            for index, item in enumerate(current):
                if item.get("id") == record_id:
                    merged = {**item, **copy.deepcopy(patch), "updatedAt": utc_now_iso()}
                    merged["id"] = item["id"]
                    current[index] = merged
                    return current, copy.deepcopy(merged)
            raise RecordNotFoundError(collection, record_id)

        return await self._mutate(collection, merge)

    async def delete(self, collection: str, record_id: str) -> bool:
        """Remove the record with ``record_id``.

        Returns:
            True if a record was removed, False if none matched.
        """

        def remove(current: list[Record]) -> tuple[list[Record] | None, bool]:
            for index, item in enumerate(current):
                if item.get("id") == record_id:
                    del current[index]
                    return current, True
            return None, False

        return await self._mutate(collection, remove)

    # ------------------------------------------------------------------
    # Slugs
    # ------------------------------------------------------------------

    async def generate_unique_slug(self, base: str, collection: str = "websites") -> str:
        """Return ``base`` or the first free ``base-N`` among the collection's slugs.

        A ``base`` that is not already a valid slug (a business name, say) is
        slugified first.
        """
        if not SlugGenerator.is_valid(base):
            base = SlugGenerator.slugify(base)
        records = await self.get(collection)
        existing = [record["slug"] for record in records if "slug" in record]
        return SlugGenerator.next_available(base, existing)

    async def is_slug_available(self, slug: str, collection: str = "websites") -> bool:
        records = await self.get(collection)
        return not any(record.get("slug") == slug for record in records)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def ensure_collections(self, names: Iterable[str] | None = None) -> list[str]:
        """Make sure each collection document exists, creating missing ones empty."""
        collections = list(names) if names is not None else self.seed_collections
        await asyncio.gather(*(self.get(name) for name in collections))
        logger.info("Collections ensured", collections=collections)
        return collections

    def clear_cache(self) -> None:
        self.cache.invalidate_all()

    def get_cache_stats(self) -> dict[str, Any]:
        """Return the number of cached collections and their names."""
        self.cache.cleanup_expired()
        return {"size": self.cache.size(), "keys": self.cache.keys()}

    async def aclose(self) -> None:
        """Stop queue workers and close the remote client."""
        await self.queue.aclose()
        await self.client.aclose()
