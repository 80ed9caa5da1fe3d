"""Compiled artifact cache with at-most-once compilation per key."""

import dataclasses
import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sabre_core.types import FailurePolicy

A = TypeVar("A")

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Counters for an artifact cache."""

    hits: int = 0
    misses: int = 0
    compilations: int = 0
    failures: int = 0
    evictions: int = 0

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)


@dataclass
class _KeyLock:
    """Compile lock for one key and the number of callers using it."""

    lock: threading.Lock = dataclasses.field(default_factory=threading.Lock)
    users: int = 0


class ArtifactCache(Generic[A]):
    """Thread-safe get-or-compile cache with optional LRU eviction.

    For one key, concurrent callers run ``compile_fn`` at most once. The
    first caller compiles while holding a key-scoped lock; the others
    block on that lock and then find the stored artifact. Keys compile
    independently of each other.

    A failed compile is handled according to ``failure_policy``:
    RETRY stores nothing so the next call compiles again, CACHE stores the
    error and re-raises it until the key is invalidated or the cache is
    cleared.

    Key locks live only while some caller is compiling or waiting for that
    key, so clearing the cache mid-compile never lets a second compile of
    the same key start.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        failure_policy: FailurePolicy = FailurePolicy.RETRY,
    ) -> None:
        """Initialize cache.

        Args:
            max_entries: Maximum number of artifacts (None = unbounded)
            failure_policy: What to do with compile failures
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._failure_policy = FailurePolicy(failure_policy)
        self._entries: OrderedDict[str, A] = OrderedDict()
        self._failures: dict[str, Exception] = {}
        self._key_locks: dict[str, _KeyLock] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()
        self._discard_callbacks: list[Callable[[str, A], None]] = []

    @property
    def max_entries(self) -> int | None:
        return self._max_entries

    @property
    def failure_policy(self) -> FailurePolicy:
        return self._failure_policy

    @property
    def stats(self) -> CacheStats:
        """Snapshot of the cache counters."""
        with self._lock:
            return dataclasses.replace(self._stats)

    def get(self, key: str) -> A | None:
        """Get a stored artifact without compiling."""
        with self._lock:
            artifact = self._entries.get(key)
            if artifact is not None:
                self._entries.move_to_end(key)
            return artifact

    def get_or_compile(self, key: str, compile_fn: Callable[[], A]) -> A:
        """Return the artifact for ``key``, compiling it on first use.

        Args:
            key: Cache key (logical name or content fingerprint)
            compile_fn: Produces the artifact; raises on failure

        Returns:
            The stored artifact

        Raises:
            Whatever compile_fn raises (or the stored failure under CACHE)
        """
        artifact = self._lookup(key)
        if artifact is not None:
            return artifact

        with self._holding(key):
            # Another caller may have finished while we waited
            artifact = self._lookup(key)
            if artifact is not None:
                return artifact

            with self._lock:
                self._stats.misses += 1

            try:
                artifact = compile_fn()
            except Exception as e:
                with self._lock:
                    self._stats.failures += 1
                    if self._failure_policy == FailurePolicy.CACHE:
                        self._failures[key] = e
                raise

            self._store(key, artifact)
            return artifact

    def invalidate(self, key: str) -> bool:
        """Remove an artifact or stored failure.

        Returns:
            True if anything was removed
        """
        with self._lock:
            artifact = self._entries.pop(key, None)
            failure = self._failures.pop(key, None)
        if artifact is not None:
            self._notify_discarded([(key, artifact)])
        return artifact is not None or failure is not None

    def clear(self) -> None:
        """Remove all artifacts and stored failures."""
        with self._lock:
            discarded = list(self._entries.items())
            self._entries.clear()
            self._failures.clear()
        self._notify_discarded(discarded)

    def on_discard(self, callback: Callable[[str, A], None]) -> None:
        """Register a callback for artifacts leaving the cache.

        Called with ``(key, artifact)`` after eviction, ``invalidate`` and
        ``clear``, outside the cache lock.
        """
        self._discard_callbacks.append(callback)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Any) -> bool:
        with self._lock:
            return key in self._entries

    def key_lock_count(self) -> int:
        """Number of keys with a compile in flight or callers waiting."""
        with self._lock:
            return len(self._key_locks)

    @contextmanager
    def _holding(self, key: str) -> Iterator[None]:
        """Hold the compile lock for ``key``; drop it once the last user leaves."""
        with self._lock:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = _KeyLock()
                self._key_locks[key] = entry
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.users -= 1
                if entry.users == 0 and self._key_locks.get(key) is entry:
                    del self._key_locks[key]

    def _lookup(self, key: str) -> A | None:
        """Return a stored artifact (counting a hit) or re-raise a stored failure."""
        with self._lock:
            artifact = self._entries.get(key)
            if artifact is not None:
                self._entries.move_to_end(key)
                self._stats.hits += 1
                return artifact
            failure = self._failures.get(key)
        if failure is not None:
            # The stored error is raised repeatedly; start each raise with a fresh traceback
            raise failure.with_traceback(None)
        return None

    def _store(self, key: str, artifact: A) -> None:
        evicted: list[tuple[str, A]] = []
        with self._lock:
            self._entries[key] = artifact
            self._entries.move_to_end(key)
            self._stats.compilations += 1

            # Evict least recently used
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    evicted_key, evicted_artifact = self._entries.popitem(last=False)
                    evicted.append((evicted_key, evicted_artifact))
                    self._stats.evictions += 1
                    logger.debug("Evicted artifact %s", evicted_key)
        self._notify_discarded(evicted)

    def _notify_discarded(self, discarded: list[tuple[str, A]]) -> None:
        for key, artifact in discarded:
            for callback in self._discard_callbacks:
                try:
                    callback(key, artifact)
                except Exception as e:
                    logger.error("Discard callback for %s failed: %s", key, e)
