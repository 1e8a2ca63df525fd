"""In-process package cache for flakekeeper datasources.

Datasources wrap every remote lookup in :meth:`PackageCache.with_cache` so
that one run never asks the registry the same question twice. Entries are
addressed by ``(namespace, key)``; callers are responsible for putting
everything that changes the answer into ``key`` (the FlakeHub datasource
uses ``"<owner>/<repo>:<constraint>"``).

Typical usage::

    cache = PackageCache(ttl=300)

    result = await cache.with_cache(
        "datasource-flakehub",
        "edolstra/flake-compat:*",
        lambda: datasource.lookup("edolstra/flake-compat", "*"),
    )
"""

from __future__ import annotations

import time
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from flakekeeper.utils.logger import get_logger

logger = get_logger("cache")

T = TypeVar("T")

CacheKey = Tuple[str, str]

__all__ = ["PackageCache"]


@dataclass
class _Entry:
    value: Any
    expires_at: Optional[float]

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


class PackageCache:
    """Async-safe, per-process cache for datasource results.

    Each ``(namespace, key)`` pair triggers **at most one** computation
    while it is fresh. Concurrent callers asking for the same pair wait on
    a per-key :class:`asyncio.Lock` and re-check the store once they hold
    it, so only the first one runs ``compute``. Different keys never
    block each other.

    ``None`` results are cached like any other value.

    Args:
        ttl: Default lifetime of an entry in seconds. ``None`` keeps
            entries for the lifetime of the cache.

    Example::

        cache = PackageCache()
        first = await cache.with_cache("ns", "k", fetch)   # runs fetch
        again = await cache.with_cache("ns", "k", fetch)   # cached
    """

    def __init__(self, ttl: Optional[float] = None) -> None:
        self.ttl = ttl
        self._store: Dict[CacheKey, _Entry] = {}
        self._locks: Dict[CacheKey, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def with_cache(
        self,
        namespace: str,
        key: str,
        compute: Callable[[], Awaitable[T]],
        *,
        fallback: bool = True,
        ttl: Optional[float] = None,
    ) -> T:
        """Return the cached value for ``(namespace, key)`` or compute it.

        Args:
            namespace: Logical cache area, e.g. ``"datasource-flakehub"``.
            key: Entry key within the namespace.
            compute: Zero-argument coroutine factory producing the value.
            fallback: When ``True``, a failure of the cache layer itself is
                logged and ``compute`` runs uncached instead of failing.
            ttl: Lifetime override for this entry, in seconds.

        Returns:
            The cached or freshly computed value.

        Raises:
            Exception: Whatever ``compute`` raises. Failed computations are
                never cached.
        """
        cache_key = (namespace, key)

        try:
            hit, value = self._lookup(cache_key)
        except Exception as exc:
            if not fallback:
                raise
            logger.warning("Cache lookup failed for %s:%s: %s", namespace, key, exc)
            return await compute()

        # Fast path: fresh entry, no lock needed
        if hit:
            logger.debug("Cache hit: %s:%s", namespace, key)
            return value

        lock = self._locks.setdefault(cache_key, asyncio.Lock())
        async with lock:
            # Another coroutine may have filled the entry while we waited
            try:
                hit, value = self._lookup(cache_key)
            except Exception as exc:
                if not fallback:
                    raise
                logger.warning("Cache lookup failed for %s:%s: %s", namespace, key, exc)
                return await compute()

            if hit:
                return value

            logger.debug("Cache miss: %s:%s", namespace, key)
            value = await compute()

            try:
                self._save(cache_key, value, ttl if ttl is not None else self.ttl)
            except Exception as exc:
                if not fallback:
                    raise
                logger.warning("Cache store failed for %s:%s: %s", namespace, key, exc)
                return value

        # Waiters on this lock find the stored entry; later callers take the fast path
        self._discard_lock(cache_key, lock)
        return value

    def get_cached(self, namespace: str, key: str) -> Optional[Any]:
        """Return a fresh cached value without computing anything."""
        hit, value = self._lookup((namespace, key))
        return value if hit else None

    def clear(self, namespace: Optional[str] = None) -> None:
        """Drop all entries, or only those of ``namespace``."""
        if namespace is None:
            self._store.clear()
        else:
            for cache_key in [k for k in self._store if k[0] == namespace]:
                del self._store[cache_key]

        for cache_key, lock in list(self._locks.items()):
            if namespace is None or cache_key[0] == namespace:
                self._discard_lock(cache_key, lock)

    def __len__(self) -> int:
        return len(self._store)

    # ------------------------------------------------------------------
    # Storage (private)
    # ------------------------------------------------------------------

    def _lookup(self, cache_key: CacheKey) -> Tuple[bool, Any]:
        entry = self._store.get(cache_key)
        if entry is None:
            return False, None
        if not entry.is_fresh(time.monotonic()):
            del self._store[cache_key]
            return False, None
        return True, entry.value

    def _save(self, cache_key: CacheKey, value: Any, ttl: Optional[float]) -> None:
        expires_at = None if ttl is None else time.monotonic() + ttl
        self._store[cache_key] = _Entry(value=value, expires_at=expires_at)

    def _discard_lock(self, cache_key: CacheKey, lock: asyncio.Lock) -> None:
        # A held lock still guards an in-flight compute
        if not lock.locked() and self._locks.get(cache_key) is lock:
            del self._locks[cache_key]
