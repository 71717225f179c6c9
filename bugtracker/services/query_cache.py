"""
Query Cache
===========
Holds the results of read queries against the backend so views do not
refetch everything after every action.

Cacheable (reads):
    - "bugs"        — GET /bugs (role-filtered by the server, so per session)
    - "developers"  — GET /users/developers

Invalidation contract:
    - Every successful mutation declares the queries it invalidates
      (TransitionResult.invalidates); the caller drops exactly those
    - Entries are scoped per session (token), never shared between users
    - Entries also expire after ``ttl`` seconds; ttl <= 0 disables caching
    - Every write purges expired entries from all scopes
    - Failed loads store nothing, so the previous entry survives
    - Logout clears the whole scope

In-memory only. Touched from the event loop thread alone, so no lock.
"""
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Optional

from bugtracker.core.config import QUERY_CACHE_TTL

logger = logging.getLogger(__name__)


class QueryCache:
    """
    In-memory cache of query results keyed by (scope, query name).

    Usage:
        cache = QueryCache()
        bugs = await cache.fetch(session.cache_scope, "bugs", client.list_bugs)
        cache.invalidate(session.cache_scope, result.invalidates)
    """

    def __init__(self, ttl: float = QUERY_CACHE_TTL, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        # (scope, query) → (stored_at, value)
        self._entries: dict[tuple[str, str], tuple[float, Any]] = {}

    def get(self, scope: str, query: str) -> Optional[Any]:
        """
        Return the cached value, or None when missing or expired.

        Parameters
        ----------
        scope : str
            Session scope (see UserSession.cache_scope).
        query : str
            Query name.
        """
        if self.ttl <= 0:
            return None
        entry = self._entries.get((scope, query))
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            del self._entries[(scope, query)]
            return None
        return value

    def put(self, scope: str, query: str, value: Any) -> None:
        """Store ``value``; entries past their ttl in any scope are dropped first."""
        if self.ttl <= 0:
            return
        now = self._clock()
        self._purge_expired(now)
        self._entries[(scope, query)] = (now, value)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))

    async def fetch(self, scope: str, query: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value or await ``loader`` and cache its result."""
        cached = self.get(scope, query)
        if cached is not None:
            logger.debug("Cache hit: %s", query)
            return cached
        value = await loader()
        self.put(scope, query, value)
        return value

    def invalidate(self, scope: str, queries: Iterable[str]) -> int:
        """
        Drop the named queries for one scope.

        Returns
        -------
        int
            Number of entries actually removed.
        """
        removed = 0
        for query in queries:
            if self._entries.pop((scope, query), None) is not None:
                removed += 1
        if removed:
            logger.debug("Invalidated %d cached quer%s", removed, "y" if removed == 1 else "ies")
        return removed

    def clear(self, scope: Optional[str] = None) -> None:
        """Drop everything, or everything belonging to ``scope``."""
        if scope is None:
            self._entries.clear()
            return
        for key in [key for key in self._entries if key[0] == scope]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
