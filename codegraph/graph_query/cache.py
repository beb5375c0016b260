"""
Response cache for natural-language queries.

``CachedPipeline`` wraps a ``NaturalLanguageQueryPipeline`` and keeps
successful answers for a fixed TTL, keyed by the operation name and its
canonicalised parameters.  Failures are never cached so a retry after
fixing the graph or the model sees fresh results.

Single-process and in-memory only.
"""

import json
import logging
import time
from typing import Any, Callable, Optional, Union

from codegraph.graph_query.pipeline import NaturalLanguageQueryPipeline
from codegraph.shared.models import NLQueryFailure, NLQuerySuccess

logger = logging.getLogger("graph_query.cache")

NL_QUERY_OPERATION = "natural_language_query"


def make_cache_key(operation: str, params: dict[str, Any]) -> str:
    """Key that is identical for equal parameters regardless of dict order."""
    return f"{operation}:{json.dumps(params, sort_keys=True, default=str)}"


class TTLCache:
    """Dict of ``key -> (expires_at, value)`` on a monotonic clock.

    Expired entries are dropped when read and swept on every ``set``, so
    the map holds at most the keys written within one TTL window.

    A ``ttl_seconds`` of 0 (or less) turns the cache off: ``set`` is a
    no-op and ``get`` always misses.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def get(self, key: str) -> Optional[Any]:
        item = self._store.get(key)
        if item is None:
            return None
        expires_at, value = item
        if self._clock() >= expires_at:
            self._store.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        now = self._clock()
        self._purge(now)
        self._store[key] = (now + self._ttl, value)

    def _purge(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._store.items() if now >= expires_at]
        for key in expired:
            del self._store[key]

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class CachedPipeline:
    """Same interface as the wrapped pipeline, with TTL caching of successes."""

    def __init__(self, pipeline: NaturalLanguageQueryPipeline, cache: TTLCache):
        self._pipeline = pipeline
        self._cache = cache

    async def run(
        self,
        tenant: str,
        text: str,
        context: str = "",
    ) -> Union[NLQuerySuccess, NLQueryFailure]:
        key = make_cache_key(
            NL_QUERY_OPERATION,
            {"project_id": tenant, "query": text, "context": context},
        )
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached.model_copy(deep=True)

        result = await self._pipeline.run(tenant, text, context)
        if isinstance(result, NLQuerySuccess):
            self._cache.set(key, result.model_copy(deep=True))
        return result
