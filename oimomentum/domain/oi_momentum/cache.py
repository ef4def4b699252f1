"""
Optional memoization around the analyzer.

The analyzer never caches. Callers that request the same window often
(dashboards polling the same symbol) inject a cache object here instead of
relying on module-level state.

Key Types:
- AnalysisCache: Protocol for any cache backend
- InMemoryAnalysisCache: Bounded LRU, caller-owned, thread-safe
- CachedAnalyzer: Wraps an analyzer with an injected cache
"""

from __future__ import annotations

import hashlib
import json
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

from oimomentum.utils.logging_setup import get_logger

from .analyzer import OIMomentumAnalyzer
from .models import AnalysisResult, MomentumReport, OISample

if TYPE_CHECKING:
    from config.models import CacheConfig

logger = get_logger(__name__)


@runtime_checkable
class AnalysisCache(Protocol):
    """Minimal cache interface the CachedAnalyzer depends on."""

    def get(self, key: str) -> Optional[AnalysisResult]:
        ...

    def put(self, key: str, value: AnalysisResult) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemoryAnalysisCache:
    """Bounded LRU cache of analysis results."""

    def __init__(self, max_entries: int = 128):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, AnalysisResult] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[AnalysisResult]:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def put(self, key: str, value: AnalysisResult) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def fingerprint_samples(samples: Sequence[OISample]) -> str:
    """SHA-256 of the sample window; equal windows give equal keys."""
    payload = json.dumps(
        [[s.timestamp, repr(float(s.value)), s.symbol] for s in samples],
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class CachedAnalyzer:
    """Analyzer front-end that consults an injected cache first."""

    def __init__(self, analyzer: OIMomentumAnalyzer, cache: AnalysisCache):
        self._analyzer = analyzer
        self._cache = cache

    def analyze(self, samples: Sequence[OISample], key: Optional[str] = None) -> AnalysisResult:
        """
        Return a cached result for this window or compute and store one.

        Args:
            samples: OI samples ascending by timestamp.
            key: Explicit cache key (e.g. "BTCUSDT:5m:<last ts>"). Defaults
                to a fingerprint of the samples.
        """
        cache_key = key or fingerprint_samples(samples)

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"OI momentum cache hit: {cache_key[:16]}")
            return cached

        result = self._analyzer.analyze(samples)
        self._cache.put(cache_key, result)
        return result

    def build_report(
        self,
        samples: Sequence[OISample],
        interval: str = "1h",
        symbol: Optional[str] = None,
        key: Optional[str] = None,
    ) -> MomentumReport:
        """Full report; only the analysis step goes through the cache."""
        analysis = self.analyze(samples, key=key)
        return self._analyzer.build_report(samples, interval, symbol, analysis=analysis)


def create_analysis_cache(config: CacheConfig) -> Optional[InMemoryAnalysisCache]:
    """Cache instance for a ``cache`` config section, or None when disabled."""
    if not config.enabled:
        return None
    return InMemoryAnalysisCache(max_entries=config.max_entries)
