# topik_data/handlers/cache_handler.py
"""
Handler responsible for warming, inspecting and invalidating the dataset caches.

Keeps Flask routes simple by concentrating the multi-cache orchestration here.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..cache import ReadThroughCache
from ..models import WarmupReport

logger = logging.getLogger(__name__)


@dataclass
class CacheHandler:
    """Orchestrates the named cache slots (e.g. "exams", "documents")."""

    caches: Mapping[str, ReadThroughCache]

    def warm(self) -> WarmupReport:
        """
        Load every cache in parallel and report counts plus stats.

        Slots are independent, so one slow dataset does not delay the others.

        Raises:
            LoadError (or whatever a loader raised) from the first failing slot,
            after every slot has finished.
        """
        if not self.caches:
            return WarmupReport(counts={}, stats={})

        with ThreadPoolExecutor(max_workers=len(self.caches), thread_name_prefix="cache-warmup") as pool:
            futures = {name: pool.submit(cache.get) for name, cache in self.caches.items()}
            counts: Dict[str, int] = {}
            first_error: Optional[BaseException] = None
            for name, fut in futures.items():
                exc = fut.exception()
                if exc is not None:
                    first_error = first_error or exc
                    continue
                counts[name] = len(fut.result())

        if first_error is not None:
            logger.error("cache warmup failed: %s", first_error)
            raise first_error

        logger.info("caches warmed up: %s", ", ".join(f"{k}={v}" for k, v in counts.items()))
        return WarmupReport(counts=counts, stats=self.status())

    def status(self) -> Dict[str, Dict[str, Any]]:
        """Per-slot stats as plain dicts. Never triggers a load."""
        return {name: cache.stats().to_dict() for name, cache in self.caches.items()}

    def invalidate(self, name: Optional[str] = None) -> list[str]:
        """
        Invalidate one cache by name, or all caches when name is None.

        Returns:
            names of the invalidated caches.

        Raises:
            KeyError for an unknown cache name.
        """
        if name is None:
            targets = list(self.caches)
        else:
            if name not in self.caches:
                raise KeyError(name)
            targets = [name]

        for t in targets:
            self.caches[t].invalidate()
        return targets

    def preload_all(self) -> Dict[str, bool]:
        """Best-effort parallel warmup used at startup; failures are logged, not raised."""
        if not self.caches:
            return {}

        with ThreadPoolExecutor(max_workers=len(self.caches), thread_name_prefix="cache-preload") as pool:
            futures = {name: pool.submit(cache.preload) for name, cache in self.caches.items()}
            return {name: fut.result() for name, fut in futures.items()}
