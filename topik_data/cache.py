# topik_data/cache.py
"""
In-memory read-through cache for a whole dataset, with single-flight loading.

One ReadThroughCache holds one snapshot (the full list of records) plus the time
it was loaded. When the snapshot is missing or older than the TTL, the next get()
loads it again. Callers that arrive while a load is running wait for that load
instead of starting their own, and all of them see the same result or error.

This is per-process cache. If you run multiple gunicorn workers, each worker has its own cache.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from .errors import LoadError, LoadErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStatus(str, Enum):
    EMPTY = "empty"
    VALID = "valid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time view of a cache slot, for health/monitoring output."""
    status: CacheStatus
    count: int
    age_seconds: int
    remaining_ttl_seconds: int
    is_loading: bool
    loads: int = 0
    failures: int = 0
    shape_mismatches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into JSON-safe primitives (camelCase keys)."""
        return {
            "status": self.status.value,
            "count": self.count,
            "ageSeconds": self.age_seconds,
            "remainingTtlSeconds": self.remaining_ttl_seconds,
            "isLoading": self.is_loading,
            "loads": self.loads,
            "failures": self.failures,
            "shapeMismatches": self.shape_mismatches,
        }


class ReadThroughCache(Generic[T]):
    """
    A single-slot TTL cache over a slow loader.

    Args:
        name: label used in logs and stats output (e.g. "exams").
        loader: zero-argument callable returning the parsed payload; expected to be a list.
        ttl_seconds: how long a loaded snapshot stays valid.
        key_field: record field used by get_by_key().
        load_timeout: max seconds a caller waits for a load; None waits forever.
        strict_shape: raise instead of returning [] when the payload is not a list.
        clock: monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[], Any],
        ttl_seconds: float,
        key_field: str = "id",
        load_timeout: Optional[float] = None,
        strict_shape: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.key_field = key_field
        self.load_timeout = load_timeout
        self.strict_shape = strict_shape
        self._loader = loader
        self._clock = clock

        self._lock = threading.Lock()
        self._data: Optional[List[T]] = None
        self._loaded_at: Optional[float] = None
        self._in_flight: Optional[Future] = None
        self._generation = 0

        self._loads = 0
        self._failures = 0
        self._shape_mismatches = 0

    def _is_valid(self, now: float) -> bool:
        return self._data is not None and self._loaded_at is not None and (now - self._loaded_at) < self.ttl_seconds

    def get(self) -> List[T]:
        """
        Return the cached records, loading them first if missing or expired.

        Raises:
            LoadError: the load this call took part in failed (or timed out waiting).
        """
        with self._lock:
            if self._is_valid(self._clock()):
                return self._data  # type: ignore[return-value]

            flight = self._in_flight
            starts_load = flight is None
            if starts_load:
                flight = Future()
                flight.set_running_or_notify_cancel()
                self._in_flight = flight
                generation = self._generation

        if starts_load:
            if self.load_timeout is None:
                self._run_load(flight, generation)
            else:
                threading.Thread(
                    target=self._run_load,
                    args=(flight, generation),
                    name=f"{self.name}-cache-load",
                    daemon=True,
                ).start()

        return self._wait(flight)

    def _wait(self, flight: Future) -> List[T]:
        try:
            return flight.result(timeout=self.load_timeout)
        except FutureTimeoutError:
            logger.warning("[%s] gave up waiting for load after %ss", self.name, self.load_timeout)
            raise LoadError(
                LoadErrorKind.TIMEOUT,
                f"load did not finish within {self.load_timeout}s",
                self.name,
            ) from None

    def _run_load(self, flight: Future, generation: int) -> None:
        """
        Perform one load episode and settle its future.

        Only re-raises BaseExceptions (KeyboardInterrupt, SystemExit, worker timeouts),
        after the episode has been settled for every waiter.
        """
        started = time.monotonic()
        records: Optional[List[T]] = None
        result: Optional[List[T]] = None
        error: Optional[BaseException] = None
        mismatch = False

        try:
            payload = self._loader()
        except LoadError as exc:
            error = exc
        except OSError as exc:
            error = LoadError(LoadErrorKind.IO, str(exc), self.name)
            error.__cause__ = exc
        except ValueError as exc:
            error = LoadError(LoadErrorKind.PARSE_FAILURE, str(exc), self.name)
            error.__cause__ = exc
        except Exception as exc:
            error = exc
        except BaseException as exc:
            self._abandon(flight, exc)
            raise
        else:
            if isinstance(payload, list):
                records = payload
                result = payload
            else:
                mismatch = True
                logger.warning("[%s] data is not an array (got %s)", self.name, type(payload).__name__)
                if self.strict_shape:
                    error = LoadError(
                        LoadErrorKind.SHAPE_MISMATCH,
                        f"expected a JSON array, got {type(payload).__name__}",
                        self.name,
                    )
                else:
                    result = []

        with self._lock:
            if self._in_flight is flight:
                self._in_flight = None
            self._loads += 1
            if mismatch:
                self._shape_mismatches += 1
            if error is not None:
                self._failures += 1
            elif records is not None and generation == self._generation:
                self._data = records
                self._loaded_at = self._clock()

        if error is not None:
            logger.error("[%s] error loading data: %s", self.name, error)
            flight.set_exception(error)
        else:
            if records is not None:
                logger.info(
                    "[%s] loaded %d records in %.0f ms",
                    self.name,
                    len(records),
                    (time.monotonic() - started) * 1000,
                )
            flight.set_result(result)

    def _abandon(self, flight: Future, exc: BaseException) -> None:
        """Settle an episode interrupted by a BaseException so later calls can load again."""
        with self._lock:
            if self._in_flight is flight:
                self._in_flight = None
            self._loads += 1
            self._failures += 1
        logger.error("[%s] load interrupted: %r", self.name, exc)
        flight.set_exception(exc)

    def get_by_key(self, key: Any) -> Optional[T]:
        """Find one record whose key field equals `key` (compared as strings)."""
        wanted = str(key)
        for record in self.get():
            if isinstance(record, Mapping) and self.key_field in record and str(record[self.key_field]) == wanted:
                return record
        return None

    def invalidate(self) -> None:
        """
        Drop the snapshot and forget any running load.

        The next get() starts a fresh load. A load already running still answers
        its own waiters but its result is not stored.
        """
        with self._lock:
            self._data = None
            self._loaded_at = None
            self._in_flight = None
            self._generation += 1
        logger.info("[%s] cache invalidated", self.name)

    def preload(self) -> bool:
        """Warm the cache, logging (not raising) load failures. Returns True if data is cached."""
        try:
            self.get()
        except LoadError as exc:
            logger.error("[%s] preload failed: %s", self.name, exc)
        except Exception:
            logger.exception("[%s] preload failed", self.name)
        with self._lock:
            return self._data is not None

    def stats(self) -> CacheStats:
        """Describe the slot without triggering a load."""
        with self._lock:
            now = self._clock()
            has_data = self._data is not None and self._loaded_at is not None
            age = now - self._loaded_at if has_data else 0.0
            valid = has_data and age < self.ttl_seconds

            if valid:
                status = CacheStatus.VALID
            elif has_data:
                status = CacheStatus.EXPIRED
            else:
                status = CacheStatus.EMPTY

            return CacheStats(
                status=status,
                count=len(self._data) if self._data else 0,
                age_seconds=int(math.floor(age)) if has_data else 0,
                remaining_ttl_seconds=int(math.floor(self.ttl_seconds - age)) if valid else 0,
                is_loading=self._in_flight is not None,
                loads=self._loads,
                failures=self._failures,
                shape_mismatches=self._shape_mismatches,
            )

    def __repr__(self) -> str:
        return f"ReadThroughCache(name={self.name!r}, ttl_seconds={self.ttl_seconds!r})"
