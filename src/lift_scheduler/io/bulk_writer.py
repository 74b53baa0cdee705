"""
Rate-limited bulk writer.

Executes a batch of WriteRequests against a DocumentStore with a bounded
pool of worker threads draining one shared FIFO queue.

Two throttles are layered:

* Reactive: a request that fails with RateLimited is retried after
  ``base_delay * 2^(attempt-1) + uniform(0, jitter)`` seconds, up to
  ``max_retries`` times.  Any other StoreError is not retried.
* Proactive: every ``pace_every``-th dispatched request (writer-wide) is
  preceded by a fixed ``pace_seconds`` pause, to avoid the bursts that
  trigger rate limiting in the first place.

Keyed requests (UPSERT, GET_OR_CREATE) resolve an existing record by its
CompositeKey before writing, and new keyed records get a deterministic
document id, so replaying the same logical write never creates a second
record.
"""

from __future__ import annotations

import logging
import queue
import random
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from ..core.config import (
    BASE_DELAY_SECONDS,
    DEFAULT_CONCURRENCY,
    JITTER_SECONDS,
    MAX_CONCURRENCY,
    MAX_RETRIES,
    MIN_CONCURRENCY,
    PACE_EVERY,
    PACE_SECONDS,
)
from ..core.models import CompositeKey
from .store import DocumentStore, RateLimited, Rejected, StoreError, encode_key

if TYPE_CHECKING:
    from ..core.engine.config_loader import WriterSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WriteMode(str, Enum):
    CREATE = "create"  # always a new document with a store-generated id
    UPSERT = "upsert"  # update the keyed document if present, else create it
    GET_OR_CREATE = "get_or_create"  # return the keyed document untouched, else create it


@dataclass(frozen=True, eq=False)
class WriteRequest:
    """One unit of work for the writer.  Carries no identity of its own."""

    collection: str
    payload: dict[str, Any]
    mode: WriteMode = WriteMode.CREATE
    key: CompositeKey | None = None

    def __post_init__(self) -> None:
        if self.mode != WriteMode.CREATE and self.key is None:
            raise ValueError(f"{self.mode.value} requests require a composite key")

    @classmethod
    def create(cls, collection: str, payload: dict[str, Any]) -> "WriteRequest":
        return cls(collection=collection, payload=payload)

    @classmethod
    def upsert(cls, collection: str, key: CompositeKey, payload: dict[str, Any]) -> "WriteRequest":
        return cls(collection=collection, payload=payload, mode=WriteMode.UPSERT, key=key)

    @classmethod
    def get_or_create(
        cls, collection: str, key: CompositeKey, payload: dict[str, Any]
    ) -> "WriteRequest":
        return cls(collection=collection, payload=payload, mode=WriteMode.GET_OR_CREATE, key=key)


@dataclass
class WriteResult:
    """
    Outcome of one request.

    ``skipped`` is True when the batch stopped (cancellation or an earlier
    failure) before this request was dispatched.
    """

    request: WriteRequest
    document_id: str | None = None
    created: bool = False
    attempts: int = 0
    error: StoreError | None = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped and self.document_id is not None


@dataclass
class WriterStats:
    """Thread-safe counters accumulated over the writer's lifetime."""

    dispatched: int = 0
    retries: int = 0
    in_flight: int = 0
    max_in_flight: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_retry(self) -> None:
        with self._lock:
            self.retries += 1

    def next_dispatch(self) -> int:
        with self._lock:
            self.dispatched += 1
            return self.dispatched

    def enter(self) -> int:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            return self.in_flight

    def leave(self) -> int:
        with self._lock:
            self.in_flight -= 1
            return self.in_flight


def clamp_concurrency(concurrency: int | None) -> int:
    """Clamp a caller-supplied worker count to [1, 5]; None means the default."""
    if concurrency is None:
        return DEFAULT_CONCURRENCY
    return max(MIN_CONCURRENCY, min(int(concurrency), MAX_CONCURRENCY))


class BulkWriter:
    """
    Executes WriteRequests with bounded concurrency, backoff, and pacing.

    Args:
        store: Target DocumentStore
        base_delay: First backoff wait in seconds
        max_retries: Retries after the first attempt for RateLimited errors
        jitter: Upper bound of the uniform random addition to each wait
        max_delay: Optional cap on a single wait (before jitter)
        pace_every: Pause before every N-th dispatched request (0 disables)
        pace_seconds: Length of that pause
        sleep: Sleep function (injectable for tests)
        rng: Random source for jitter
        on_dispatch: Called with the in-flight count whenever it changes
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        base_delay: float = BASE_DELAY_SECONDS,
        max_retries: int = MAX_RETRIES,
        jitter: float = JITTER_SECONDS,
        max_delay: float | None = None,
        pace_every: int = PACE_EVERY,
        pace_seconds: float = PACE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
        on_dispatch: Callable[[int], None] | None = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        self.store = store
        self.base_delay = base_delay
        self.max_retries = max_retries
        self.jitter = jitter
        self.max_delay = max_delay
        self.pace_every = pace_every
        self.pace_seconds = pace_seconds
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.on_dispatch = on_dispatch
        self.stats = WriterStats()
        self._rng_lock = threading.Lock()
        self._key_locks: dict[tuple[str, CompositeKey], list] = {}  # slot -> [lock, holders]
        self._key_locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, store: DocumentStore, settings: WriterSettings, **kwargs: Any) -> "BulkWriter":
        """Build a writer from the ``writer`` section of config.yaml."""
        return cls(
            store,
            base_delay=settings.base_delay_seconds,
            max_retries=settings.max_retries,
            jitter=settings.jitter_seconds,
            pace_every=settings.pace_every,
            pace_seconds=settings.pace_seconds,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Retry wrapper
    # ------------------------------------------------------------------

    def backoff_delay(self, attempt: int) -> float:
        """Wait before retry number ``attempt`` (1-based)."""
        delay = self.base_delay * (2 ** (attempt - 1))
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        with self._rng_lock:
            jitter = self.rng.uniform(0, self.jitter) if self.jitter > 0 else 0.0
        return delay + jitter

    def with_backoff(self, fn: Callable[[], T], label: str = "request") -> tuple[T, int]:
        """
        Call ``fn`` until it succeeds, retrying only on RateLimited.

        Returns:
            (result, attempts used)

        Raises:
            RateLimited: When retries are exhausted
            StoreError: Any non-retryable error, immediately
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return fn(), attempt
            except RateLimited as e:
                if attempt > self.max_retries:
                    e.attempts = attempt
                    logger.error("%s still rate limited after %d attempts", label, attempt)
                    raise
                delay = self.backoff_delay(attempt)
                self.stats.add_retry()
                logger.warning(
                    "Rate limited on %s, retrying in %.0fms (attempt %d/%d)",
                    label, delay * 1000, attempt, self.max_retries,
                )
                self.sleep(delay)
            except StoreError as e:
                e.attempts = attempt
                raise

    # ------------------------------------------------------------------
    # Single request
    # ------------------------------------------------------------------

    def _pace(self) -> None:
        n = self.stats.next_dispatch()
        if self.pace_every > 0 and n > 1 and (n - 1) % self.pace_every == 0:
            logger.debug("Pacing pause of %.0fms after %d dispatched requests", self.pace_seconds * 1000, n - 1)
            self.sleep(self.pace_seconds)

    @contextmanager
    def _key_lock(self, collection: str, key: CompositeKey) -> Iterator[None]:
        """Hold the lock for one key; the entry is dropped when no request holds or waits on it."""
        slot = (collection, key)
        with self._key_locks_guard:
            entry = self._key_locks.setdefault(slot, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._key_locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[slot]

    def execute(self, request: WriteRequest) -> WriteResult:
        """
        Dispatch one request through pacing and the retry wrapper.

        Raises:
            StoreError: If the request fails permanently
        """
        self._pace()
        in_flight = self.stats.enter()
        if self.on_dispatch:
            self.on_dispatch(in_flight)
        try:
            if request.mode == WriteMode.CREATE:
                doc_id, attempts = self.with_backoff(
                    lambda: self.store.create_document(request.collection, request.payload),
                    label=f"create {request.collection}",
                )
                return WriteResult(request, document_id=doc_id, created=True, attempts=attempts)
            with self._key_lock(request.collection, request.key):
                return self._execute_keyed(request)
        finally:
            in_flight = self.stats.leave()
            if self.on_dispatch:
                self.on_dispatch(in_flight)

    def _find(self, request: WriteRequest) -> tuple[dict[str, Any] | None, int]:
        docs, attempts = self.with_backoff(
            lambda: self.store.list_documents(
                request.collection, filters=request.key.as_filters(), limit=1
            ),
            label=f"lookup {request.collection}",
        )
        return (docs[0] if docs else None), attempts

    def _apply_existing(self, request: WriteRequest, doc: dict[str, Any]) -> tuple[str, int]:
        doc_id = str(doc["id"])
        if request.mode == WriteMode.GET_OR_CREATE:
            return doc_id, 0
        _, attempts = self.with_backoff(
            lambda: self.store.update_document(request.collection, doc_id, request.payload),
            label=f"update {request.collection}",
        )
        return doc_id, attempts

    def _execute_keyed(self, request: WriteRequest) -> WriteResult:
        existing, attempts = self._find(request)
        if existing is not None:
            doc_id, more = self._apply_existing(request, existing)
            return WriteResult(request, document_id=doc_id, created=False, attempts=attempts + more)

        payload = {**request.payload, **request.key.as_filters()}
        try:
            doc_id, more = self.with_backoff(
                lambda: self.store.create_document(
                    request.collection, payload, document_id=encode_key(request.key)
                ),
                label=f"create {request.collection}",
            )
            return WriteResult(request, document_id=doc_id, created=True, attempts=attempts + more)
        except Rejected as e:
            if not e.is_conflict:
                raise
            # Another writer created the record between lookup and create.
            attempts += e.attempts
            existing, more = self._find(request)
            attempts += more
            if existing is None:
                raise
            doc_id, more = self._apply_existing(request, existing)
            return WriteResult(request, document_id=doc_id, created=False, attempts=attempts + more)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def run(
        self,
        requests: Iterable[WriteRequest],
        concurrency: int | None = None,
        *,
        fail_fast: bool = True,
        cancel: threading.Event | None = None,
        on_result: Callable[[WriteResult], None] | None = None,
    ) -> list[WriteResult]:
        """
        Execute ``requests`` with at most ``concurrency`` (clamped to 1..5)
        simultaneous workers.

        Args:
            requests: Requests to execute; results come back in this order
            concurrency: Worker count before clamping (None = default 3)
            fail_fast: Stop dispatching and raise the first StoreError; when
                False, failures are recorded on their WriteResult instead
            cancel: When set, workers stop taking new requests; in-flight
                requests complete and the rest are returned as skipped
            on_result: Called in the worker thread after each successful write

        Returns:
            One WriteResult per request

        Raises:
            StoreError: First failure, when ``fail_fast`` is True
        """
        items = list(requests)
        if not items:
            return []

        pending: queue.Queue[tuple[int, WriteRequest]] = queue.Queue()
        for item in enumerate(items):
            pending.put(item)

        results: list[WriteResult | None] = [None] * len(items)
        stop = threading.Event()
        failures: list[StoreError] = []
        failures_lock = threading.Lock()

        def stopped() -> bool:
            return stop.is_set() or (cancel is not None and cancel.is_set())

        def worker() -> None:
            while not stopped():
                try:
                    index, request = pending.get_nowait()
                except queue.Empty:
                    return
                try:
                    result = self.execute(request)
                except StoreError as e:
                    results[index] = WriteResult(request, attempts=e.attempts, error=e)
                    if fail_fast:
                        with failures_lock:
                            failures.append(e)
                        stop.set()
                    continue
                except BaseException:
                    stop.set()
                    raise
                results[index] = result
                if on_result is not None:
                    try:
                        on_result(result)
                    except BaseException:
                        stop.set()
                        raise

        workers = min(clamp_concurrency(concurrency), len(items))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk-writer") as pool:
            futures = [pool.submit(worker) for _ in range(workers)]
        for future in futures:
            future.result()

        if failures:
            raise failures[0]

        return [
            r if r is not None else WriteResult(items[i], skipped=True)
            for i, r in enumerate(results)
        ]
