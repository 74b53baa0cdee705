"""
Tests for the rate-limited bulk writer: bounded concurrency, retry with
backoff, pacing, keyed upserts, cancellation, and failure handling.
"""

import threading

import pytest

from lift_scheduler.core.models import CompositeKey
from lift_scheduler.io.bulk_writer import (
    WriteMode,
    WriteRequest,
    clamp_concurrency,
)
from lift_scheduler.io.memory_store import MemoryDocumentStore
from lift_scheduler.io.store import RateLimited, Rejected, Unavailable, encode_key
from store_fakes import (
    AlwaysRateLimitedStore,
    FailingStore,
    FlakyStore,
    ProbeStore,
    UnavailableStore,
    make_writer,
)


def _creates(n: int, collection: str = "items") -> list[WriteRequest]:
    return [WriteRequest.create(collection, {"i": i}) for i in range(n)]


def _set_key(set_number: int = 1) -> CompositeKey:
    return CompositeKey.of(workout_log_id="w1", program_exercise_id="ex1", set_number=set_number)


class StaleReadStore(MemoryDocumentStore):
    """Lookups miss for the first ``stale_reads`` calls, as with a lagging index."""

    def __init__(self, stale_reads: int = 1):
        super().__init__()
        self.stale_reads = stale_reads

    def list_documents(self, collection, filters=None, order=None, limit=None):
        if self.stale_reads > 0:
            self.stale_reads -= 1
            return []
        return super().list_documents(collection, filters, order, limit)


class TestClampConcurrency:
    @pytest.mark.parametrize(
        "requested,expected",
        [(None, 3), (0, 1), (-4, 1), (1, 1), (3, 3), (5, 5), (6, 5), (50, 5)],
    )
    def test_clamped_to_range(self, requested, expected):
        assert clamp_concurrency(requested) == expected


class TestBoundedConcurrency:
    """At no instant are more than `concurrency` writes in flight."""

    @pytest.mark.parametrize("concurrency", [1, 3, 5])
    def test_peak_never_exceeds_bound(self, concurrency):
        store = ProbeStore()
        writer = make_writer(store, pace_every=0)
        results = writer.run(_creates(30), concurrency)

        assert all(r.ok for r in results)
        assert store.count("items") == 30
        assert store.peak <= concurrency
        assert writer.stats.max_in_flight <= concurrency

    def test_single_worker_is_sequential(self):
        store = ProbeStore()
        writer = make_writer(store, pace_every=0)
        writer.run(_creates(10), 1)
        assert store.peak == 1

    def test_out_of_range_request_is_clamped(self):
        store = ProbeStore()
        writer = make_writer(store, pace_every=0)
        writer.run(_creates(30), 50)
        assert store.peak <= 5

    def test_on_dispatch_sees_bounded_counts(self):
        seen: list[int] = []
        lock = threading.Lock()

        def record(n: int) -> None:
            with lock:
                seen.append(n)

        writer = make_writer(ProbeStore(), pace_every=0, on_dispatch=record)
        writer.run(_creates(20), 2)
        assert seen
        assert max(seen) <= 2
        assert min(seen) >= 0

    def test_results_in_request_order(self, memory_store):
        writer = make_writer(memory_store, pace_every=0)
        requests = _creates(25)
        results = writer.run(requests, 4)
        assert [r.request for r in results] == requests
        stored = {d["id"]: d["i"] for d in memory_store.list_documents("items")}
        assert [stored[r.document_id] for r in results] == list(range(25))

    def test_empty_batch(self, memory_store):
        assert make_writer(memory_store).run([], 3) == []


class TestBackoff:
    def test_delays_strictly_increase(self):
        writer = make_writer(MemoryDocumentStore(), base_delay=0.65, jitter=0.25, max_retries=7)
        delays = [writer.backoff_delay(n) for n in range(1, 8)]
        assert all(b > a for a, b in zip(delays, delays[1:]))

    def test_delay_bounds(self):
        writer = make_writer(MemoryDocumentStore(), base_delay=0.5, jitter=0.2)
        for n in range(1, 6):
            d = writer.backoff_delay(n)
            base = 0.5 * 2 ** (n - 1)
            assert base <= d <= base + 0.2

    def test_max_delay_caps_exponential_part(self):
        writer = make_writer(MemoryDocumentStore(), base_delay=1.0, jitter=0.0, max_delay=3.0)
        assert [writer.backoff_delay(n) for n in range(1, 5)] == [1.0, 2.0, 3.0, 3.0]

    def test_transient_rate_limit_retried_until_success(self):
        sleeps: list[float] = []
        store = FlakyStore(fail_times=2)
        writer = make_writer(store, sleeps=sleeps, pace_every=0)

        result = writer.execute(WriteRequest.create("items", {"i": 1}))

        assert result.ok and result.created
        assert result.attempts == 3
        assert writer.stats.retries == 2
        assert len(sleeps) == 2
        assert sleeps[1] > sleeps[0]
        assert store.count("items") == 1

    def test_retry_after_does_not_change_schedule(self):
        """A server Retry-After is kept on the error; delays still follow the writer's backoff."""
        sleeps: list[float] = []
        store = FlakyStore(fail_times=2, retry_after=30.0)
        writer = make_writer(store, sleeps=sleeps, base_delay=0.5, jitter=0.2, pace_every=0)

        writer.execute(WriteRequest.create("items", {"i": 1}))

        assert len(sleeps) == 2
        assert 0.5 <= sleeps[0] <= 0.7
        assert 1.0 <= sleeps[1] <= 1.2

    def test_exhaustion_raises_rate_limited(self):
        sleeps: list[float] = []
        writer = make_writer(AlwaysRateLimitedStore(), sleeps=sleeps, max_retries=3, pace_every=0)

        with pytest.raises(RateLimited) as exc_info:
            writer.execute(WriteRequest.create("items", {"i": 1}))

        assert exc_info.value.attempts == 4
        assert exc_info.value.retryable
        assert len(sleeps) == 3
        assert writer.stats.retries == 3

    def test_default_gives_eight_attempts(self):
        writer = make_writer(AlwaysRateLimitedStore(), pace_every=0)
        with pytest.raises(RateLimited) as exc_info:
            writer.execute(WriteRequest.create("items", {}))
        assert exc_info.value.attempts == 8

    def test_rejected_not_retried(self):
        sleeps: list[float] = []
        store = FailingStore(fail_on=1)
        writer = make_writer(store, sleeps=sleeps, pace_every=0)

        with pytest.raises(Rejected) as exc_info:
            writer.execute(WriteRequest.create("items", {}))

        assert exc_info.value.attempts == 1
        assert not exc_info.value.retryable
        assert store.creates == 1
        assert sleeps == []

    def test_unavailable_not_retried(self):
        sleeps: list[float] = []
        writer = make_writer(UnavailableStore(), sleeps=sleeps, pace_every=0)
        with pytest.raises(Unavailable):
            writer.execute(WriteRequest.create("items", {}))
        assert sleeps == []
        assert writer.stats.retries == 0

    def test_negative_max_retries_rejected(self):
        with pytest.raises(ValueError):
            make_writer(MemoryDocumentStore(), max_retries=-1)


class TestPacing:
    def test_pause_before_every_nth_dispatch(self, memory_store):
        sleeps: list[float] = []
        writer = make_writer(memory_store, sleeps=sleeps, pace_every=5, pace_seconds=0.2)
        writer.run(_creates(12), 1)
        # dispatches 6 and 11 are preceded by a pause
        assert sleeps == [0.2, 0.2]

    def test_pacing_counts_across_batches(self, memory_store):
        sleeps: list[float] = []
        writer = make_writer(memory_store, sleeps=sleeps, pace_every=3, pace_seconds=0.1)
        writer.run(_creates(2), 1)
        writer.run(_creates(2), 1)
        assert sleeps == [0.1]
        assert writer.stats.dispatched == 4

    def test_pacing_disabled(self, memory_store):
        sleeps: list[float] = []
        writer = make_writer(memory_store, sleeps=sleeps, pace_every=0)
        writer.run(_creates(50), 3)
        assert sleeps == []


class TestKeyedWrites:
    def test_keyed_request_requires_key(self):
        with pytest.raises(ValueError, match="composite key"):
            WriteRequest("set_logs", {"reps": 8}, mode=WriteMode.UPSERT)

    def test_upsert_twice_leaves_one_record(self, memory_store):
        writer = make_writer(memory_store, pace_every=0)
        first = writer.execute(WriteRequest.upsert("set_logs", _set_key(), {"reps": 8}))
        second = writer.execute(WriteRequest.upsert("set_logs", _set_key(), {"reps": 9}))

        assert first.created and not second.created
        assert first.document_id == second.document_id == encode_key(_set_key())
        docs = memory_store.list_documents("set_logs")
        assert len(docs) == 1
        assert docs[0]["reps"] == 9
        assert docs[0]["program_exercise_id"] == "ex1"
        assert docs[0]["set_number"] == 1

    def test_distinct_keys_distinct_records(self, memory_store):
        writer = make_writer(memory_store, pace_every=0)
        writer.run([WriteRequest.upsert("set_logs", _set_key(n), {"reps": n}) for n in (1, 2, 3)], 3)
        assert memory_store.count("set_logs") == 3

    def test_concurrent_duplicates_converge(self, memory_store):
        writer = make_writer(memory_store, pace_every=0)
        requests = [WriteRequest.upsert("set_logs", _set_key(), {"reps": r}) for r in range(10)]

        results = writer.run(requests, 5)

        assert memory_store.count("set_logs") == 1
        assert sum(1 for r in results if r.created) == 1
        assert len({r.document_id for r in results}) == 1
        assert writer._key_locks == {}

    def test_key_lock_released_after_failure(self):
        writer = make_writer(AlwaysRateLimitedStore(), max_retries=1, pace_every=0)
        with pytest.raises(RateLimited):
            writer.execute(WriteRequest.upsert("set_logs", _set_key(), {"reps": 8}))
        assert writer._key_locks == {}

    def test_conflict_on_create_becomes_update(self):
        store = StaleReadStore(stale_reads=1)
        key = _set_key()
        store.create_document("set_logs", {"reps": 5, **key.as_filters()}, document_id=encode_key(key))
        writer = make_writer(store, pace_every=0)

        result = writer.execute(WriteRequest.upsert("set_logs", key, {"reps": 7}))

        assert not result.created
        assert result.document_id == encode_key(key)
        docs = store.list_documents("set_logs")
        assert len(docs) == 1
        assert docs[0]["reps"] == 7

    def test_upsert_survives_rate_limits(self):
        store = FlakyStore(fail_times=2)
        writer = make_writer(store, pace_every=0)
        writer.execute(WriteRequest.upsert("set_logs", _set_key(), {"reps": 8}))
        writer.execute(WriteRequest.upsert("set_logs", _set_key(), {"reps": 10}))
        docs = store.list_documents("set_logs")
        assert len(docs) == 1
        assert docs[0]["reps"] == 10

    def test_get_or_create_leaves_existing_untouched(self, memory_store):
        writer = make_writer(memory_store, pace_every=0)
        key = CompositeKey.of(user_id="u", date="2026-01-05")
        first = writer.execute(WriteRequest.get_or_create("workout_logs", key, {"status": "in_progress"}))
        second = writer.execute(WriteRequest.get_or_create("workout_logs", key, {"status": "complete"}))

        assert first.created and not second.created
        assert first.document_id == second.document_id
        docs = memory_store.list_documents("workout_logs")
        assert len(docs) == 1
        assert docs[0]["status"] == "in_progress"


class TestBatchControl:
    def test_fail_fast_raises_and_keeps_earlier_writes(self):
        store = FailingStore(fail_on=3)
        writer = make_writer(store, pace_every=0)

        with pytest.raises(Rejected):
            writer.run(_creates(6), 1)

        assert store.count("items") == 2

    def test_collect_failures_without_fail_fast(self):
        store = FailingStore(fail_on=3)
        writer = make_writer(store, pace_every=0)

        results = writer.run(_creates(6), 1, fail_fast=False)

        assert isinstance(results[2].error, Rejected)
        assert not results[2].ok
        assert [r.ok for r in results] == [True, True, False, True, True, True]
        assert store.count("items") == 5

    def test_cancel_before_start_skips_everything(self, memory_store):
        cancel = threading.Event()
        cancel.set()
        results = make_writer(memory_store).run(_creates(5), 2, cancel=cancel)
        assert all(r.skipped for r in results)
        assert memory_store.count("items") == 0

    def test_cancel_midway_stops_dispatch(self, memory_store):
        cancel = threading.Event()
        seen: list[str] = []

        def on_result(result):
            seen.append(result.document_id)
            if len(seen) == 3:
                cancel.set()

        results = make_writer(memory_store, pace_every=0).run(
            _creates(10), 1, cancel=cancel, on_result=on_result
        )

        assert [r.ok for r in results[:3]] == [True, True, True]
        assert all(r.skipped for r in results[3:])
        assert memory_store.count("items") == 3
