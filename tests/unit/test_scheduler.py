"""Unit tests for concurrent part scheduling."""

import threading
import time

import pytest

from booktrans.core.exceptions import DeadlineExceeded, ParseError
from booktrans.core.models import Part, PartOutcome, PartStatus, TranslationCache
from booktrans.core.scheduler import PartScheduler, PartTask
from booktrans.translation.batching import Batcher
from booktrans.utils.progress import ProgressTracker

from conftest import StubBackend


def make_parts(count):
    return [Part(f"p{i}", f"p{i}.html", "text/html", b"") for i in range(count)]


def caching_worker(part, cache):
    cache.put(part.part_id, part.part_id.encode())
    return PartOutcome(part_id=part.part_id, status=PartStatus.TRANSLATED)


def test_runs_every_part_and_seals_cache():
    parts = make_parts(5)
    cache = TranslationCache()

    outcomes = PartScheduler(caching_worker, max_workers=3).run(parts, cache)

    assert [outcome.part_id for outcome in outcomes] == [part.part_id for part in parts]
    assert cache.sealed
    assert dict(cache.items()) == {f"p{i}": f"p{i}".encode() for i in range(5)}


def test_respects_worker_bound():
    active = []
    peak = []
    lock = threading.Lock()

    def worker(part, cache):
        with lock:
            active.append(part.part_id)
            peak.append(len(active))
        time.sleep(0.05)
        with lock:
            active.remove(part.part_id)
        return PartOutcome(part_id=part.part_id, status=PartStatus.TRANSLATED)

    PartScheduler(worker, max_workers=2).run(make_parts(6), TranslationCache())

    assert max(peak) <= 2


def test_parse_error_stays_in_its_part():
    def worker(part, cache):
        if part.part_id == "p1":
            raise ParseError(part.part_id, "bad bytes")
        return caching_worker(part, cache)

    cache = TranslationCache()
    outcomes = PartScheduler(worker).run(make_parts(3), cache)

    assert [outcome.status for outcome in outcomes] == [
        PartStatus.TRANSLATED, PartStatus.PARSE_ERROR, PartStatus.TRANSLATED
    ]
    assert "p1" not in cache
    assert len(cache) == 2


def test_unexpected_error_stays_in_its_part():
    def worker(part, cache):
        if part.part_id == "p0":
            raise RuntimeError("boom")
        return caching_worker(part, cache)

    outcomes = PartScheduler(worker).run(make_parts(2), TranslationCache())

    assert outcomes[0].status == PartStatus.FAILED
    assert outcomes[0].error == "boom"
    assert outcomes[1].succeeded


def test_deadline_raises_and_leaves_cache_unsealed():
    release = threading.Event()

    def worker(part, cache):
        if part.part_id == "p1":
            release.wait(10)
        return caching_worker(part, cache)

    cache = TranslationCache()
    scheduler = PartScheduler(worker, max_workers=2, deadline_seconds=0.3)
    try:
        with pytest.raises(DeadlineExceeded) as exc_info:
            scheduler.run(make_parts(2), cache)
    finally:
        release.set()

    assert exc_info.value.pending == ["p1"]
    assert not exc_info.value.recoverable
    assert not cache.sealed
    with pytest.raises(RuntimeError):
        list(cache.items())


def test_empty_part_list():
    cache = TranslationCache()
    assert PartScheduler(caching_worker).run([], cache) == []
    assert cache.sealed


@pytest.mark.parametrize("workers, deadline", [(0, 10), (2, 0)])
def test_invalid_settings(workers, deadline):
    with pytest.raises(ValueError):
        PartScheduler(caching_worker, max_workers=workers, deadline_seconds=deadline)


class TestPartTask:
    """A task translating one real part."""

    def test_translates_and_caches_part(self, html_part, make_translator):
        backend = StubBackend(mapping={
            "T ||| Hello ||| world": "Т ||| Привет ||| мир"
        })
        tracker = ProgressTracker(total=3)
        task = PartTask(make_translator(backend), Batcher(), tracker=tracker)
        cache = TranslationCache()

        outcome = task(html_part("<p>Hello</p><p>world</p>"), cache)

        assert outcome.succeeded
        assert outcome.units == 3
        assert outcome.batches == 1
        assert outcome.fallbacks == 0
        assert tracker.completed == 3

        cache.seal()
        data = dict(cache.items())["chap1"].decode("utf-8")
        assert "<p>Привет</p><p>мир</p>" in data

    def test_oversized_unit_translated_alone(self, html_part, make_translator):
        long_text = "This paragraph is far longer than the batch limit."
        assert len(long_text) > 20
        backend = StubBackend()
        task = PartTask(make_translator(backend), Batcher(limit=20))
        cache = TranslationCache()

        outcome = task(html_part(f"<p>short</p><p>{long_text}</p>"), cache)

        assert outcome.units == 3
        assert outcome.batches == 2
        assert long_text in backend.requests

        cache.seal()
        data = dict(cache.items())["chap1"].decode("utf-8")
        assert f"<p>[ru] {long_text}</p>" in data

    def test_counts_fallbacks(self, html_part, make_translator):
        backend = StubBackend(script=["one piece only"])
        task = PartTask(make_translator(backend), Batcher())

        outcome = task(html_part("<p>Hello</p>"), TranslationCache())

        assert outcome.fallbacks == 1

    def test_parse_error_propagates_to_scheduler(self, make_translator):
        part = Part("bad", "bad.html", "text/html", b"\xff\xfe\xfa")
        task = PartTask(make_translator(StubBackend()), Batcher())

        with pytest.raises(ParseError):
            task(part, TranslationCache())

        outcomes = PartScheduler(task).run([part], TranslationCache())
        assert outcomes[0].status == PartStatus.PARSE_ERROR
