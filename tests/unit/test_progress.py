"""Unit tests for progress tracking."""

import re
import threading
from unittest.mock import Mock

from booktrans.utils.progress import ProgressReporter, ProgressTracker


def test_reports_each_new_percent():
    calls = []
    tracker = ProgressTracker(total=4, callback=lambda *args: calls.append(args))

    for _ in range(4):
        tracker.advance()

    assert calls == [(1, 4, 25), (2, 4, 50), (3, 4, 75), (4, 4, 100)]


def test_skips_unchanged_percent():
    calls = []
    tracker = ProgressTracker(total=300, callback=lambda *args: calls.append(args))

    for _ in range(300):
        tracker.advance()

    percents = [percent for _, _, percent in calls]
    assert percents == list(range(0, 101))
    assert tracker.completed == 300
    assert tracker.percent == 100


def test_monotonic_under_concurrency():
    percents = []
    tracker = ProgressTracker(total=1000, callback=lambda c, t, p: percents.append(p))

    def work():
        for _ in range(125):
            tracker.advance()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert tracker.completed == 1000
    assert percents == sorted(set(percents))
    assert percents[-1] == 100


def test_callback_errors_are_swallowed():
    callback = Mock(side_effect=RuntimeError("display gone"))
    tracker = ProgressTracker(total=2, callback=callback)

    tracker.advance()
    tracker.advance()

    assert callback.call_count == 2
    assert tracker.completed == 2


def test_zero_total_never_reports():
    callback = Mock()
    tracker = ProgressTracker(total=0, callback=callback)

    tracker.advance()

    callback.assert_not_called()
    assert tracker.percent == 0


def test_no_callback():
    tracker = ProgressTracker(total=1)
    tracker.advance()
    assert tracker.percent == 100


def test_reporter_plain_output(capsys):
    reporter = ProgressReporter(description="Translating", use_rich=False)
    reporter.start(total=2)
    reporter.update(1, 2, 50)
    reporter.finish()

    out = capsys.readouterr().out
    assert "50%" in out
    assert re.search(r"Done \(1/2\) in \d+\.\ds", out)
    assert reporter.stats.percentage == 50.0
