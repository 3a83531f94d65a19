# -*- coding: utf-8 -*-
"""
Progress tracking for translation jobs.

``ProgressTracker`` is the thread-safe counter the pipeline feeds; it knows
nothing about terminals. ``ProgressReporter`` is one observer of it that
draws a rich progress bar for the CLI.
"""

import sys
import time
import logging
from threading import Lock
from typing import Optional, Callable
from dataclasses import dataclass, field

from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
    TimeRemainingColumn
)
from rich.console import Console

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, int], None]


class ProgressTracker:
    """
    Counts translated units across all worker threads.

    The callback receives ``(completed, total, percent)`` and fires only when
    the integer percentage goes up, so observers never see the same value
    twice or a value going backwards.
    """

    def __init__(self, total: int = 0, callback: Optional[ProgressCallback] = None):
        self.total = total
        self.callback = callback
        self._completed = 0
        self._last_percent = -1
        self._lock = Lock()

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return min(100, int(self._completed * 100 / self.total))

    def advance(self, amount: int = 1) -> None:
        with self._lock:
            self._completed += amount
            if self.total <= 0:
                return
            percent = self.percent
            if percent <= self._last_percent:
                return
            self._last_percent = percent
            # Notify under the lock to keep reported values monotonic
            self._notify(self._completed, percent)

    def _notify(self, completed: int, percent: int) -> None:
        if self.callback is None:
            return
        try:
            self.callback(completed, self.total, percent)
        except Exception as e:
            logger.debug(f"Progress callback failed: {e}")


@dataclass
class ProgressStats:
    """Statistics for progress display."""
    total: int = 0
    completed: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.completed / self.total) * 100

    @property
    def elapsed(self) -> float:
        return time.time() - self.start_time


class ProgressReporter:
    """
    Console observer for a ProgressTracker.

    Usage:
        with ProgressReporter(description="Translating") as reporter:
            tracker = ProgressTracker(total, callback=reporter.update)
            ...
    """

    def __init__(
        self,
        description: str = "Translating",
        console: Optional[Console] = None,
        use_rich: bool = True,
        show_eta: bool = True
    ):
        self.stats = ProgressStats()
        self.description = description
        self.use_rich = use_rich and sys.stdout.isatty()
        self.show_eta = show_eta

        self._console = console or Console()
        self._progress = None
        self._task_id = None

    def start(self, total: int = 0):
        """Start progress tracking."""
        self.stats = ProgressStats(total=total)

        if self.use_rich:
            columns = [
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(bar_width=30),
                TaskProgressColumn(),
            ]
            if self.show_eta:
                columns.extend([
                    TimeElapsedColumn(),
                    TextColumn("•"),
                    TimeRemainingColumn()
                ])

            self._progress = Progress(*columns, console=self._console)
            self._progress.start()
            self._task_id = self._progress.add_task(self.description, total=total or None)
        else:
            self._print_simple(f"{self.description}: 0/{total}")

    def update(self, completed: int, total: int, percent: int):
        """ProgressTracker callback."""
        self.stats.total = total
        self.stats.completed = completed

        if self._progress is not None:
            self._progress.update(self._task_id, completed=completed, total=total)
        elif not self.use_rich:
            self._print_simple_progress(percent)

    def finish(self, final_message: Optional[str] = None):
        """Finish progress tracking."""
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            if final_message:
                self._console.print(final_message)
        else:
            msg = final_message or (
                f"{self.description}: Done ({self.stats.completed}/{self.stats.total}) "
                f"in {self.stats.elapsed:.1f}s"
            )
            self._print_simple(msg, newline=True)

    def _print_simple(self, message: str, newline: bool = False):
        end = "\n" if newline else "\r"
        print(f"\r{message}".ljust(80), end=end, flush=True)

    def _print_simple_progress(self, percent: int):
        filled = int(percent * 30 / 100)
        bar = "=" * filled + " " * (30 - filled)
        self._print_simple(f"{self.description}: [{bar}] {percent}%")

    def __enter__(self):
        self.start(self.stats.total)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()
        return False
