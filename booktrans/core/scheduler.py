# -*- coding: utf-8 -*-
"""
Concurrent per-part translation.

Each eligible part gets one task on a bounded thread pool. A task owns its
part's parsed tree from extraction to serialization and publishes nothing
but the final bytes, written once into the shared TranslationCache. The
scheduler joins every task under a single deadline; only a complete, in-time
join seals the cache for the commit step.
"""

import time
import logging
from typing import Callable, List, Optional
from concurrent.futures import ThreadPoolExecutor, wait

from booktrans.core.exceptions import DeadlineExceeded, ParseError
from booktrans.core.models import Part, PartOutcome, PartStatus, TextUnit, TranslationCache
from booktrans.extraction.text_extractor import TextExtractor
from booktrans.translation.batching import Batcher
from booktrans.translation.corrections import CorrectionTable
from booktrans.translation.reassembly import BatchReassembler
from booktrans.translation.retrying import RetryingTranslator
from booktrans.utils.progress import ProgressTracker

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 3
DEFAULT_DEADLINE_SECONDS = 2 * 60 * 60

PartWorker = Callable[[Part, TranslationCache], PartOutcome]


class PartTask:
    """Translates one part end to end and caches the serialized result."""

    def __init__(
        self,
        translator: RetryingTranslator,
        batcher: Batcher,
        corrections: Optional[CorrectionTable] = None,
        extractor: Optional[TextExtractor] = None,
        tracker: Optional[ProgressTracker] = None
    ):
        self.translator = translator
        self.batcher = batcher
        self.corrections = corrections or CorrectionTable()
        self.extractor = extractor or TextExtractor()
        self.tracker = tracker

    def __call__(self, part: Part, cache: TranslationCache) -> PartOutcome:
        extracted = self.extractor.extract(part)
        batches = self.batcher.build(extracted.units)

        reassembler = BatchReassembler(
            self.translator,
            corrections=self.corrections,
            delimiter=self.batcher.delimiter,
            on_unit=self._unit_done
        )

        fallbacks = 0
        for batch in batches:
            if reassembler.process(batch).used_fallback:
                fallbacks += 1

        cache.put(part.part_id, extracted.serialize())
        logger.debug(
            f"Part {part.part_id}: {len(extracted.units)} units in {len(batches)} batches "
            f"({fallbacks} fallbacks)"
        )
        return PartOutcome(
            part_id=part.part_id,
            status=PartStatus.TRANSLATED,
            units=len(extracted.units),
            batches=len(batches),
            fallbacks=fallbacks
        )

    def _unit_done(self, unit: TextUnit) -> None:
        if self.tracker is not None:
            self.tracker.advance()


class PartScheduler:
    """Bounded worker pool running one task per part under a global deadline."""

    def __init__(
        self,
        worker: PartWorker,
        max_workers: int = DEFAULT_MAX_WORKERS,
        deadline_seconds: float = DEFAULT_DEADLINE_SECONDS
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if deadline_seconds <= 0:
            raise ValueError("deadline_seconds must be positive")
        self.worker = worker
        self.max_workers = max_workers
        self.deadline_seconds = deadline_seconds

    def run(self, parts: List[Part], cache: TranslationCache) -> List[PartOutcome]:
        """
        Dispatch all parts and wait for them.

        Args:
            parts: Parts to translate (one task each)
            cache: Cache the tasks write into; sealed on success

        Returns:
            One outcome per part, in input order

        Raises:
            DeadlineExceeded: If any task is still unfinished at the deadline
        """
        start = time.time()
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="part")
        futures = [executor.submit(self._run_task, part, cache) for part in parts]
        logger.info(f"Dispatched {len(futures)} part(s) to {self.max_workers} worker(s)")

        done, not_done = wait(futures, timeout=self.deadline_seconds)

        if not_done:
            # Queued tasks are cancelled; running ones are left to finish
            # on their own and their results are never read
            executor.shutdown(wait=False, cancel_futures=True)
            pending = [part.part_id for part, future in zip(parts, futures) if future in not_done]
            logger.error(f"Deadline of {self.deadline_seconds:.0f}s expired; {len(pending)} part(s) unfinished")
            raise DeadlineExceeded(self.deadline_seconds, pending)

        executor.shutdown(wait=True)
        cache.seal()
        logger.info(f"All {len(futures)} part task(s) joined in {time.time() - start:.1f}s")
        return [future.result() for future in futures]

    def _run_task(self, part: Part, cache: TranslationCache) -> PartOutcome:
        """Task boundary: nothing raised here reaches siblings or the scheduler."""
        try:
            return self.worker(part, cache)
        except ParseError as e:
            logger.warning(f"Skipping part {part.part_id}: {e.message}")
            return PartOutcome(part_id=part.part_id, status=PartStatus.PARSE_ERROR, error=e.message)
        except Exception as e:
            logger.exception(f"Task for part {part.part_id} failed; leaving it unchanged")
            return PartOutcome(part_id=part.part_id, status=PartStatus.FAILED, error=str(e))
