"""
Main translation pipeline for booktrans.

Orchestrates a whole job: read the container, count units, fan the
eligible parts out to the PartScheduler, commit the cached results into the
document in one thread, and hand it to the writer. The document is either
fully committed and written, or left untouched with no output produced.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import List, Dict, Optional, Any
from pathlib import Path
import time
import logging

from booktrans.core.exceptions import ConfigurationError
from booktrans.core.models import Document, TranslationCache, TranslationResult
from booktrans.core.scheduler import (
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_MAX_WORKERS,
    PartScheduler,
    PartTask
)
from booktrans.extraction.epub_reader import EpubReader
from booktrans.extraction.text_extractor import TextExtractor
from booktrans.rendering.epub_writer import EpubWriter
from booktrans.translation.backends import BACKENDS, create_backend
from booktrans.translation.base import TranslationBackend
from booktrans.translation.batching import DEFAULT_BATCH_SIZE_LIMIT, DEFAULT_DELIMITER, Batcher
from booktrans.translation.corrections import CorrectionTable
from booktrans.translation.retrying import RetryingTranslator
from booktrans.utils.progress import ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Complete configuration for the translation pipeline."""

    # Language settings
    source_lang: str = "en"
    target_lang: str = "ru"

    # Translation backend
    backend: str = "free"  # free, google, local
    api_key: Optional[str] = None

    # Concurrency: public endpoints rate-limit aggressively, keep this small
    max_workers: int = DEFAULT_MAX_WORKERS
    deadline_seconds: float = DEFAULT_DEADLINE_SECONDS

    # Batching
    batch_size_limit: int = DEFAULT_BATCH_SIZE_LIMIT
    delimiter: str = DEFAULT_DELIMITER

    # Retry policy
    max_attempts: int = 3
    backoff_base: float = 2.0
    pacing_min: float = 0.1
    pacing_max: float = 0.3

    # Post-processing
    corrections_path: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Build a config from a flat mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known and value is not None}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.debug(f"Ignoring unknown config keys: {', '.join(unknown)}")
        for key in ("corrections_path", "log_file"):
            if values.get(key):
                values[key] = Path(values[key])
        return cls(**values)

    def validate(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        if self.backend.lower() not in BACKENDS:
            issues.append(f"backend must be one of {', '.join(sorted(BACKENDS))}")

        if self.max_workers < 1:
            issues.append("max_workers must be at least 1")

        if self.deadline_seconds <= 0:
            issues.append("deadline_seconds must be positive")

        if self.batch_size_limit < 1:
            issues.append("batch_size_limit must be positive")

        if not self.delimiter.strip():
            issues.append("delimiter must contain a non-whitespace token")

        if self.max_attempts < 1:
            issues.append("max_attempts must be at least 1")

        if self.backoff_base < 0:
            issues.append("backoff_base must be non-negative")

        if self.pacing_min < 0 or self.pacing_max < self.pacing_min:
            issues.append("pacing range must satisfy 0 <= pacing_min <= pacing_max")

        return issues


class TranslationPipeline:
    """
    Runs one translation job.

    Usage:
        pipeline = TranslationPipeline(PipelineConfig(target_lang="ru"))
        result = pipeline.translate_file("book.epub", "book.ru.epub")
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        backend: Optional[TranslationBackend] = None,
        corrections: Optional[CorrectionTable] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        self.config = config or PipelineConfig()
        self.progress_callback = progress_callback

        issues = self.config.validate()
        if issues:
            raise ConfigurationError(f"Configuration issues: {'; '.join(issues)}")

        self.backend = backend or create_backend(self.config.backend, api_key=self.config.api_key)

        if corrections is not None:
            self.corrections = corrections
        elif self.config.corrections_path:
            self.corrections = CorrectionTable.load(self.config.corrections_path)
        else:
            self.corrections = CorrectionTable()

        self.extractor = TextExtractor()
        self.reader = EpubReader()
        self.writer = EpubWriter()

    def build_translator(self) -> RetryingTranslator:
        return RetryingTranslator(
            self.backend,
            source_lang=self.config.source_lang,
            target_lang=self.config.target_lang,
            max_attempts=self.config.max_attempts,
            pacing=(self.config.pacing_min, self.config.pacing_max),
            backoff_base=self.config.backoff_base
        )

    def translate_file(self, input_path, output_path) -> TranslationResult:
        """
        Translate an EPUB file into a new EPUB file.

        Raises:
            ContainerError: If the input cannot be read or the output written
            DeadlineExceeded: If the job did not finish in time (nothing written)
        """
        document = self.reader.read(input_path)
        result = self.translate_document(document)
        self.writer.write(document, output_path)
        result.output_path = str(output_path)
        return result

    def translate_document(self, document: Document) -> TranslationResult:
        """
        Translate all eligible parts and commit them into the document.

        Raises:
            DeadlineExceeded: If the scheduler deadline expires; the document
                is left exactly as it was read
        """
        start_time = time.time()
        parts = document.eligible_parts

        units_total = sum(self.extractor.count_units(part) for part in parts)
        logger.info(
            f"Found {units_total} text units in {len(parts)} markup parts; "
            f"translating {self.config.source_lang} -> {self.config.target_lang} "
            f"with {self.config.max_workers} worker(s)"
        )

        tracker = ProgressTracker(total=units_total, callback=self.progress_callback)
        translator = self.build_translator()
        task = PartTask(
            translator=translator,
            batcher=Batcher(self.config.batch_size_limit, self.config.delimiter),
            corrections=self.corrections,
            extractor=self.extractor,
            tracker=tracker
        )
        scheduler = PartScheduler(
            task,
            max_workers=self.config.max_workers,
            deadline_seconds=self.config.deadline_seconds
        )

        cache = TranslationCache()
        outcomes = scheduler.run(parts, cache)

        updated = document.commit(cache)
        logger.info(f"Committed {updated} translated part(s)")

        return TranslationResult(
            input_path=document.source_path,
            output_path=None,
            committed=True,
            parts_total=len(document.parts),
            parts_eligible=len(parts),
            units_total=units_total,
            elapsed=time.time() - start_time,
            outcomes=outcomes,
            translator_stats=translator.get_stats()
        )

    def get_run_summary(self, result: TranslationResult) -> Dict[str, Any]:
        """Flat summary of a finished job for display or JSON output."""
        return {
            "input": result.input_path,
            "output": result.output_path,
            "backend": self.config.backend,
            "languages": f"{self.config.source_lang} -> {self.config.target_lang}",
            "parts_total": result.parts_total,
            "parts_eligible": result.parts_eligible,
            "parts_translated": result.parts_translated,
            "parts_skipped": result.parts_skipped,
            "units_total": result.units_total,
            "batches": result.batches,
            "fallbacks": result.fallbacks,
            "degraded_calls": result.translator_stats.get("degraded", 0),
            "rate_limited": result.translator_stats.get("rate_limited", 0),
            "elapsed_seconds": round(result.elapsed, 1),
        }
