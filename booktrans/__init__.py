"""
booktrans: structure-preserving EPUB translation

Translates the text of every chapter of a book concurrently while keeping the
markup untouched, and only writes the translated book once every chapter has
finished.

Usage:
    from booktrans import TranslationPipeline, PipelineConfig

    config = PipelineConfig(
        source_lang="en",
        target_lang="ru",
        backend="free"
    )
    pipeline = TranslationPipeline(config)
    result = pipeline.translate_file("book.epub", "book.ru.epub")
"""

__version__ = "1.0.0"
__license__ = "MIT"

from booktrans.core.models import (
    Document,
    Part,
    TextUnit,
    Batch,
    TranslationCache,
    TranslationResult
)
from booktrans.core.exceptions import (
    BookTransError,
    ParseError,
    TranslationFailure,
    RateLimitError,
    ReassemblyMismatch,
    DeadlineExceeded,
    ContainerError,
    ConfigurationError
)
from booktrans.core.pipeline import TranslationPipeline, PipelineConfig
from booktrans.translation.corrections import CorrectionTable

__all__ = [
    "__version__",
    "Document", "Part", "TextUnit", "Batch", "TranslationCache", "TranslationResult",
    "BookTransError", "ParseError", "TranslationFailure", "RateLimitError",
    "ReassemblyMismatch", "DeadlineExceeded", "ContainerError", "ConfigurationError",
    "TranslationPipeline", "PipelineConfig", "CorrectionTable",
]
