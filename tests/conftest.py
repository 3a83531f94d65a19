"""Pytest configuration and fixtures."""

import sys
import threading
from pathlib import Path
from typing import Dict, List, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from booktrans.core.exceptions import RateLimitError, TranslationFailure
from booktrans.core.models import Part
from booktrans.extraction.text_extractor import TextExtractor
from booktrans.translation.base import TranslationBackend, TranslationRequest, TranslationResponse
from booktrans.translation.retrying import RetryingTranslator


class StubBackend(TranslationBackend):
    """
    Deterministic backend for tests: no network calls.

    Looks translations up in ``mapping``; unknown text is wrapped as
    ``[ru] text``. Entries of ``script`` are consumed first, one per call:
    an exception instance is raised, anything else is returned.
    """

    def __init__(self, mapping: Optional[Dict[str, str]] = None, script: Optional[List] = None):
        super().__init__(api_key="test", model="stub")
        self.mapping = mapping or {}
        self.script = list(script or [])
        self.requests: List[str] = []
        self._lock = threading.Lock()

    def translate_sync(self, request: TranslationRequest) -> TranslationResponse:
        with self._lock:
            self.requests.append(request.text)
            step = self.script.pop(0) if self.script else None
        if isinstance(step, Exception):
            raise step
        if step is not None:
            translation = step
        else:
            translation = self.mapping.get(request.text, f"[ru] {request.text}")
        return TranslationResponse(translations=[translation], backend="stub", model="stub")

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
def make_translator():
    """RetryingTranslator without pacing or backoff delays."""
    def factory(backend, **kwargs):
        kwargs.setdefault("pacing", (0.0, 0.0))
        kwargs.setdefault("backoff_base", 0.0)
        return RetryingTranslator(backend, **kwargs)
    return factory


@pytest.fixture
def html_part():
    """Build an HTML part from a body snippet."""
    def factory(body: str, part_id: str = "chap1", media_type: str = "text/html"):
        markup = f"<html><head><title>T</title></head><body>{body}</body></html>"
        return Part(
            part_id=part_id,
            file_name=f"{part_id}.html",
            media_type=media_type,
            content=markup.encode("utf-8"),
            encoding="utf-8"
        )
    return factory


@pytest.fixture
def make_units(html_part):
    """Real text units living in a parsed tree, one per <span>."""
    def factory(texts: List[str]):
        body = "".join(f"<span>{text}</span>" for text in texts)
        extracted = TextExtractor().extract(html_part(body))
        # Drop the <title> unit
        return extracted.units[1:]
    return factory


@pytest.fixture
def rate_limit_error():
    return RateLimitError("stub")


@pytest.fixture
def network_error():
    return TranslationFailure("stub", "connection reset")
