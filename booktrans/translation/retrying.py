"""
Retry, pacing and graceful degradation around a translation backend.

``RetryingTranslator.translate`` never raises: if every attempt fails the
input text comes back unchanged, so one bad call leaves a few words
untranslated instead of sinking a whole chapter.
"""

from __future__ import annotations
from threading import Lock
from typing import Dict, Optional, Tuple
import logging
import random
import time

from booktrans.core.exceptions import RateLimitError, TranslationFailure
from booktrans.translation.base import TranslationBackend, TranslationRequest

logger = logging.getLogger(__name__)


class RetryingTranslator:
    """Translate single strings with jittered pacing and linear-step backoff."""

    def __init__(
        self,
        backend: TranslationBackend,
        source_lang: str = "en",
        target_lang: str = "ru",
        max_attempts: int = 3,
        pacing: Tuple[float, float] = (0.1, 0.3),
        backoff_base: float = 2.0,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            backend: Service doing the actual translation
            source_lang: Source language code
            target_lang: Target language code
            max_attempts: Calls made before giving up on a string
            pacing: Random pause range (seconds) before every call
            backoff_base: Wait after failed attempt ``n`` is ``backoff_base * n``
            rng: Random source for pacing (shared safely across threads)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.backend = backend
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.max_attempts = max_attempts
        self.pacing = pacing
        self.backoff_base = backoff_base
        self._rng = rng or random.Random()
        self._lock = Lock()
        self.stats = {
            "calls": 0,
            "succeeded": 0,
            "failures": 0,
            "rate_limited": 0,
            "degraded": 0
        }

    def translate(self, text: str) -> str:
        if text is None or not text.strip():
            return text

        for attempt in range(1, self.max_attempts + 1):
            self._pause()
            result = self._attempt(text, attempt)
            if result is not None:
                self._count("succeeded")
                return result

            if attempt < self.max_attempts:
                wait_time = self.backoff_base * attempt
                logger.debug(f"Retrying in {wait_time:.1f}s (attempt {attempt + 1}/{self.max_attempts})")
                time.sleep(wait_time)

        self._count("degraded")
        logger.warning(
            f"Giving up after {self.max_attempts} attempts; keeping original text "
            f"({len(text)} chars)"
        )
        return text

    def _attempt(self, text: str, attempt: int) -> Optional[str]:
        """One backend call; None means the attempt failed."""
        self._count("calls")
        request = TranslationRequest(
            text=text,
            source_lang=self.source_lang,
            target_lang=self.target_lang
        )
        try:
            response = self.backend.translate_sync(request)
        except RateLimitError:
            self._count("rate_limited")
            logger.warning(f"Rate limited by {self.backend.name} (attempt {attempt}/{self.max_attempts})")
            return None
        except TranslationFailure as e:
            self._count("failures")
            logger.warning(f"Translation attempt {attempt}/{self.max_attempts} failed: {e.message}")
            return None
        except Exception as e:
            self._count("failures")
            logger.warning(f"Translation attempt {attempt}/{self.max_attempts} crashed: {e}")
            return None

        translated = response.text if response is not None else None
        if not translated or not translated.strip():
            self._count("failures")
            logger.warning(f"Translation attempt {attempt}/{self.max_attempts} returned nothing")
            return None
        return translated

    def _pause(self) -> None:
        low, high = self.pacing
        if high <= 0:
            return
        with self._lock:
            delay = self._rng.uniform(low, high)
        time.sleep(delay)

    def _count(self, key: str) -> None:
        with self._lock:
            self.stats[key] += 1

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self.stats)
