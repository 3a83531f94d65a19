"""Free Google Translate backend (via deep-translator)."""

import time
from typing import Optional

from deep_translator import GoogleTranslator
from deep_translator.exceptions import TooManyRequests

from booktrans.core.exceptions import RateLimitError, TranslationFailure
from ..base import TranslationBackend, TranslationRequest, TranslationResponse


class FreeBackend(TranslationBackend):
    """Free translation backend using deep-translator's GoogleTranslator."""

    LANG_CODES = {
        "en": "en", "english": "en",
        "fr": "fr", "french": "fr",
        "es": "es", "spanish": "es",
        "de": "de", "german": "de",
        "it": "it", "italian": "it",
        "pt": "pt", "portuguese": "pt",
        "ru": "ru", "russian": "ru",
        "uk": "uk", "ukrainian": "uk",
        "zh": "zh-CN", "chinese": "zh-CN",
        "ja": "ja", "japanese": "ja",
        "ko": "ko", "korean": "ko",
        "ar": "ar", "arabic": "ar"
    }

    # Google rejects longer payloads
    MAX_CHARS = 5000

    def __init__(self, api_key: Optional[str] = None, model: str = "google"):
        super().__init__(api_key, model)

    def _normalize_lang(self, lang: str) -> str:
        """Normalize language code."""
        lang = lang.lower().strip()
        return self.LANG_CODES.get(lang, lang)

    def translate_sync(self, request: TranslationRequest) -> TranslationResponse:
        start_time = time.time()

        if len(request.text) > self.MAX_CHARS:
            raise TranslationFailure(
                "free", f"text of {len(request.text)} chars exceeds the {self.MAX_CHARS} char limit"
            )

        translator = GoogleTranslator(
            source=self._normalize_lang(request.source_lang),
            target=self._normalize_lang(request.target_lang)
        )
        try:
            translation = translator.translate(request.text)
        except TooManyRequests:
            raise RateLimitError("free")
        except Exception as e:
            raise TranslationFailure("free", str(e), original_error=e)

        if not translation:
            raise TranslationFailure("free", "empty translation returned")

        return TranslationResponse(
            translations=[translation],
            backend="free",
            model=self.model,
            latency=time.time() - start_time
        )

    def is_available(self) -> bool:
        """Free backend needs no key."""
        return True
