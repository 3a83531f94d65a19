"""Offline backend: word-rule substitution for dry runs, otherwise an echo."""

import time
from typing import Dict, Optional, Tuple

from ..base import TranslationBackend, TranslationRequest, TranslationResponse


# (source, target) -> lowercase phrase rules, applied in order
WORD_RULES: Dict[Tuple[str, str], Dict[str, str]] = {
    ("en", "ru"): {
        "hello": "привет",
        "world": "мир",
        "bye": "пока",
        "chapter": "глава",
        "book": "книга",
        "the end": "конец",
    },
}


class LocalBackend(TranslationBackend):
    """
    Needs no network and always answers.

    Useful for checking that a book survives the round trip unchanged apart
    from its text: known phrases are swapped (keeping a leading capital),
    everything else comes back as it was sent.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "word-rules"):
        super().__init__(api_key, model)

    def translate_sync(self, request: TranslationRequest) -> TranslationResponse:
        start = time.time()
        rules = self.rules_for(request.source_lang, request.target_lang)
        text = request.text or ""
        for phrase, replacement in rules.items():
            text = text.replace(phrase, replacement)
            text = text.replace(phrase.capitalize(), replacement.capitalize())
        return TranslationResponse(
            translations=[text],
            backend="local",
            model=self.model,
            latency=time.time() - start,
            metadata={"rules": len(rules)},
        )

    @staticmethod
    def rules_for(source_lang: str, target_lang: str) -> Dict[str, str]:
        key = (source_lang.lower()[:2], target_lang.lower()[:2])
        return WORD_RULES.get(key, {})

    def is_available(self) -> bool:
        return True
