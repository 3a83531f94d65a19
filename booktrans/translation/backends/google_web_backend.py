"""Google Translate web endpoint backend (the public ``client=gtx`` API, no key)."""

import os
import time
from typing import Optional

import requests

from booktrans.core.exceptions import RateLimitError, TranslationFailure
from ..base import TranslationBackend, TranslationRequest, TranslationResponse

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class GoogleWebBackend(TranslationBackend):
    """Plain HTTP client for translate.googleapis.com."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gtx"):
        super().__init__(api_key, model)
        self.endpoint = os.getenv(
            "BOOKTRANS_GOOGLE_URL", "https://translate.googleapis.com/translate_a/single"
        )
        # (connect, read) seconds; generous for slow links and VPNs
        self.timeout = (20, 40)

    def translate_sync(self, request: TranslationRequest) -> TranslationResponse:
        start = time.time()
        params = {
            "client": "gtx",
            "sl": request.source_lang,
            "tl": request.target_lang,
            "dt": "t",
            "q": request.text,
        }

        try:
            resp = requests.get(
                self.endpoint,
                params=params,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TranslationFailure("google", f"request failed: {e}", original_error=e)

        if resp.status_code == 429:
            raise RateLimitError("google")
        if resp.status_code != 200:
            raise TranslationFailure("google", f"HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            translation = self.parse_response(resp.json())
        except ValueError as e:
            raise TranslationFailure("google", f"malformed response: {e}", original_error=e)

        return TranslationResponse(
            translations=[translation],
            backend="google",
            model=self.model,
            latency=time.time() - start,
            status_code=resp.status_code
        )

    @staticmethod
    def parse_response(payload) -> str:
        """
        Join the sentence fragments of a gtx response.

        The payload looks like ``[[["Привет", "Hello", ...], ...], ...]``:
        the first element lists translated sentences, each starting with
        its translation.
        """
        try:
            sentences = payload[0]
            pieces = [sentence[0] for sentence in sentences if sentence and sentence[0]]
        except (TypeError, IndexError, KeyError) as e:
            raise ValueError(f"unexpected payload shape ({e})")
        if not pieces:
            raise ValueError("no translated sentences")
        return "".join(pieces)

    def is_available(self) -> bool:
        return True
