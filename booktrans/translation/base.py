"""
Base translation backend interface.
All translation services must inherit from TranslationBackend.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional
from dataclasses import dataclass, field


@dataclass
class TranslationRequest:
    """Request for translation."""
    text: str
    source_lang: str
    target_lang: str


@dataclass
class TranslationResponse:
    """Response from translation backend."""
    translations: List[str]
    backend: str
    model: str
    latency: float = 0.0
    status_code: Optional[int] = None
    metadata: Dict = field(default_factory=dict)

    @property
    def text(self) -> Optional[str]:
        """First translation, or None if the service returned nothing."""
        if not self.translations:
            return None
        return self.translations[0]


class TranslationBackend(ABC):
    """Abstract base class for translation backends."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.name = self.__class__.__name__

    @abstractmethod
    def translate_sync(self, request: TranslationRequest) -> TranslationResponse:
        """
        Translate a single string.

        Args:
            request: Translation request with text and languages

        Returns:
            TranslationResponse with the translated text

        Raises:
            RateLimitError: If the service throttled the call (HTTP 429)
            TranslationFailure: On any other network, HTTP or payload failure
        """
        pass

    def is_available(self) -> bool:
        """Check if backend is available and configured."""
        return self.api_key is not None

    def get_info(self) -> Dict:
        """Get backend information."""
        return {
            "name": self.name,
            "model": self.model,
            "available": self.is_available()
        }
