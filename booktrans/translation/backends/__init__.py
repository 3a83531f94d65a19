"""Translation backend implementations."""

from typing import Dict, Optional, Type

from booktrans.core.exceptions import ConfigurationError
from ..base import TranslationBackend
from .free_backend import FreeBackend
from .google_web_backend import GoogleWebBackend
from .local_backend import LocalBackend

BACKENDS: Dict[str, Type[TranslationBackend]] = {
    "free": FreeBackend,
    "google": GoogleWebBackend,
    "local": LocalBackend,
}


def create_backend(name: str, api_key: Optional[str] = None) -> TranslationBackend:
    """Instantiate a backend by its registry name."""
    backend_cls = BACKENDS.get(name.lower().strip())
    if backend_cls is None:
        raise ConfigurationError(
            f"Unknown translation backend: {name}",
            config_key="backend",
            invalid_value=name,
            valid_values=sorted(BACKENDS)
        )
    return backend_cls(api_key=api_key)


__all__ = [
    'BACKENDS',
    'create_backend',
    'FreeBackend',
    'GoogleWebBackend',
    'LocalBackend'
]
