"""Reading book containers and extracting text units."""

from .epub_reader import EpubReader, detect_encoding
from .text_extractor import TextExtractor, ExtractedPart

__all__ = ['EpubReader', 'detect_encoding', 'TextExtractor', 'ExtractedPart']
