"""Writing translated book containers."""

from .epub_writer import EpubWriter

__all__ = ['EpubWriter']
