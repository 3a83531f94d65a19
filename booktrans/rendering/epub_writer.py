"""
EPUB writing.

Pushes committed part contents back into the book items and writes the
container next to its destination first, renaming it into place only once
the whole file has been written.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union
import logging
import os
import tempfile

from ebooklib import epub

from booktrans.core.exceptions import ContainerError
from booktrans.core.models import Document
from booktrans.extraction.epub_reader import EpubHandle

logger = logging.getLogger(__name__)


class EpubWriter:
    """Writes committed Documents back to EPUB files."""

    def write(self, document: Document, output_path: Union[str, Path]) -> Path:
        """
        Write a committed document.

        Args:
            document: Document read by EpubReader and committed
            output_path: Destination .epub path

        Returns:
            The written path

        Raises:
            ContainerError: If the document is not committed or writing fails
        """
        output_path = Path(output_path)
        if not document.committed:
            raise ContainerError(str(output_path), "Refusing to write an uncommitted document")

        handle = document.container
        if not isinstance(handle, EpubHandle):
            raise ContainerError(str(output_path), "Document was not read from an EPUB")

        updated = 0
        for part in document.parts:
            item = handle.items.get(part.part_id)
            if item is None:
                continue
            if item.content != part.content:
                item.set_content(part.content)
                updated += 1

        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(suffix=".epub.tmp", dir=str(output_path.parent))
        os.close(fd)
        try:
            epub.write_epub(tmp_name, handle.book, {})
            os.replace(tmp_name, output_path)
        except Exception as e:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise ContainerError(str(output_path), "Cannot write EPUB container", e)

        logger.info(f"Wrote {output_path} ({updated} parts updated)")
        return output_path
