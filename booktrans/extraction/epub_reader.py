"""
EPUB reading.

Turns an EPUB file into a Document: one Part per manifest item, carrying the
item's raw bytes, media type and declared encoding. The ebooklib book stays
attached to the Document so the writer can put translated bytes back into
the same items.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Union
import logging
import re

from ebooklib import epub

from booktrans.core.exceptions import ContainerError
from booktrans.core.models import Document, Part

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

_XML_DECLARATION = re.compile(rb'^\s*<\?xml[^>]*encoding\s*=\s*["\']([A-Za-z0-9._-]+)["\']')
_META_CHARSET = re.compile(rb'<meta[^>]+charset\s*=\s*["\']?([A-Za-z0-9._-]+)', re.IGNORECASE)


def detect_encoding(content: bytes) -> str:
    """Encoding declared in the XML prolog or a meta tag; UTF-8 otherwise."""
    head = content[:1024]
    if head.startswith(b"\xef\xbb\xbf"):
        return DEFAULT_ENCODING
    for pattern in (_XML_DECLARATION, _META_CHARSET):
        match = pattern.search(head)
        if match:
            return match.group(1).decode("ascii").lower()
    return DEFAULT_ENCODING


@dataclass
class EpubHandle:
    """The parsed book and its items by part ID."""
    book: epub.EpubBook
    items: Dict[str, epub.EpubItem] = field(default_factory=dict)


class EpubReader:
    """Reads EPUB containers into Documents."""

    def read(self, path: Union[str, Path]) -> Document:
        """
        Read an EPUB file.

        Raises:
            ContainerError: If the file is missing or is not a readable EPUB
        """
        path = Path(path)
        if not path.is_file():
            raise ContainerError(str(path), "Input file not found")

        try:
            # Toc entries built from the NCX keep the ids write_epub needs
            # to regenerate it; entries built from the nav document do not
            book = epub.read_epub(str(path), options={"ignore_ncx": False})
        except Exception as e:
            raise ContainerError(str(path), "Cannot read EPUB container", e)

        handle = EpubHandle(book=book)
        parts = []
        for item in book.get_items():
            part_id = item.get_id() or item.get_name()
            if part_id in handle.items:
                logger.warning(f"Duplicate manifest id {part_id}; using file name instead")
                part_id = item.get_name()
            content = item.content or b""
            if isinstance(content, str):
                content = content.encode(DEFAULT_ENCODING)
            handle.items[part_id] = item
            parts.append(Part(
                part_id=part_id,
                file_name=item.get_name(),
                media_type=item.media_type or "",
                content=content,
                encoding=detect_encoding(content)
            ))

        document = Document(source_path=str(path), parts=parts, container=handle)
        logger.info(
            f"Read {path.name}: {len(parts)} parts, {len(document.eligible_parts)} with markup"
        )
        return document
