"""
Core data models for booktrans.

A Document is an ordered collection of Parts (one per file inside the book
container). Parts are translated independently by worker tasks which hand
their results over through a write-once TranslationCache; the Document itself
is only touched by the single-threaded commit step.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import List, Dict, Optional, Any, Iterator, Tuple

from bs4 import NavigableString

HTML_MARKERS = ("html",)


@dataclass
class Part:
    """One file of the container (chapter, page, nav document, image...)."""
    part_id: str
    file_name: str
    media_type: str
    content: bytes
    encoding: str = "utf-8"

    @property
    def is_eligible(self) -> bool:
        """Only markup parts carry translatable text nodes."""
        media_type = (self.media_type or "").lower()
        return any(marker in media_type for marker in HTML_MARKERS)

    @property
    def is_xml(self) -> bool:
        media_type = (self.media_type or "").lower()
        return "xml" in media_type


@dataclass
class TextUnit:
    """
    A single non-blank text node inside a part's parsed tree.

    The unit keeps a live reference to the node so that the translation can
    be written straight back into the tree that will later be serialized.
    """
    node: Any
    text: str
    position: int
    translated_text: Optional[str] = None

    def assign(self, text: str) -> None:
        """Replace the node's text in the owning tree."""
        new_node = NavigableString(text)
        self.node.replace_with(new_node)
        self.node = new_node
        self.translated_text = text


@dataclass
class Batch:
    """Ordered group of units translated with a single service call."""
    units: List[TextUnit]
    limit: int
    delimiter: str

    @property
    def text(self) -> str:
        return self.delimiter.join(unit.text for unit in self.units)

    @property
    def is_oversized(self) -> bool:
        return len(self.units) == 1 and len(self.units[0].text) > self.limit

    def __len__(self) -> int:
        return len(self.units)


class PartStatus(Enum):
    """Final state of a part task."""
    TRANSLATED = "translated"
    PARSE_ERROR = "parse_error"
    FAILED = "failed"


@dataclass
class PartOutcome:
    """What a single part task did."""
    part_id: str
    status: PartStatus
    units: int = 0
    batches: int = 0
    fallbacks: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PartStatus.TRANSLATED


class TranslationCache:
    """
    Write-once store of serialized part results keyed by part ID.

    Workers write distinct keys concurrently. Entries can only be read after
    ``seal()``, which the scheduler calls once every task has joined.
    """

    def __init__(self):
        self._entries: Dict[str, bytes] = {}
        self._lock = Lock()
        self._sealed = False

    def put(self, part_id: str, data: bytes) -> None:
        with self._lock:
            if self._sealed:
                raise RuntimeError("Translation cache is sealed")
            if part_id in self._entries:
                raise KeyError(f"Part '{part_id}' already has a cached translation")
            self._entries[part_id] = data

    def seal(self) -> None:
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def items(self) -> Iterator[Tuple[str, bytes]]:
        if not self._sealed:
            raise RuntimeError("Translation cache must be sealed before it is read")
        return iter(list(self._entries.items()))

    def __contains__(self, part_id: str) -> bool:
        with self._lock:
            return part_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass
class Document:
    """Ordered parts of a book plus the container handle they came from."""
    source_path: str
    parts: List[Part] = field(default_factory=list)
    container: Any = None
    committed: bool = False

    @property
    def eligible_parts(self) -> List[Part]:
        return [part for part in self.parts if part.is_eligible]

    def get_part(self, part_id: str) -> Optional[Part]:
        for part in self.parts:
            if part.part_id == part_id:
                return part
        return None

    def commit(self, cache: TranslationCache) -> int:
        """
        Replace part contents with their cached translations.

        Must be called from a single thread after every task has joined.

        Returns:
            Number of parts updated
        """
        if self.committed:
            raise RuntimeError("Document has already been committed")

        by_id = {part.part_id: part for part in self.parts}
        updated = 0
        for part_id, data in cache.items():
            part = by_id.get(part_id)
            if part is None:
                raise KeyError(f"Cached translation for unknown part '{part_id}'")
            part.content = data
            updated += 1

        self.committed = True
        return updated


@dataclass
class TranslationResult:
    """Summary of a translation job."""
    input_path: str
    output_path: Optional[str]
    committed: bool
    parts_total: int
    parts_eligible: int
    units_total: int
    elapsed: float = 0.0
    outcomes: List[PartOutcome] = field(default_factory=list)
    translator_stats: Dict[str, int] = field(default_factory=dict)

    @property
    def parts_translated(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def parts_skipped(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)

    @property
    def batches(self) -> int:
        return sum(outcome.batches for outcome in self.outcomes)

    @property
    def fallbacks(self) -> int:
        return sum(outcome.fallbacks for outcome in self.outcomes)
