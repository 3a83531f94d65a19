"""Greedy packing of text units into size-bounded batches."""

from __future__ import annotations
from typing import List, Sequence
import logging

from booktrans.core.models import Batch, TextUnit

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = " ||| "
DEFAULT_BATCH_SIZE_LIMIT = 1800


class Batcher:
    """
    Groups ordered units into batches joined by a delimiter.

    A unit is appended to the current batch unless the batch is non-empty and
    its text plus the unit plus one delimiter would exceed the limit. A unit
    longer than the limit ends up alone in its own batch.
    """

    def __init__(self, limit: int = DEFAULT_BATCH_SIZE_LIMIT, delimiter: str = DEFAULT_DELIMITER):
        if limit <= 0:
            raise ValueError("Batch size limit must be positive")
        if not delimiter.strip():
            raise ValueError("Delimiter must contain a non-whitespace token")
        self.limit = limit
        self.delimiter = delimiter

    def build(self, units: Sequence[TextUnit]) -> List[Batch]:
        batches: List[Batch] = []
        current: List[TextUnit] = []
        current_len = 0

        for unit in units:
            projected = current_len + len(unit.text) + len(self.delimiter)
            if current and projected > self.limit:
                batches.append(Batch(units=current, limit=self.limit, delimiter=self.delimiter))
                current = []
                current_len = 0

            if current:
                current_len += len(self.delimiter)
            current.append(unit)
            current_len += len(unit.text)

        if current:
            batches.append(Batch(units=current, limit=self.limit, delimiter=self.delimiter))

        oversized = sum(1 for batch in batches if batch.is_oversized)
        if oversized:
            logger.debug(f"{oversized} unit(s) exceed the batch limit of {self.limit} and go alone")
        return batches
