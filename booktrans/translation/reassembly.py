"""
Splitting translated batches back onto their text units.

A batch goes to the service as one delimiter-joined string. If the answer
splits into exactly one piece per unit the pieces are assigned in order;
otherwise the batch translation is thrown away and every unit is translated
on its own, so each unit always ends up translated (or kept as original).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional
import logging
import re

from booktrans.core.exceptions import ReassemblyMismatch
from booktrans.core.models import Batch, TextUnit
from booktrans.translation.batching import DEFAULT_DELIMITER
from booktrans.translation.corrections import CorrectionTable
from booktrans.translation.retrying import RetryingTranslator

logger = logging.getLogger(__name__)

UnitCallback = Callable[[TextUnit], None]


@dataclass
class BatchResult:
    """Final per-unit strings of one batch."""
    texts: List[str]
    used_fallback: bool = False


def restore_whitespace(original: str, translated: str) -> str:
    """Put back leading/trailing whitespace that the round trip dropped."""
    stripped = original.lstrip()
    leading = original[:len(original) - len(stripped)]
    trailing = stripped[len(stripped.rstrip()):]

    if leading and not translated[:1].isspace():
        translated = leading + translated
    if trailing and not translated[-1:].isspace():
        translated = translated + trailing
    return translated


class BatchReassembler:
    """Translates a batch and writes the results onto its units."""

    def __init__(
        self,
        translator: RetryingTranslator,
        corrections: Optional[CorrectionTable] = None,
        delimiter: str = DEFAULT_DELIMITER,
        on_unit: Optional[UnitCallback] = None
    ):
        token = delimiter.strip()
        if not token:
            raise ValueError("Delimiter must contain a non-whitespace token")
        self.translator = translator
        self.corrections = corrections or CorrectionTable()
        self.delimiter = delimiter
        self.on_unit = on_unit
        # The token is matched literally; services often add or drop the
        # spaces around it, so those are absorbed too
        self._split_re = re.compile(r"\s*" + re.escape(token) + r"\s*")

    def split(self, translated: str, expected: int) -> List[str]:
        """
        Split a translated batch on the delimiter token.

        Raises:
            ReassemblyMismatch: If the piece count differs from ``expected``
        """
        parts = self._split_re.split(translated)
        if len(parts) != expected:
            raise ReassemblyMismatch(expected=expected, actual=len(parts))
        return parts

    def process(self, batch: Batch) -> BatchResult:
        if not batch.units:
            return BatchResult(texts=[])

        translated = self.translator.translate(batch.text)
        try:
            parts = self.split(translated, len(batch.units))
        except ReassemblyMismatch as e:
            logger.info(f"{e.message}; translating {len(batch.units)} units one by one")
            return BatchResult(texts=self._fallback(batch.units), used_fallback=True)

        texts = []
        for unit, part in zip(batch.units, parts):
            texts.append(self._finish(unit, part))
        return BatchResult(texts=texts)

    def _fallback(self, units: List[TextUnit]) -> List[str]:
        texts = []
        for unit in units:
            single = self.translator.translate(unit.text)
            texts.append(self._finish(unit, single))
        return texts

    def _finish(self, unit: TextUnit, translated: str) -> str:
        final = restore_whitespace(unit.text, self.corrections.apply(translated))
        unit.assign(final)
        if self.on_unit is not None:
            self.on_unit(unit)
        return final
