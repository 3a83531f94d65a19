"""
Post-translation correction table.

Corrections are literal substring replacements applied one after another in
table order: each rule sees the output of the previous one. Order is part of
the contract, so overlapping rules (a short pattern sharing a prefix with a
longer one) behave exactly as the table is written.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Tuple, Union
import logging

import yaml

from booktrans.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Rule = Tuple[str, str]


@dataclass(frozen=True)
class CorrectionTable:
    """Ordered, immutable (pattern, replacement) rules."""
    rules: Tuple[Rule, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[str]]) -> "CorrectionTable":
        rules: List[Rule] = []
        for pair in pairs:
            if len(pair) != 2:
                raise ConfigurationError(
                    f"Correction rule must be a [pattern, replacement] pair, got {pair!r}",
                    config_key="corrections"
                )
            pattern, replacement = str(pair[0]), str(pair[1])
            if not pattern:
                raise ConfigurationError("Correction pattern must not be empty", config_key="corrections")
            rules.append((pattern, replacement))
        return cls(tuple(rules))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "CorrectionTable":
        return cls.from_pairs(mapping.items())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CorrectionTable":
        """
        Load a table from YAML.

        Accepts either a list of ``[pattern, replacement]`` pairs or a
        mapping (YAML mappings keep their file order), optionally nested
        under a top-level ``corrections`` key.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Corrections file not found: {path}", config_key="corrections_path")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []

        if isinstance(data, Mapping) and "corrections" in data:
            data = data["corrections"] or []

        if isinstance(data, Mapping):
            table = cls.from_mapping(data)
        elif isinstance(data, list):
            table = cls.from_pairs(data)
        else:
            raise ConfigurationError(
                f"Corrections file must hold a list or mapping: {path}",
                config_key="corrections_path"
            )

        for pattern, replacement in table.hazards():
            logger.warning(
                f"Correction '{pattern}' -> '{replacement}' is not idempotent: "
                "its pattern occurs inside a replacement"
            )
        logger.info(f"Loaded {len(table)} correction rules from {path}")
        return table

    def apply(self, text: str) -> str:
        result = text
        for pattern, replacement in self.rules:
            result = result.replace(pattern, replacement)
        return result

    def hazards(self) -> List[Rule]:
        """Rules whose pattern appears in some replacement (re-applying changes text)."""
        replacements = [replacement for _, replacement in self.rules]
        return [
            (pattern, replacement)
            for pattern, replacement in self.rules
            if any(pattern in r for r in replacements)
        ]

    def __len__(self) -> int:
        return len(self.rules)

    def __bool__(self) -> bool:
        return bool(self.rules)
