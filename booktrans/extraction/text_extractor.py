"""
Text extraction from book parts.

Parses a part's markup with BeautifulSoup and collects, in document order,
every plain text node that has something to translate. The parsed tree is
kept alive alongside the units so translations can be written back into it
and the whole part serialized again.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List
import logging

from bs4 import BeautifulSoup, NavigableString

from booktrans.core.exceptions import ParseError
from booktrans.core.models import Part, TextUnit

logger = logging.getLogger(__name__)

# Elements whose text is code or styling, never prose
SKIP_PARENTS = {"script", "style"}


@dataclass
class ExtractedPart:
    """A parsed part: its tree and the text units that live in it."""
    part: Part
    tree: BeautifulSoup
    units: List[TextUnit]

    def serialize(self) -> bytes:
        """Encode the (possibly mutated) tree in the part's original encoding."""
        return self.tree.encode(self.part.encoding, formatter="minimal")


class TextExtractor:
    """Walks a part's markup tree and returns its translatable text units."""

    def parser_for(self, part: Part) -> str:
        # XML parsing keeps tag case, namespaces and self-closing tags intact
        return "lxml-xml" if part.is_xml else "html.parser"

    def extract(self, part: Part) -> ExtractedPart:
        """
        Parse a part and collect its text units.

        Args:
            part: Part to parse

        Returns:
            ExtractedPart holding the live tree and ordered units

        Raises:
            ParseError: If the content cannot be decoded or parsed
        """
        try:
            markup = part.content.decode(part.encoding).lstrip("\ufeff")
        except (UnicodeDecodeError, LookupError) as e:
            raise ParseError(part.part_id, f"cannot decode as {part.encoding}", e)

        try:
            tree = BeautifulSoup(markup, self.parser_for(part))
        except Exception as e:
            raise ParseError(part.part_id, "markup rejected by parser", e)

        units: List[TextUnit] = []
        for node in tree.descendants:
            # Exact type check: comments, CDATA, doctypes and processing
            # instructions are NavigableString subclasses
            if type(node) is not NavigableString:
                continue
            if node.parent is not None and node.parent.name in SKIP_PARENTS:
                continue
            text = str(node)
            if not text.strip():
                continue
            units.append(TextUnit(node=node, text=text, position=len(units)))

        logger.debug(f"Extracted {len(units)} text units from {part.part_id}")
        return ExtractedPart(part=part, tree=tree, units=units)

    def count_units(self, part: Part) -> int:
        """Number of units in a part; unparseable parts count as zero."""
        try:
            return len(self.extract(part).units)
        except ParseError as e:
            logger.debug(f"Not counting units of {part.part_id}: {e.message}")
            return 0
