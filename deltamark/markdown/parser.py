"""Markdown → Document parser.

WHY: Stored markdown has to become an operation list again when an editor
loads it. User-authored content must never become unloadable because of a
syntax slip, so the parser is lenient: anything it does not recognize is
plain text.

HOW: The input is split on "\\n". Each line is matched against the block
prefixes in priority order, the remainder is inline-parsed, and a newline
op carrying the line's block format is appended. Inline parsing pulls out
non-greedy ``**bold**`` spans; every resulting segment is then scanned for
known emoji glyphs, which become embed ops.

RULES:
- Priority: "> " blockquote, then "N. " ordered item, then "- " bullet, then plain
- The ordered-item numeral is discarded; emitting renumbers from 1
- A single trailing "\\n" does not produce an extra empty line
- Only bold is recognized inline. "*italic*" and "<u>underline</u>" stay
  literal text, so italic/underline documents do not round-trip
- No fenced blocks: every "\\n" is a line break
- Ordered-item numerals are ASCII digits only
- Block prefixes are not escaped, so a plain line that starts with "- ",
  "> " or "N. " reads back as a list item or quote
- A bold run ending in "*" emits as "**a***", which reads back as bold "a"
  followed by a plain "*"
- Embed candidates are confirmed with resolve_value() before use
- parse() never raises on malformed markdown
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from deltamark.core.document import (
    BlockFormat,
    Document,
    EmbedOp,
    InlineStyle,
    Operation,
    TextOp,
    newline,
)
from deltamark.core.registry import EmbedRegistry, get_registry
from deltamark.errors import UnrecognizedEmbedValue

_ORDERED_RE = re.compile(r"^(\d+)\.\s+(.*)$", re.ASCII)
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")

_BOLD = frozenset({InlineStyle.BOLD})


class MarkdownParser:
    """Rebuilds a Document from markdown written by MarkdownEmitter.

    Args:
        registry: Registry used to recognize emoji glyphs.
                  Defaults to the shared process-wide registry.
    """

    def __init__(self, registry: Optional[EmbedRegistry] = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> EmbedRegistry:
        if self._registry is None:
            self._registry = get_registry()
        return self._registry

    def parse(self, markdown: str) -> Document:
        if not markdown:
            return Document()

        lines = markdown.split("\n")
        if lines[-1] == "":
            lines.pop()

        ops: List[Operation] = []
        for line in lines:
            block, remainder = self._split_block(line)
            ops.extend(self._parse_inline(remainder))
            ops.append(newline(block))
        return Document(ops)

    @staticmethod
    def _split_block(line: str) -> Tuple[Optional[BlockFormat], str]:
        if line.startswith("> "):
            return BlockFormat.BLOCKQUOTE, line[2:]
        ordered = _ORDERED_RE.match(line)
        if ordered:
            return BlockFormat.ORDERED_LIST, ordered.group(2)
        if line.startswith("- "):
            return BlockFormat.BULLET_LIST, line[2:]
        return None, line

    def _parse_inline(self, line: str) -> List[Operation]:
        ops: List[Operation] = []
        last = 0
        for match in _BOLD_RE.finditer(line):
            ops.extend(self._split_embeds(line[last:match.start()], frozenset()))
            ops.extend(self._split_embeds(match.group(1), _BOLD))
            last = match.end()
        ops.extend(self._split_embeds(line[last:], frozenset()))
        return ops

    def _split_embeds(self, segment: str, attributes: frozenset) -> List[Operation]:
        """Cut a text segment into text runs and emoji embeds."""
        ops: List[Operation] = []
        run_start = 0
        index = 0
        while index < len(segment):
            glyph = self.registry.match_at(segment, index)
            if glyph is None:
                index += 1
                continue
            try:
                key = self.registry.resolve_value(glyph)
            except UnrecognizedEmbedValue:
                # Not confirmed by the registry; keep it as text.
                index += 1
                continue
            if index > run_start:
                ops.append(TextOp(segment[run_start:index], attributes))
            ops.append(EmbedOp(key))
            index += len(glyph)
            run_start = index
        if run_start < len(segment):
            ops.append(TextOp(segment[run_start:], attributes))
        return ops


def parse(markdown: str, registry: Optional[EmbedRegistry] = None) -> Document:
    """Convert *markdown* to a Document with a one-off parser."""
    return MarkdownParser(registry).parse(markdown)
