"""Document → markdown emitter.

WHY: The editor's operation list is not something storage or previews can
consume. Markdown is portable and human-readable, so every committed edit
is projected to it.

HOW: One left-to-right pass over the document's lines. At the first
content op of a line the newline ending that line is consulted for a
block format and the matching prefix is written. Text runs get inline
markers in a fixed nesting order; embeds are written as their glyph,
looked up through the registry. The result is stripped.

RULES:
- Ordered list → "N. " (N restarts at 1 for every contiguous run)
- Bullet list → "- ", blockquote → "> "
- Prefixes are only written for lines with content
- Nesting: bold outermost ("**"), then italic ("*"), then underline ("<u>")
- Embeds emit the glyph from resolve_key(), never the raw key
- An embed whose glyph merges with what follows it into a longer known
  glyph raises MalformedDocument, since it would read back as one embed
- Malformed documents raise MalformedDocument before anything is emitted
- Leading and trailing whitespace of the whole result is stripped
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from deltamark.core.document import (
    BlockFormat,
    Document,
    EmbedOp,
    InlineStyle,
    Operation,
)
from deltamark.core.registry import EmbedRegistry, get_registry, variant_key
from deltamark.errors import MalformedDocument

_BLOCK_PREFIXES = {
    BlockFormat.BULLET_LIST: "- ",
    BlockFormat.BLOCKQUOTE: "> ",
}

# Outermost first; wrapping happens innermost first.
_INLINE_MARKERS = (
    (InlineStyle.BOLD, "**", "**"),
    (InlineStyle.ITALIC, "*", "*"),
    (InlineStyle.UNDERLINE, "<u>", "</u>"),
)


def _wrap_inline(content: str, attributes: frozenset) -> str:
    for style, opener, closer in reversed(_INLINE_MARKERS):
        if style in attributes:
            content = opener + content + closer
    return content


class MarkdownEmitter:
    """Serializes a Document to the markdown subset the parser reads back.

    Args:
        registry: Registry used to turn embed keys back into glyphs.
                  Defaults to the shared process-wide registry.
    """

    def __init__(self, registry: Optional[EmbedRegistry] = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> EmbedRegistry:
        if self._registry is None:
            self._registry = get_registry()
        return self._registry

    def emit(self, document: Document) -> str:
        """Convert *document* to markdown.

        Raises:
            MalformedDocument: If the document breaks an operation invariant.
            UnknownEmbedKey: If an embed key is not in the registry.
        """
        document.validate()

        parts: List[str] = []
        list_counter = 1

        for line in document.lines():
            block = line.block
            if line.content and block is not None:
                if block is BlockFormat.ORDERED_LIST:
                    parts.append("{}. ".format(list_counter))
                    list_counter += 1
                else:
                    parts.append(_BLOCK_PREFIXES[block])

            parts.append(self._render_line(line.content))

            if line.terminator is not None:
                parts.append("\n")
            # Numbering restarts once a contiguous ordered run ends
            if block is not BlockFormat.ORDERED_LIST:
                list_counter = 1

        return "".join(parts).strip()

    def _render_line(self, content: Sequence[Operation]) -> str:
        """Render a line's content ops and check every embed reads back alone."""
        pieces: List[str] = []
        embed_offsets: List[Tuple[int, str, str]] = []
        offset = 0
        for op in content:
            rendered = self._render(op)
            if isinstance(op, EmbedOp):
                embed_offsets.append((offset, op.key, rendered))
            pieces.append(rendered)
            offset += len(rendered)
        line_text = "".join(pieces)

        for offset, key, glyph in embed_offsets:
            match = self.registry.match_at(line_text, offset)
            if match != glyph:
                raise MalformedDocument(
                    "Embed {} followed by {!r} would read back as {}".format(
                        key, line_text[offset + len(glyph):offset + len(match)],
                        variant_key(match),
                    )
                )
        return line_text

    def _render(self, op: Operation) -> str:
        if isinstance(op, EmbedOp):
            return self.registry.resolve_key(op.key).value
        if not op.attributes:
            return op.content
        return _wrap_inline(op.content, op.attributes)


def emit(document: Document, registry: Optional[EmbedRegistry] = None) -> str:
    """Convert *document* to markdown with a one-off emitter."""
    return MarkdownEmitter(registry).emit(document)
