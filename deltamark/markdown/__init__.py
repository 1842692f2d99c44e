"""Markdown codec: the emitter and parser pair.

WHY: Storage and previews consume markdown while the editor works on an
operation Document. This package is the only place the two meet.

HOW: emitter.py writes a Document as markdown, parser.py reads markdown
back into a Document. Both take an optional EmbedRegistry and fall back to
the shared one.

RULES:
- The emitter accepts more inline formatting than the parser reads back
  (bold only); the asymmetry is deliberate and pinned by tests
- Neither module re-derives the emoji key/glyph mapping
"""

from deltamark.markdown.emitter import MarkdownEmitter, emit
from deltamark.markdown.parser import MarkdownParser, parse

__all__ = ["MarkdownEmitter", "MarkdownParser", "emit", "parse"]
