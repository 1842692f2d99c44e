"""deltamark: rich-text operation documents to markdown and back.

WHY: An interactive editor keeps its content as an ordered list of
text/format/embed operations, but storage and previews want a portable
markdown string. Emoji embeds make this fragile: a single glyph may be a
multi-codepoint ZWJ sequence that lossy channels split or mangle.

HOW: Four layers: an emoji registry mapping ASCII variant keys to glyphs,
the operation Document model, a markdown emitter/parser pair, and an
editor adapter that projects every committed edit to markdown.

RULES:
- Only the ASCII variant key crosses non-Unicode-safe boundaries
- The emitter and parser never re-derive the key/glyph mapping themselves
- Parsing is lenient; emitting fails fast on malformed documents
"""

__version__ = "0.1.0"
