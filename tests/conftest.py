"""Shared test fixtures for the deltamark test suite.

WHY: Most tests need an embed registry with a handful of well-known
emoji, including multi-codepoint ZWJ and skin-tone sequences. A small
hand-built registry keeps expectations independent of the installed
``emoji`` dataset version.

HOW: Pytest fixtures provide the small registry, a matching emitter and
parser, and a sample document covering every operation kind.

RULES:
- Glyphs are written as escapes so the codepoints are visible in review
- The shared dataset registry is only used by tests that say so explicitly
"""

import pytest

from deltamark.core.document import (
    BlockFormat,
    Document,
    InlineStyle,
    embed,
    newline,
    text,
)
from deltamark.core.registry import EmbedRegistry, EmbedValue, variant_key
from deltamark.markdown.emitter import MarkdownEmitter
from deltamark.markdown.parser import MarkdownParser

GRINNING = "\U0001F600"
SPIRAL_EYES = "\U0001F635\u200d\U0001F4AB"          # 3 codepoints, ZWJ
THUMBS_UP = "\U0001F44D"
THUMBS_UP_MEDIUM = "\U0001F44D\U0001F3FD"           # skin-tone modifier
FAMILY = "\U0001F468\u200d\U0001F469\u200d\U0001F467"  # 5 codepoints
RED_HEART = "\u2764\ufe0f"                           # variation selector

SAMPLE_EMOJI = {
    GRINNING: "grinning_face",
    SPIRAL_EYES: "face_with_spiral_eyes",
    THUMBS_UP: "thumbs_up",
    THUMBS_UP_MEDIUM: "thumbs_up_medium_skin_tone",
    FAMILY: "family_man_woman_girl",
    RED_HEART: "red_heart",
}


@pytest.fixture
def registry():
    """A small registry with six emoji, keyed by their codepoints."""
    return EmbedRegistry(
        EmbedValue(key=variant_key(glyph), value=glyph, name=name)
        for glyph, name in SAMPLE_EMOJI.items()
    )


@pytest.fixture
def emitter(registry):
    return MarkdownEmitter(registry)


@pytest.fixture
def parser(registry):
    return MarkdownParser(registry)


@pytest.fixture
def sample_document():
    """Plain, bold and embed content across a paragraph, a list and a quote."""
    return Document([
        text("Hello "),
        text("world", InlineStyle.BOLD),
        text(" "),
        embed("1F635-200D-1F4AB"),
        newline(),
        text("first"),
        newline(BlockFormat.ORDERED_LIST),
        text("second"),
        newline(BlockFormat.ORDERED_LIST),
        text("quoted"),
        newline(BlockFormat.BLOCKQUOTE),
    ])
