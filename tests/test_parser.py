"""Unit tests for the markdown parser.

WHY: The parser rebuilds what the editor shows on load. It must never
fail on user content, must recognize emoji as embeds, and must keep its
documented limits (bold-only inline parsing, renumbered lists) stable.

HOW: Tests cover each block rule in priority order, bold extraction,
lenient handling of broken markup, embed recognition, and line splitting
edge cases.
"""

from deltamark.core.document import (
    BlockFormat,
    Document,
    EmbedOp,
    InlineStyle,
    TextOp,
    embed,
    newline,
    text,
)
from deltamark.markdown.parser import parse

from conftest import GRINNING, SPIRAL_EYES, THUMBS_UP, THUMBS_UP_MEDIUM


class TestBlockRules:

    def test_blockquote(self, parser):
        assert parser.parse("> hello\n") == Document([
            text("hello"), newline(BlockFormat.BLOCKQUOTE),
        ])

    def test_ordered_item_numeral_discarded(self, parser):
        doc = parser.parse("5. foo\n6. bar\n")
        assert doc == Document([
            text("foo"), newline(BlockFormat.ORDERED_LIST),
            text("bar"), newline(BlockFormat.ORDERED_LIST),
        ])

    def test_ordered_item_allows_extra_spaces(self, parser):
        assert parser.parse("12.   twelve") == Document([
            text("twelve"), newline(BlockFormat.ORDERED_LIST),
        ])

    def test_bullet(self, parser):
        assert parser.parse("- item") == Document([
            text("item"), newline(BlockFormat.BULLET_LIST),
        ])

    def test_plain_line(self, parser):
        assert parser.parse("just text") == Document([text("just text"), newline()])

    def test_blockquote_wins_over_list_content(self, parser):
        assert parser.parse("> - x") == Document([
            text("- x"), newline(BlockFormat.BLOCKQUOTE),
        ])

    def test_ordered_wins_over_bullet_content(self, parser):
        assert parser.parse("1. - x") == Document([
            text("- x"), newline(BlockFormat.ORDERED_LIST),
        ])

    def test_prefix_without_space_is_plain(self, parser):
        assert parser.parse(">quote") == Document([text(">quote"), newline()])
        assert parser.parse("-dash") == Document([text("-dash"), newline()])
        assert parser.parse("3.no") == Document([text("3.no"), newline()])

    def test_non_ascii_numeral_is_plain(self, parser):
        # Arabic-Indic and fullwidth digit five
        assert parser.parse("\u0665. foo") == Document([text("\u0665. foo"), newline()])
        assert parser.parse("\uff15. foo") == Document([text("\uff15. foo"), newline()])

    def test_empty_list_item(self, parser):
        assert parser.parse("- ") == Document([newline(BlockFormat.BULLET_LIST)])

    def test_block_remainder_is_inline_parsed(self, parser):
        assert parser.parse("- **b** c") == Document([
            text("b", InlineStyle.BOLD), text(" c"), newline(BlockFormat.BULLET_LIST),
        ])


class TestLineSplitting:

    def test_empty_input(self, parser):
        assert parser.parse("") == Document()

    def test_single_trailing_newline_ignored(self, parser):
        assert parser.parse("a\n") == parser.parse("a")

    def test_blank_lines_kept(self, parser):
        assert parser.parse("a\n\nb") == Document([
            text("a"), newline(), newline(), text("b"), newline(),
        ])

    def test_only_newline(self, parser):
        assert parser.parse("\n") == Document([newline()])


class TestInlineBold:

    def test_bold_span(self, parser):
        assert parser.parse("a **b** c") == Document([
            text("a "), text("b", InlineStyle.BOLD), text(" c"), newline(),
        ])

    def test_non_greedy(self, parser):
        assert parser.parse("**a** and **b**") == Document([
            text("a", InlineStyle.BOLD), text(" and "), text("b", InlineStyle.BOLD), newline(),
        ])

    def test_unclosed_bold_is_text(self, parser):
        assert parser.parse("**open") == Document([text("**open"), newline()])

    def test_empty_bold_is_text(self, parser):
        assert parser.parse("****") == Document([text("****"), newline()])

    def test_italic_stays_literal(self, parser):
        assert parser.parse("*i*") == Document([text("*i*"), newline()])

    def test_underline_stays_literal(self, parser):
        assert parser.parse("<u>u</u>") == Document([text("<u>u</u>"), newline()])


class TestEmbedRecognition:

    def test_single_emoji(self, parser):
        doc = parser.parse("hi " + GRINNING)
        assert doc == Document([text("hi "), embed("1F600"), newline()])

    def test_zwj_sequence_is_one_embed(self, parser):
        doc = parser.parse(SPIRAL_EYES)
        assert doc.embeds() == [EmbedOp("1F635-200D-1F4AB")]
        assert doc.length == 2  # embed + newline

    def test_longest_match_wins(self, parser):
        doc = parser.parse(THUMBS_UP_MEDIUM + THUMBS_UP)
        assert [op.key for op in doc.embeds()] == ["1F44D-1F3FD", "1F44D"]

    def test_emoji_inside_bold(self, parser):
        doc = parser.parse("**a" + GRINNING + "b**")
        assert doc == Document([
            text("a", InlineStyle.BOLD), embed("1F600"), text("b", InlineStyle.BOLD), newline(),
        ])

    def test_emoji_in_list_item(self, parser):
        doc = parser.parse("1. " + GRINNING)
        assert doc == Document([embed("1F600"), newline(BlockFormat.ORDERED_LIST)])

    def test_unknown_symbol_stays_text(self, parser):
        doc = parser.parse("☃ snow")
        assert doc == Document([text("☃ snow"), newline()])
        assert all(isinstance(op, TextOp) for op in doc)


def test_module_level_parse_uses_given_registry(registry):
    assert parse(GRINNING, registry) == Document([embed("1F600"), newline()])
