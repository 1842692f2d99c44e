"""Unit tests for the delta JSON adapter.

WHY: Delta JSON is what host editors hand us, and stored embeds come in
two generations (ASCII key, legacy raw glyph). Loading must accept both
and saving must only ever write the key form.

HOW: Tests feed small decoded payloads through document_from_delta and
check the resulting ops, then check document_to_delta output and the
schema and embed failure paths.
"""

import json

import pytest

from deltamark.adapters.delta import (
    document_from_delta,
    document_to_delta,
    embed_from_stored,
    embed_to_stored,
)
from deltamark.core.document import BlockFormat, Document, EmbedOp, embed, newline, text
from deltamark.errors import MalformedDocument, UnknownEmbedKey, UnrecognizedEmbedValue

from conftest import GRINNING, SPIRAL_EYES


class TestEmbedFromStored:

    def test_key_preferred(self, registry):
        op = embed_from_stored({"key": "1F600", "value": SPIRAL_EYES}, registry)
        assert op == EmbedOp("1F600")

    def test_legacy_value_rekeyed(self, registry):
        op = embed_from_stored({"value": SPIRAL_EYES, "source": "picker"}, registry)
        assert op == EmbedOp("1F635-200D-1F4AB", source="picker")

    def test_legacy_value_logs_warning(self, registry, caplog):
        embed_from_stored({"value": GRINNING}, registry)
        assert "legacy format" in caplog.text

    def test_empty_source_becomes_none(self, registry):
        assert embed_from_stored({"key": "1F600", "source": ""}, registry).source is None

    def test_missing_both(self, registry):
        with pytest.raises(MalformedDocument):
            embed_from_stored({"source": "picker"}, registry)

    def test_unknown_key(self, registry):
        with pytest.raises(UnknownEmbedKey):
            embed_from_stored({"key": "FFFFFF"}, registry)

    def test_unknown_legacy_value(self, registry):
        with pytest.raises(UnrecognizedEmbedValue):
            embed_from_stored({"value": "?"}, registry)

    def test_to_stored(self):
        assert embed_to_stored(EmbedOp("1F600")) == {"key": "1F600", "source": ""}
        assert embed_to_stored(EmbedOp("1F600", source="picker"))["source"] == "picker"


class TestDocumentFromDelta:

    def test_multi_line_insert_split(self, registry):
        data = {"ops": [
            {"insert": "one\ntwo\n"},
        ]}
        assert document_from_delta(data, registry) == Document([
            text("one"), newline(), text("two"), newline(),
        ])

    def test_inline_and_block_attributes(self, registry):
        data = {"ops": [
            {"insert": "bold", "attributes": {"bold": True, "italic": False}},
            {"insert": "\n", "attributes": {"list": "bullet", "bold": True}},
            {"insert": "said"},
            {"insert": "\n", "attributes": {"blockquote": True}},
        ]}
        assert document_from_delta(data, registry) == Document([
            text("bold", "bold"), newline(BlockFormat.BULLET_LIST),
            text("said"), newline(BlockFormat.BLOCKQUOTE),
        ])

    def test_embed_insert(self, registry):
        data = {"ops": [
            {"insert": {"emoji": {"key": "1F635-200D-1F4AB", "source": None}}},
            {"insert": "\n"},
        ]}
        assert document_from_delta(data, registry) == Document([
            embed("1F635-200D-1F4AB"), newline(),
        ])

    def test_legacy_embed_insert(self, registry):
        data = {"ops": [{"insert": {"emoji": {"value": SPIRAL_EYES}}}]}
        assert document_from_delta(data, registry).embeds() == [EmbedOp("1F635-200D-1F4AB")]

    @pytest.mark.parametrize("key", ["", None])
    def test_legacy_embed_with_empty_key(self, registry, key):
        data = {"ops": [
            {"insert": {"emoji": {"key": key, "value": GRINNING, "source": ""}}},
        ]}
        assert document_from_delta(data, registry) == Document([embed("1F600")])

    def test_empty_key_and_value(self, registry):
        data = {"ops": [{"insert": {"emoji": {"key": "", "value": None}}}]}
        with pytest.raises(MalformedDocument):
            document_from_delta(data, registry)

    def test_badly_shaped_key_is_unknown(self, registry):
        data = {"ops": [{"insert": {"emoji": {"key": "1f600"}}}]}
        with pytest.raises(UnknownEmbedKey):
            document_from_delta(data, registry)

    @pytest.mark.parametrize("data", [
        {},
        {"ops": "text"},
        {"ops": [{"insert": ""}]},
        {"ops": [{"insert": 3}]},
        {"ops": [{"insert": "x", "extra": 1}]},
        {"ops": [{"insert": "x", "attributes": {"list": "checked"}}]},
        {"ops": [{"insert": {"image": "cat.png"}}]},
        {"ops": [{"insert": {"emoji": {"key": 1}}}]},
    ])
    def test_schema_violations(self, registry, data):
        with pytest.raises(MalformedDocument):
            document_from_delta(data, registry)


class TestDocumentToDelta:

    def test_sample_document(self, sample_document):
        payload = document_to_delta(sample_document)
        assert payload["ops"][0] == {"insert": "Hello "}
        assert payload["ops"][1] == {"insert": "world", "attributes": {"bold": True}}
        assert payload["ops"][3] == {
            "insert": {"emoji": {"key": "1F635-200D-1F4AB", "source": ""}},
        }
        assert payload["ops"][6] == {"insert": "\n", "attributes": {"list": "ordered"}}
        assert payload["ops"][-1] == {"insert": "\n", "attributes": {"blockquote": True}}

    def test_output_is_ascii(self, sample_document):
        encoded = json.dumps(document_to_delta(sample_document), ensure_ascii=False)
        assert encoded.isascii()

    def test_reloads_to_same_document(self, registry, sample_document):
        assert document_from_delta(document_to_delta(sample_document), registry) == sample_document

    def test_malformed_document_rejected(self):
        with pytest.raises(MalformedDocument):
            document_to_delta(Document([text("a\nb")]))
