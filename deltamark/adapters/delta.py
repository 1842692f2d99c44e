"""Adapter: Document ↔ delta JSON, and stored-embed reconstruction.

WHY: Host editors exchange content as a JSON list of insert operations
("delta" shape). Emoji embeds inside that JSON were historically stored
as raw glyphs, which some storage layers corrupted; newer data stores the
ASCII variant key. This adapter bridges the JSON shape and the Document
model and handles both embed formats.

HOW: document_from_delta validates the payload with jsonschema against
delta_schema.json, then walks the ops. String inserts are cut at every
"\\n" into text runs and newline ops; block attributes land on the newline
ops only. Embed inserts go through embed_from_stored, which prefers the
key and falls back to the legacy glyph, re-deriving the key through the
registry. document_to_delta writes the key form only.

RULES:
- Schema violations raise MalformedDocument (wrapping jsonschema's error)
- Inline attributes on a newline are dropped; block attributes on text are dropped
- The schema only types "key" and "value"; an empty or null key counts as absent
- Stored embed with a key → key used as-is (must be known to the registry)
- Stored embed without a key but with a value → key = resolve_value(value)
- Stored embed with neither → MalformedDocument
- Output never contains raw glyphs
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jsonschema

from deltamark.core.document import (
    NEWLINE,
    BlockFormat,
    Document,
    EmbedKind,
    EmbedOp,
    InlineStyle,
    Operation,
    TextOp,
)
from deltamark.core.registry import EmbedRegistry, get_registry
from deltamark.errors import MalformedDocument

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent / "delta_schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _block_from_attributes(attributes: Mapping[str, Any]) -> Optional[BlockFormat]:
    list_kind = attributes.get("list")
    if list_kind == "ordered":
        return BlockFormat.ORDERED_LIST
    if list_kind == "bullet":
        return BlockFormat.BULLET_LIST
    if attributes.get("blockquote"):
        return BlockFormat.BLOCKQUOTE
    return None


def _block_to_attributes(block: BlockFormat) -> Dict[str, Any]:
    if block is BlockFormat.BLOCKQUOTE:
        return {"blockquote": True}
    return {"list": block.value}


def embed_from_stored(
    payload: Mapping[str, Any],
    registry: Optional[EmbedRegistry] = None,
) -> EmbedOp:
    """Rebuild an emoji embed from its stored attributes.

    WHY: Older documents stored the raw glyph, newer ones the ASCII key.
    Both must load, and anything loaded must re-serialize in the safe
    key form.

    Raises:
        UnknownEmbedKey: The stored key is not in the registry.
        UnrecognizedEmbedValue: Legacy glyph is not a known emoji.
        MalformedDocument: Neither a key nor a value is present.
    """
    if registry is None:
        registry = get_registry()
    key = payload.get("key")
    source = payload.get("source") or None

    if key:
        registry.resolve_key(key)
        return EmbedOp(key, EmbedKind.EMOJI, source)

    value = payload.get("value")
    if value:
        key = registry.resolve_value(value)
        logger.warning("Embed stored as raw glyph (legacy format); re-keyed as %s", key)
        return EmbedOp(key, EmbedKind.EMOJI, source)

    raise MalformedDocument("Stored embed is missing both its key and its value")


def embed_to_stored(op: EmbedOp) -> Dict[str, Any]:
    """Stored attributes for an embed: the ASCII key and the source."""
    return {"key": op.key, "source": op.source or ""}


def document_from_delta(
    data: Mapping[str, Any],
    registry: Optional[EmbedRegistry] = None,
) -> Document:
    """Build a Document from a delta JSON payload (already decoded).

    Raises:
        MalformedDocument: The payload fails schema validation or an
            embed has neither key nor value.
        UnknownEmbedKey / UnrecognizedEmbedValue: An embed is not in
            the registry.
    """
    try:
        jsonschema.validate(instance=data, schema=_get_schema())
    except jsonschema.ValidationError as exc:
        raise MalformedDocument("Invalid delta: {}".format(exc.message)) from exc

    if registry is None:
        registry = get_registry()
    ops: List[Operation] = []

    for raw in data["ops"]:
        insert = raw["insert"]
        attributes = raw.get("attributes") or {}

        if isinstance(insert, dict):
            ops.append(embed_from_stored(insert["emoji"], registry))
            continue

        styles = frozenset(s for s in InlineStyle if attributes.get(s.value))
        block = _block_from_attributes(attributes)
        pieces = insert.split(NEWLINE)
        for i, piece in enumerate(pieces):
            if piece:
                ops.append(TextOp(piece, styles))
            if i < len(pieces) - 1:
                ops.append(TextOp(NEWLINE, block=block))

    return Document(ops)


def document_to_delta(document: Document) -> Dict[str, Any]:
    """Serialize a Document to a delta JSON payload (not yet encoded)."""
    document.validate()
    ops: List[Dict[str, Any]] = []
    for op in document:
        if isinstance(op, EmbedOp):
            ops.append({"insert": {op.kind.value: embed_to_stored(op)}})
            continue
        entry: Dict[str, Any] = {"insert": op.content}
        if op.is_newline:
            if op.block is not None:
                entry["attributes"] = _block_to_attributes(op.block)
        elif op.attributes:
            entry["attributes"] = {
                style.value: True
                for style in InlineStyle
                if style in op.attributes
            }
        ops.append(entry)
    return {"ops": ops}
