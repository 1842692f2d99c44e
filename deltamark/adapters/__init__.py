"""Adapters between the Document model and external representations.

WHY: Host editors and storage speak their own formats (delta JSON, DOM
attributes). Adapters bridge them to the Document model so the codec and
the registry stay format-agnostic.

RULES:
- Adapters are pure data transformations with no I/O beyond their bundled schema
- Adapters never emit raw emoji glyphs; only ASCII variant keys
"""

from deltamark.adapters.delta import (
    document_from_delta,
    document_to_delta,
    embed_from_stored,
    embed_to_stored,
)

__all__ = [
    "document_from_delta",
    "document_to_delta",
    "embed_from_stored",
    "embed_to_stored",
]
