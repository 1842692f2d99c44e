"""Editor adapter contract and an in-memory reference editor.

WHY: The live editor owns the Document and drives the codec on every
edit. Calling code (composers, emoji pickers) only needs a narrow
surface: insert text, insert an emoji, hear about changes. Pinning that
surface down lets any host editor plug in, and the in-memory
DocumentEditor gives tests and headless tools a faithful implementation.

HOW: EditorAdapter is an ABC with the boundary operations. DocumentEditor
keeps an immutable Document plus a cursor. Every edit builds a candidate
Document and goes through _commit(), which enforces the length limit
transactionally and then notifies subscribers synchronously with the
markdown projection and the trimmed plain-text length.

RULES:
- Undefined cursor → insert at the end of the document, before a final newline
- insert_emoji inserts an EmbedOp and advances the cursor by exactly 1
- insert_text turns "\\n" into plain newline ops; cursor advances by len(text)
- An edit that grows the trimmed text length past max_length is reverted
  whole: the previous Document and cursor stay, no notification fires
- Registry/emission errors leave the Document unchanged and propagate
- Committed Documents are compacted: adjacent runs with equal styles merge
- Handlers may be added, removed or replaced at any time
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from deltamark.config import NEAR_LIMIT_RATIO, load_max_length
from deltamark.core.document import (
    NEWLINE,
    BlockFormat,
    Document,
    EmbedOp,
    InlineStyle,
    Operation,
    TextOp,
)
from deltamark.core.registry import EmbedRegistry, get_registry, is_variant_key
from deltamark.markdown.emitter import MarkdownEmitter
from deltamark.markdown.parser import MarkdownParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """Payload delivered to change handlers after a committed edit."""

    markdown: str
    text_length: int
    max_length: Optional[int] = None

    @property
    def near_limit(self) -> bool:
        """True once the counter reaches 90% of the limit."""
        if not self.max_length:
            return False
        return self.text_length >= self.max_length * NEAR_LIMIT_RATIO


ChangeHandler = Callable[[ChangeEvent], None]


class EditorAdapter(ABC):
    """Boundary between calling code and a live rich-text editor.

    To plug in a host editor:
    1. Subclass EditorAdapter
    2. Implement insert_text(), insert_emoji() and subscribe()
    3. Route every committed edit through MarkdownEmitter and notify
    """

    @abstractmethod
    def insert_text(self, text: str) -> None:
        """Insert plain text at the cursor (end of document if undefined)."""

    @abstractmethod
    def insert_emoji(self, glyph_or_key: str) -> None:
        """Insert an emoji as one atomic embed at the cursor."""

    @abstractmethod
    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """Register a change handler; return a callable that removes it."""


class DocumentEditor(EditorAdapter):
    """In-memory editor holding a Document and a cursor.

    Args:
        initial_markdown: Markdown used to hydrate the initial Document.
        max_length: Limit on the trimmed plain-text length, or None.
        registry: Embed registry; defaults to the shared one.
        on_change: Optional first change handler.
    """

    def __init__(
        self,
        initial_markdown: str = "",
        max_length: Optional[int] = None,
        registry: Optional[EmbedRegistry] = None,
        on_change: Optional[ChangeHandler] = None,
    ) -> None:
        self._registry = registry if registry is not None else get_registry()
        self._emitter = MarkdownEmitter(self._registry)
        self.max_length = max_length
        self._document = MarkdownParser(self._registry).parse(initial_markdown)
        self._selection: Optional[int] = None
        self._handlers: List[ChangeHandler] = []
        if on_change is not None:
            self._handlers.append(on_change)

    @classmethod
    def from_config(cls, initial_markdown: str = "", **kwargs) -> "DocumentEditor":
        """Build an editor whose length limit comes from DELTAMARK_MAX_LENGTH."""
        return cls(initial_markdown, max_length=load_max_length(), **kwargs)

    # -- inspection ---------------------------------------------------------

    @property
    def document(self) -> Document:
        return self._document

    @property
    def selection(self) -> Optional[int]:
        return self._selection

    @property
    def markdown(self) -> str:
        return self._emitter.emit(self._document)

    @property
    def text(self) -> str:
        """Trimmed plain text; embeds count as one character each."""
        return self._document.plain_text().strip()

    @property
    def character_count(self) -> int:
        return len(self.text)

    # -- cursor -------------------------------------------------------------

    def set_selection(self, index: Optional[int]) -> None:
        if index is not None and not 0 <= index <= self._document.length:
            raise IndexError(
                "Selection {} outside document of length {}".format(index, self._document.length)
            )
        self._selection = index

    def _cursor(self) -> int:
        if self._selection is not None:
            return self._selection
        ops = self._document.ops
        end = self._document.length
        if ops and isinstance(ops[-1], TextOp) and ops[-1].is_newline:
            return end - 1
        return end

    # -- notification -------------------------------------------------------

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def _notify(self, event: ChangeEvent) -> None:
        # Copy so handlers can unsubscribe themselves mid-dispatch
        for handler in list(self._handlers):
            handler(event)

    # -- editing ------------------------------------------------------------

    def _commit(self, candidate: Document, selection: Optional[int]) -> bool:
        """Adopt *candidate* unless it breaks the length limit.

        Returns:
            True if the edit was committed, False if it was reverted.
        """
        candidate = candidate.compact()
        markdown = self._emitter.emit(candidate)
        new_length = len(candidate.plain_text().strip())
        if self.max_length and new_length > self.max_length:
            if new_length > self.character_count:
                logger.warning(
                    "Edit reverted: %d characters exceeds limit of %d",
                    new_length, self.max_length,
                )
                return False
        self._document = candidate
        self._selection = selection
        self._notify(ChangeEvent(markdown, new_length, self.max_length))
        return True

    def insert_text(self, text: str) -> None:
        if not text:
            return
        index = self._cursor()
        ops: List[Operation] = []
        pieces = text.split(NEWLINE)
        for i, piece in enumerate(pieces):
            if piece:
                ops.append(TextOp(piece))
            if i < len(pieces) - 1:
                ops.append(TextOp(NEWLINE))
        self._commit(self._document.insert(index, ops), index + len(text))

    def insert_emoji(self, glyph_or_key: str, source: Optional[str] = None) -> None:
        """Insert an emoji by glyph or by variant key.

        Raises:
            UnrecognizedEmbedValue: The glyph is not a known emoji.
            UnknownEmbedKey: A key-shaped argument is not in the registry.
        """
        if is_variant_key(glyph_or_key):
            key = self._registry.resolve_key(glyph_or_key).key
        else:
            key = self._registry.resolve_value(glyph_or_key)
        index = self._cursor()
        self._commit(self._document.insert(index, [EmbedOp(key, source=source)]), index + 1)

    def delete(self, index: int, length: int) -> None:
        self._commit(self._document.delete(index, length), index)

    def format_text(
        self,
        index: int,
        length: int,
        style: Union[InlineStyle, str],
        enabled: bool = True,
    ) -> None:
        self._commit(
            self._document.format_text(index, length, style, enabled), self._selection
        )

    def format_line(self, index: int, block: Optional[Union[BlockFormat, str]]) -> None:
        self._commit(self._document.format_line(index, block), self._selection)

    def set_markdown(self, markdown: str) -> None:
        """Replace the whole document, as on load; the cursor is cleared."""
        self._commit(MarkdownParser(self._registry).parse(markdown), None)

