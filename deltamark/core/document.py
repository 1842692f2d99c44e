"""Operation-sequence document model shared by the editor and the codecs.

WHY: The live editor, the markdown emitter and the markdown parser need one
well-typed representation of rich text. An ordered list of operations (a
text run with inline styles, a line break with an optional block format,
or an atomic embed) is what the editor produces natively and is trivial to
walk left to right.

HOW: Two frozen dataclasses, TextOp and EmbedOp, and a Document wrapper
holding a tuple of them. Positional editing helpers (insert, delete,
format) never mutate; they return a fresh Document.

RULES:
- A newline op is a TextOp whose content is exactly "\\n"
- Only newline ops may carry a block format; it describes the line *before* it
- Non-newline text ops are non-empty and contain no "\\n"
- An embed occupies exactly one position and is never split
- Positions count text characters one each and embeds one each
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from deltamark.core.registry import is_variant_key
from deltamark.errors import MalformedDocument

NEWLINE = "\n"

OBJECT_REPLACEMENT = "\ufffc"
"""Stand-in character for an embed in plain text (one position per embed)."""


class InlineStyle(str, enum.Enum):
    """Character-level marks; values match the editor's attribute names."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


class BlockFormat(str, enum.Enum):
    """Line-level formats carried on the newline op that ends the line."""

    ORDERED_LIST = "ordered"
    BULLET_LIST = "bullet"
    BLOCKQUOTE = "blockquote"


class EmbedKind(str, enum.Enum):
    EMOJI = "emoji"


@dataclass(frozen=True)
class TextOp:
    """A run of text, or a line break when ``content == "\\n"``.

    ``attributes`` accepts any iterable of InlineStyle (or their string
    values) and is normalized to a frozenset, so attribute order never
    matters for equality.
    """

    content: str
    attributes: frozenset = field(default_factory=frozenset)
    block: Optional[BlockFormat] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "attributes", frozenset(InlineStyle(a) for a in self.attributes)
        )
        if self.block is not None:
            object.__setattr__(self, "block", BlockFormat(self.block))

    @property
    def is_newline(self) -> bool:
        return self.content == NEWLINE

    @property
    def length(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class EmbedOp:
    """An atomic embed referenced by its ASCII variant key.

    ``source`` is opaque metadata from the inserting UI (for example which
    picker produced the emoji); it is stored and restored unchanged.
    """

    key: str
    kind: EmbedKind = EmbedKind.EMOJI
    source: Optional[str] = None

    @property
    def length(self) -> int:
        return 1


Operation = Union[TextOp, EmbedOp]


def text(content: str, *styles: Union[InlineStyle, str]) -> TextOp:
    """Shorthand for a styled text run."""
    return TextOp(content, frozenset(styles))


def newline(block: Optional[Union[BlockFormat, str]] = None) -> TextOp:
    """Shorthand for a line break, optionally ending a formatted line."""
    return TextOp(NEWLINE, block=block)


def embed(key: str, source: Optional[str] = None) -> EmbedOp:
    """Shorthand for an emoji embed."""
    return EmbedOp(key, source=source)


@dataclass(frozen=True)
class Line:
    """One line of a document: its content ops and the newline ending it.

    ``terminator`` is None for a trailing line with no line break.
    """

    content: Tuple[Operation, ...]
    terminator: Optional[TextOp]

    @property
    def block(self) -> Optional[BlockFormat]:
        return self.terminator.block if self.terminator is not None else None


class Document:
    """An ordered, immutable sequence of operations.

    Insertion order is content order. Construction does not validate;
    call validate() (the emitter does) to enforce the invariants.
    """

    __slots__ = ("_ops",)

    def __init__(self, ops: Iterable[Operation] = ()) -> None:
        self._ops: Tuple[Operation, ...] = tuple(ops)

    @property
    def ops(self) -> Tuple[Operation, ...]:
        return self._ops

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._ops)

    def __len__(self) -> int:
        return len(self._ops)

    def __getitem__(self, index: int) -> Operation:
        return self._ops[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._ops == other._ops

    def __hash__(self) -> int:
        return hash(self._ops)

    def __repr__(self) -> str:
        return "Document({!r})".format(list(self._ops))

    # -- inspection ---------------------------------------------------------

    @property
    def length(self) -> int:
        """Length in editor positions (each embed counts as one)."""
        return sum(op.length for op in self._ops)

    def plain_text(self) -> str:
        """Text content with each embed shown as U+FFFC."""
        return "".join(
            op.content if isinstance(op, TextOp) else OBJECT_REPLACEMENT
            for op in self._ops
        )

    def embeds(self) -> List[EmbedOp]:
        return [op for op in self._ops if isinstance(op, EmbedOp)]

    def lines(self) -> List[Line]:
        """Group ops into lines, each ending at (and owning) a newline op."""
        lines: List[Line] = []
        current: List[Operation] = []
        for op in self._ops:
            if isinstance(op, TextOp) and op.is_newline:
                lines.append(Line(tuple(current), op))
                current = []
            else:
                current.append(op)
        if current:
            lines.append(Line(tuple(current), None))
        return lines

    def validate(self) -> None:
        """Raise MalformedDocument on the first invariant violation."""
        for index, op in enumerate(self._ops):
            if isinstance(op, EmbedOp):
                if not is_variant_key(op.key):
                    raise MalformedDocument(
                        "Op {}: embed key {!r} is not a variant key".format(index, op.key)
                    )
                continue
            if not isinstance(op, TextOp):
                raise MalformedDocument(
                    "Op {}: unsupported operation type {}".format(index, type(op).__name__)
                )
            if not op.content:
                raise MalformedDocument("Op {}: empty text run".format(index))
            if op.is_newline:
                continue
            if NEWLINE in op.content:
                raise MalformedDocument(
                    "Op {}: text run contains an embedded newline: {!r}".format(index, op.content)
                )
            if op.block is not None:
                raise MalformedDocument(
                    "Op {}: block format {} on a non-newline run".format(index, op.block.value)
                )

    def compact(self) -> "Document":
        """Merge adjacent text runs that share the same attributes."""
        merged: List[Operation] = []
        for op in self._ops:
            prev = merged[-1] if merged else None
            if (
                isinstance(op, TextOp) and not op.is_newline
                and isinstance(prev, TextOp) and not prev.is_newline
                and prev.attributes == op.attributes
            ):
                merged[-1] = replace(prev, content=prev.content + op.content)
            else:
                merged.append(op)
        return Document(merged)

    # -- positional editing -------------------------------------------------

    def _split_at(self, index: int) -> Tuple[List[Operation], List[Operation]]:
        """Split ops at a position, cutting a text run if needed."""
        if index < 0 or index > self.length:
            raise IndexError("Position {} outside document of length {}".format(index, self.length))
        before: List[Operation] = []
        after: List[Operation] = []
        position = 0
        for op in self._ops:
            end = position + op.length
            if end <= index:
                before.append(op)
            elif position >= index:
                after.append(op)
            else:
                # Only multi-character text runs can straddle the cut
                cut = index - position
                before.append(replace(op, content=op.content[:cut]))
                after.append(replace(op, content=op.content[cut:]))
            position = end
        return before, after

    def insert(self, index: int, ops: Sequence[Operation]) -> "Document":
        before, after = self._split_at(index)
        return Document(before + list(ops) + after)

    def delete(self, index: int, length: int) -> "Document":
        if length < 0:
            raise ValueError("Cannot delete a negative length")
        before, rest = self._split_at(index)
        _, after = Document(rest)._split_at(length)
        return Document(before + after)

    def format_text(self, index: int, length: int, style: Union[InlineStyle, str], enabled: bool = True) -> "Document":
        """Add or remove an inline style on the non-newline runs in a range."""
        style = InlineStyle(style)
        before, rest = self._split_at(index)
        middle, after = Document(rest)._split_at(length)
        styled: List[Operation] = []
        for op in middle:
            if isinstance(op, TextOp) and not op.is_newline:
                attrs = op.attributes | {style} if enabled else op.attributes - {style}
                op = replace(op, attributes=attrs)
            styled.append(op)
        return Document(before + styled + after)

    def format_line(self, index: int, block: Optional[Union[BlockFormat, str]]) -> "Document":
        """Set the block format of the line containing position *index*.

        If the line has no terminating newline one is appended, since a
        block format lives on the newline.
        """
        ops = list(self._ops)
        position = 0
        for i, op in enumerate(ops):
            if isinstance(op, TextOp) and op.is_newline and position >= index:
                ops[i] = replace(op, block=block)
                return Document(ops)
            position += op.length
        ops.append(newline(block))
        return Document(ops)
