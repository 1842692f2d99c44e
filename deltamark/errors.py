"""Exception types raised by the registry, the emitter and the adapters.

WHY: Callers (usually the editor adapter) must tell an unknown stored key
apart from an unrecognized pasted glyph and from a structurally broken
document, because each gets a different user-visible fallback.

HOW: A small hierarchy rooted at DeltamarkError. Lookup failures also
derive from LookupError and invariant failures from ValueError so generic
handlers keep working.

RULES:
- None of these are fatal to the process
- Lookup errors carry the offending key or value
- The markdown parser never raises any of these for malformed markdown
"""

from __future__ import annotations


class DeltamarkError(Exception):
    """Base class for all deltamark errors."""


class UnknownEmbedKey(DeltamarkError, LookupError):
    """Raised when a variant key has no entry in the embed registry.

    WHY: A stored document may reference an emoji the current dataset
    does not know. Substituting a placeholder would silently corrupt the
    document on the next save.

    RULES:
    - Never replaced by a default glyph inside the registry
    - ``key`` holds the key exactly as requested
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__("Unknown embed key: {!r}".format(key))


class UnrecognizedEmbedValue(DeltamarkError, LookupError):
    """Raised when a glyph is not a known emoji value.

    WHY: Users type or paste characters that merely look like emoji.
    The registry must not decide on its own to treat them as plain text;
    the caller does.
    """

    def __init__(self, value: str) -> None:
        self.value = value
        codepoints = "-".join("{:X}".format(ord(c)) for c in value)
        super().__init__("Unrecognized embed value: {!r} ({})".format(value, codepoints))


class MalformedDocument(DeltamarkError, ValueError):
    """Raised when a document breaks the operation invariants.

    Examples: a text operation containing an embedded newline, an empty
    text run, a block attribute on a non-newline run, or a stored embed
    carrying neither a key nor a value.
    """
