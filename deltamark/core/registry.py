"""Emoji embed registry: ASCII variant keys ↔ glyph values.

WHY: A rendered emoji may be a multi-codepoint sequence (zero-width
joiners, skin-tone modifiers, variation selectors). Storage and transport
layers with weak Unicode handling can split or drop parts of it. The
registry gives every known glyph a stable ASCII key so only the key has to
cross those boundaries.

HOW: EmbedRegistry holds two dicts (key → EmbedValue, glyph → key) plus a
first-character index used for longest-match scanning. The shared
instance is built once from the ``emoji`` distribution's EMOJI_DATA,
filtered by the configured qualification statuses, and never mutated.

RULES:
- A key is the glyph's codepoints as uppercase hex, joined with "-"
- resolve_key / resolve_value raise; they never return placeholders
- get_registry() builds the shared instance exactly once, under a lock
- Encoders use resolve_value, decoders use resolve_key
"""

from __future__ import annotations

import logging
import re
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

import emoji

from deltamark.config import load_emoji_qualifications
from deltamark.errors import UnknownEmbedKey, UnrecognizedEmbedValue

logger = logging.getLogger(__name__)

_VARIANT_KEY_RE = re.compile(r"^[0-9A-F]{1,6}(?:-[0-9A-F]{1,6})*$")

# emoji.STATUS maps status name → int; EMOJI_DATA stores the int.
_STATUS_NAMES = {code: name for name, code in emoji.STATUS.items()}


def variant_key(glyph: str) -> str:
    """Derive the ASCII variant key for a glyph, e.g. "1F635-200D-1F4AB"."""
    if not glyph:
        raise ValueError("Cannot derive a variant key from an empty glyph")
    return "-".join("{:X}".format(ord(char)) for char in glyph)


def is_variant_key(text: str) -> bool:
    """Return True if *text* has the variant key shape (not whether it is known)."""
    return bool(_VARIANT_KEY_RE.match(text))


@dataclass(frozen=True)
class EmbedValue:
    """One emoji variant: its key, its glyph and dataset metadata.

    RULES:
    - key == variant_key(value), always
    - name is the CLDR short name without colons, e.g. "face_with_spiral_eyes"
    - qualification is a Unicode status name ("fully_qualified", ...)
    - version is the Emoji version that introduced the glyph
    """

    key: str
    value: str
    name: str = ""
    qualification: str = "fully_qualified"
    version: float = 0.0
    aliases: tuple[str, ...] = field(default_factory=tuple)

    @property
    def codepoint_count(self) -> int:
        return len(self.value)


class EmbedRegistry:
    """Read-only bidirectional map between variant keys and emoji values.

    WHY: The registry is the single point of truth for the key/glyph
    mapping. Neither the emitter nor the parser may re-derive it ad hoc.

    HOW: Built from an iterable of EmbedValue. Besides the two lookup
    dicts it keeps, per leading character, the glyphs starting with that
    character ordered longest first, so match_at() can find the longest
    known glyph at a text position without a giant regex alternation.

    RULES:
    - Duplicate keys or values in the input raise ValueError
    - Every entry's key must equal variant_key(entry.value)
    """

    def __init__(self, entries: Iterable[EmbedValue]) -> None:
        self._by_key: dict[str, EmbedValue] = {}
        self._by_value: dict[str, str] = {}
        by_lead: dict[str, list[str]] = defaultdict(list)

        for entry in entries:
            if entry.key != variant_key(entry.value):
                raise ValueError(
                    "Key {!r} does not match glyph codepoints {!r}".format(
                        entry.key, variant_key(entry.value)
                    )
                )
            if entry.key in self._by_key:
                raise ValueError("Duplicate embed key: {}".format(entry.key))
            self._by_key[entry.key] = entry
            self._by_value[entry.value] = entry.key
            by_lead[entry.value[0]].append(entry.value)

        self._by_lead: dict[str, tuple[str, ...]] = {
            lead: tuple(sorted(values, key=len, reverse=True))
            for lead, values in by_lead.items()
        }

    @classmethod
    def from_emoji_data(cls, qualifications: Optional[Iterable[str]] = None) -> "EmbedRegistry":
        """Build a registry from the ``emoji`` package dataset.

        Args:
            qualifications: Status names to include. Defaults to the
                configured DELTAMARK_EMOJI_QUALIFICATIONS.
        """
        wanted = frozenset(qualifications) if qualifications is not None else load_emoji_qualifications()
        entries = []
        for glyph, data in emoji.EMOJI_DATA.items():
            status = _STATUS_NAMES.get(data.get("status"), "")
            if status not in wanted:
                continue
            entries.append(EmbedValue(
                key=variant_key(glyph),
                value=glyph,
                name=data.get("en", "").strip(":"),
                qualification=status,
                version=float(data.get("E", 0)),
                aliases=tuple(alias.strip(":") for alias in data.get("alias", [])),
            ))
        registry = cls(entries)
        logger.info(
            "Loaded %d emoji variants (%s)", len(registry), ", ".join(sorted(wanted))
        )
        return registry

    def resolve_key(self, key: str) -> EmbedValue:
        """Return the embed value for *key*; raise UnknownEmbedKey if absent."""
        try:
            entry = self._by_key[key]
        except KeyError:
            raise UnknownEmbedKey(key) from None
        logger.debug("Resolved embed key %s -> %r", key, entry.value)
        return entry

    def resolve_value(self, value: str) -> str:
        """Return the variant key for glyph *value*; raise UnrecognizedEmbedValue if unknown."""
        try:
            key = self._by_value[value]
        except KeyError:
            raise UnrecognizedEmbedValue(value) from None
        logger.debug("Resolved embed value %r -> %s", value, key)
        return key

    def match_at(self, text: str, index: int) -> Optional[str]:
        """Return the longest known glyph starting at ``text[index]``, or None."""
        candidates = self._by_lead.get(text[index]) if index < len(text) else None
        if not candidates:
            return None
        for candidate in candidates:
            if text.startswith(candidate, index):
                return candidate
        return None

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[EmbedValue]:
        return iter(self._by_key.values())


_shared_registry: Optional[EmbedRegistry] = None
_shared_lock = threading.Lock()


def get_registry() -> EmbedRegistry:
    """Return the process-wide registry, building it on first use.

    WHY: Several editor instances may start at the same time. Building the
    registry once, under a lock, avoids duplicate-registration races.
    """
    global _shared_registry
    if _shared_registry is None:
        with _shared_lock:
            if _shared_registry is None:
                _shared_registry = EmbedRegistry.from_emoji_data()
    return _shared_registry
