"""Configuration constants and .env loading.

WHY: The emoji dataset filter, the default editor length limit and the CLI
log level are deployment choices, not code. Keeping them in one module
makes them easy to find and override.

HOW: python-dotenv loads the .env file on import. Constants are read from
the environment once, at module level. The load_*() helpers validate
values that need parsing and raise a clear ValueError otherwise.

RULES:
- Qualification names match the Unicode emoji-test.txt status names
- DELTAMARK_MAX_LENGTH unset or empty means "no limit"
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Emoji dataset
# ---------------------------------------------------------------------------

KNOWN_QUALIFICATIONS: frozenset[str] = frozenset({
    "component",
    "fully_qualified",
    "minimally_qualified",
    "unqualified",
})
"""Qualification statuses used by the Unicode emoji data files."""

DEFAULT_EMOJI_QUALIFICATIONS = "fully_qualified"

EMOJI_QUALIFICATIONS = os.getenv(
    "DELTAMARK_EMOJI_QUALIFICATIONS", DEFAULT_EMOJI_QUALIFICATIONS
)


def load_emoji_qualifications(raw: Optional[str] = None) -> frozenset[str]:
    """Parse the comma-separated qualification filter.

    WHY: Unqualified forms such as a bare "©" are ordinary text for most
    users. Restricting the dataset to fully-qualified glyphs keeps the
    parser from turning them into embeds. Components (bare skin-tone and
    hair modifiers) are left out by default because a component embed
    written next to another emoji reads back as one combined glyph.

    RULES:
    - Whitespace around names is ignored, names are lowercased
    - Unknown names raise ValueError
    - An empty filter raises ValueError (an empty registry is useless)
    """
    if raw is None:
        raw = EMOJI_QUALIFICATIONS
    names = frozenset(
        part.strip().lower().replace("-", "_")
        for part in raw.split(",")
        if part.strip()
    )
    if not names:
        raise ValueError("DELTAMARK_EMOJI_QUALIFICATIONS must name at least one status.")
    unknown = names - KNOWN_QUALIFICATIONS
    if unknown:
        raise ValueError(
            "Unknown emoji qualification(s): {}. Known: {}".format(
                ", ".join(sorted(unknown)), ", ".join(sorted(KNOWN_QUALIFICATIONS))
            )
        )
    return names


# ---------------------------------------------------------------------------
# Editor defaults
# ---------------------------------------------------------------------------

NEAR_LIMIT_RATIO = 0.9
"""Fraction of the length limit at which the character counter warns."""


def load_max_length(raw: Optional[str] = None) -> Optional[int]:
    """Read the default editor length limit from DELTAMARK_MAX_LENGTH.

    RULES:
    - Unset or empty → None (no limit)
    - Must parse as a positive integer, otherwise ValueError
    """
    if raw is None:
        raw = os.getenv("DELTAMARK_MAX_LENGTH", "")
    raw = raw.strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            "DELTAMARK_MAX_LENGTH must be an integer, got {!r}.".format(raw)
        ) from None
    if value <= 0:
        raise ValueError("DELTAMARK_MAX_LENGTH must be positive, got {}.".format(value))
    return value


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("DELTAMARK_LOG_LEVEL", "WARNING").upper()


def load_log_level(raw: Optional[str] = None) -> int:
    """Map DELTAMARK_LOG_LEVEL to a logging level number."""
    name = (raw or LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError("Unknown log level: {!r}".format(name))
    return level
