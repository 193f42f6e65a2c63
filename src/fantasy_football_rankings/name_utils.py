"""Player name normalization utilities for cross-source matching."""

from __future__ import annotations

import re
import unicodedata

_SUFFIX_PATTERN = re.compile(r"\s+(jr|sr|ii|iii|iv|v)$")


def normalize_name(name: str) -> str:
    """Normalize a player name for duplicate detection.

    - Removes accents/diacritics via NFD decomposition
    - Converts to lowercase
    - Removes periods and apostrophes (for Jr./A.J./Ja'Marr)
    - Drops generational suffixes (Jr, Sr, II, III, IV, V)
    - Collapses whitespace

    Args:
        name: Raw player name from any source.

    Returns:
        Normalized lowercase name suitable for dictionary-key matching.
    """
    normalized = unicodedata.normalize("NFD", name)
    normalized = "".join(c for c in normalized if unicodedata.category(c) != "Mn")
    normalized = normalized.lower()
    normalized = re.sub(r"[.'’]", "", normalized)
    normalized = " ".join(normalized.split())
    return _SUFFIX_PATTERN.sub("", normalized)


def player_key(name: str, team: str) -> str:
    """Identity key used for duplicate detection: normalized name plus team."""
    return f"{normalize_name(name)}|{team.strip().upper()}"
